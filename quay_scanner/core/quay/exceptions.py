"""
Exceptions raised by the Quay API client.
"""

from typing import Any, Optional


class QuayError(Exception):
    """Base class for all Quay client errors."""


class ClientConfigError(QuayError):
    """Raised when the client cannot be constructed from the given settings."""


class ClientError(QuayError):
    """Base class for errors raised while talking to the Quay API.

    ``report`` holds any partial vulnerability report retrieved before the
    failure, so callers can still present it.
    """

    def __init__(self, message: str, report: Optional[Any] = None):
        super().__init__(message)
        self.report = report


class NetworkError(ClientError):
    """Transport failure or timeout."""

    def __init__(self, url: str, cause: BaseException):
        super().__init__(f"failed to execute request to {url}: {cause}")
        self.url = url
        self.cause = cause


class RequestFailed(ClientError):
    """The API answered with a non-2xx status."""

    def __init__(self, url: str, status: int, reason: str = "", body_snippet: str = ""):
        status_text = f"{status} {reason}".strip()
        super().__init__(
            f"API request to {url} failed with status {status_text}. Body snippet: {body_snippet}"
        )
        self.url = url
        self.status = status
        self.reason = reason
        self.body_snippet = body_snippet


class ResponseDecodeError(ClientError):
    """A successful response did not contain a JSON object."""

    def __init__(self, url: str, detail: str):
        super().__init__(f"failed to decode JSON response from {url}: {detail}")
        self.url = url


class TagNotFound(ClientError):
    """The tag does not exist, or the repository is private/inaccessible."""

    def __init__(self, repository: str, tag: str):
        super().__init__(
            f"tag '{tag}' not found in repository '{repository}' (or repository is private/inaccessible)"
        )
        self.repository = repository
        self.tag = tag


class DigestNotFound(ClientError):
    """The tag detail carried neither a manifest digest nor an image id."""

    def __init__(self, repository: str, tag: str):
        super().__init__(
            f"could not determine image digest for tag '{tag}' in repository '{repository}' "
            "(no manifest_digest or docker_image_id found)"
        )
        self.repository = repository
        self.tag = tag


class ReportNotFound(ClientError):
    """No security information exists for the digest."""

    def __init__(self, repository: str, digest: str):
        super().__init__(
            f"security information not found for image digest '{digest}' in repository '{repository}' "
            "(image may not exist or scan data unavailable)"
        )
        self.repository = repository
        self.digest = digest
