"""
Quay API client.

Performs the two lookups needed to report on an image: tag -> manifest digest,
then digest -> security report. One instance is shared by all scanner workers;
it holds configuration only and no per-request state.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote, urljoin, urlparse

import requests

from quay_scanner.version import __version__
from .exceptions import (
    ClientConfigError,
    DigestNotFound,
    NetworkError,
    ReportNotFound,
    RequestFailed,
    ResponseDecodeError,
    TagNotFound,
)
from .models import TagDetail, VulnerabilityReport

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://quay.io/api/v1/"
DEFAULT_USER_AGENT = f"quay-scanner/{__version__}"
# Used when a non-positive timeout reaches the client
FALLBACK_TIMEOUT_SECONDS = 10
MAX_BODY_SNIPPET = 512
DIGEST_PREFIX = "sha256:"


def strip_digest_prefix(value: str) -> str:
    """Remove the ``sha256:`` scheme prefix from a digest, if present."""
    if value.startswith(DIGEST_PREFIX):
        return value[len(DIGEST_PREFIX):]
    return value


class QuayClient:
    """Client for the Quay v1 REST API."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        token: str | None = None,
        timeout: float = 15,
        user_agent: str | None = None,
    ):
        """Create a client.

        Args:
            base_url: API base URL, e.g. ``https://quay.io/api/v1/``
            token: Optional bearer token sent in the Authorization header
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header value

        Raises:
            ClientConfigError: If ``base_url`` is empty or not an http(s) URL
        """
        if not base_url:
            raise ClientConfigError("Quay API base URL cannot be empty")
        parsed = urlparse(base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ClientConfigError(f"invalid base URL '{base_url}'")
        # Trailing slash so relative paths resolve below the API root
        if not base_url.endswith("/"):
            base_url += "/"

        if timeout is None or timeout <= 0:
            logger.warning("Received invalid timeout %s, using fallback: %ss", timeout, FALLBACK_TIMEOUT_SECONDS)
            timeout = FALLBACK_TIMEOUT_SECONDS

        if not user_agent:
            logger.warning("No User-Agent provided to Quay client, using default: %s", DEFAULT_USER_AGENT)
            user_agent = DEFAULT_USER_AGENT

        self.base_url = base_url
        self.token = token or ""
        self.timeout = timeout
        self.user_agent = user_agent

    def _headers(self) -> Dict[str, str]:
        headers = {
            'Accept': 'application/json',
            'User-Agent': self.user_agent,
        }
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def _get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """GET ``path`` relative to the base URL and decode the JSON object body.

        Raises:
            NetworkError: On timeout or transport failure
            RequestFailed: On any non-2xx status
            ResponseDecodeError: If the body is not a JSON object
        """
        url = urljoin(self.base_url, path)
        logger.debug("GET %s params=%s", url, params)
        try:
            resp = requests.get(url, headers=self._headers(), params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(url, e) from e

        if not 200 <= resp.status_code < 300:
            snippet = (resp.content or b"")[:MAX_BODY_SNIPPET].decode("utf-8", errors="replace")
            raise RequestFailed(url, resp.status_code, resp.reason or "", snippet)

        try:
            body = resp.json()
        except ValueError as e:
            raise ResponseDecodeError(url, str(e)) from e
        if not isinstance(body, dict):
            raise ResponseDecodeError(url, f"expected a JSON object, got {type(body).__name__}")
        return body

    def resolve_digest(self, repository: str, tag: str) -> str:
        """Resolve a tag to its image digest (without the ``sha256:`` prefix).

        The manifest digest is preferred; the legacy docker image id is used when
        no manifest digest is present. Never returns an empty string.

        Raises:
            TagNotFound: If the API answers 404
            DigestNotFound: If the tag detail carries no usable identifier
            ClientError: For any other request failure
        """
        path = f"repository/{quote(repository, safe='/')}/tag/{quote(tag, safe='')}"
        try:
            data = self._get_json(path)
        except RequestFailed as e:
            if e.status == 404:
                raise TagNotFound(repository, tag) from e
            raise

        detail = TagDetail.from_dict(data)
        for candidate in (detail.manifest_digest, detail.docker_image_id):
            digest = strip_digest_prefix(candidate)
            if digest:
                logger.debug("Resolved %s:%s to digest %s", repository, tag, digest)
                return digest
        raise DigestNotFound(repository, tag)

    def fetch_vulnerabilities(self, repository: str, digest: str) -> VulnerabilityReport:
        """Fetch the security report for an image digest.

        A status other than ``scanned`` is returned as data, not raised.

        Raises:
            ReportNotFound: If the API answers 404
            ClientError: For any other request failure
        """
        path = f"repository/{quote(repository, safe='/')}/image/{quote(digest, safe='')}/security"
        try:
            data = self._get_json(path, params={'vulnerabilities': 'true'})
        except RequestFailed as e:
            if e.status == 404:
                raise ReportNotFound(repository, digest) from e
            raise

        report = VulnerabilityReport.from_dict(data)
        if not report.is_scanned:
            logger.warning(
                "Scan status for %s/%s is '%s'. Vulnerability data may be incomplete or unavailable.",
                repository, digest, report.status,
            )
        return report
