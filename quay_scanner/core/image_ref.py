"""
Image reference parsing for Quay Scanner.

Turns strings such as ``quay.io/coreos/etcd:v3.5.0`` into the repository and
tag pair used by the Quay API. Parsing is pure: no network or filesystem access.
"""

from dataclasses import dataclass

DEFAULT_REGISTRY_HOST = "quay.io"

__all__ = [
    "DEFAULT_REGISTRY_HOST",
    "ImageReference",
    "ParseError",
    "BadPrefix",
    "BadFormat",
    "InvalidChars",
    "parse_image_ref",
]


class ParseError(ValueError):
    """Base class for malformed image reference strings."""


class BadPrefix(ParseError):
    """The reference does not start with the expected registry host."""


class BadFormat(ParseError):
    """The reference is not of the form ``<host>/<repository>:<tag>``."""


class InvalidChars(ParseError):
    """Repository or tag contains path traversal or a slash in the tag."""


@dataclass(frozen=True)
class ImageReference:
    """A validated repository and tag pair."""
    repository: str
    tag: str
    registry: str = DEFAULT_REGISTRY_HOST

    def __str__(self) -> str:
        return f"{self.registry}/{self.repository}:{self.tag}"


def parse_image_ref(raw: str, registry_host: str = DEFAULT_REGISTRY_HOST) -> ImageReference:
    """Parse a registry image string into an :class:`ImageReference`.

    The repository and tag are split on the first ``:`` after the registry
    prefix is removed.

    Args:
        raw: Image reference, e.g. ``quay.io/coreos/etcd:v3.5.0``
        registry_host: Registry host the reference must start with

    Returns:
        The parsed reference

    Raises:
        BadPrefix: If ``raw`` does not start with ``<registry_host>/``
        BadFormat: If repository or tag is missing
        InvalidChars: If repository or tag contains ``..`` or the tag contains ``/``
    """
    host = (registry_host or DEFAULT_REGISTRY_HOST).rstrip('/')
    prefix = f"{host}/"
    if not isinstance(raw, str) or not raw.startswith(prefix):
        raise BadPrefix(f"image reference must start with '{prefix}'")

    repository, sep, tag = raw[len(prefix):].partition(':')
    if not sep or not repository or not tag:
        raise BadFormat(
            f"invalid image reference format. Expected '{prefix}repository/name:tag', got '{raw}'"
        )

    if '..' in repository or '..' in tag or '/' in tag:
        raise InvalidChars("invalid characters in repository or tag")

    return ImageReference(repository=repository, tag=tag, registry=host)
