# Quay API client, response models and errors
from .client import QuayClient, DEFAULT_API_BASE_URL, DEFAULT_USER_AGENT
from .exceptions import (
    QuayError,
    ClientError,
    ClientConfigError,
    NetworkError,
    RequestFailed,
    ResponseDecodeError,
    TagNotFound,
    DigestNotFound,
    ReportNotFound,
)
from .models import TagDetail, Vulnerability, Feature, Layer, SecurityData, VulnerabilityReport

__all__ = [
    'QuayClient',
    'DEFAULT_API_BASE_URL',
    'DEFAULT_USER_AGENT',
    'QuayError',
    'ClientError',
    'ClientConfigError',
    'NetworkError',
    'RequestFailed',
    'ResponseDecodeError',
    'TagNotFound',
    'DigestNotFound',
    'ReportNotFound',
    'TagDetail',
    'Vulnerability',
    'Feature',
    'Layer',
    'SecurityData',
    'VulnerabilityReport',
]
