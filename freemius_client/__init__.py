"""
Freemius Client Library

A Python client library for the scoped Freemius REST API: resolves resource
paths for a developer/app/user/install/store/plugin scope, signs requests and
returns every response, failures included, as an ``ApiResult``.

Example usage:
    from freemius_client import ApiClient

    client = ApiClient("developer", 1234, "pk_...", "sk_...")
    result = client.api("plugins/115/tags")
    if result.error:
        print(result.error.message)
"""

from .client import ApiClient, parse_timestamp
from .exceptions import (
    FreemiusClientError,
    ConfigurationError,
    ApiRequestError,
    TransportError
)
from .executor import RequestExecutor
from .path import CanonicalRequest, canonize_path
from .result import ApiError, ApiResult
from .scope import ScopeContext, ScopeKind
from .signer import Signer, SignedEnvelope, base64url_decode, base64url_encode
from .transport import RequestsTransport, Transport
from .constants import (
    API_VERSION,
    FORMAT,
    API_URL,
    SANDBOX_API_URL,
    DEFAULT_CONFIG,
    SDK_VERSION
)

__version__ = SDK_VERSION
__all__ = [
    "ApiClient",
    "parse_timestamp",
    "FreemiusClientError",
    "ConfigurationError",
    "ApiRequestError",
    "TransportError",
    "RequestExecutor",
    "CanonicalRequest",
    "canonize_path",
    "ApiError",
    "ApiResult",
    "ScopeContext",
    "ScopeKind",
    "Signer",
    "SignedEnvelope",
    "base64url_decode",
    "base64url_encode",
    "RequestsTransport",
    "Transport",
    "API_VERSION",
    "FORMAT",
    "API_URL",
    "SANDBOX_API_URL",
    "DEFAULT_CONFIG",
    "SDK_VERSION"
]
