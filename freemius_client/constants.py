"""
Constants for Freemius client library.
Compatible with the Freemius REST API v1 wire contract.
"""

SDK_VERSION = "1.0.4"

# API path composition
API_VERSION = 1
FORMAT = "json"

# Base URLs
API_URL = "https://api.freemius.com"
SANDBOX_API_URL = "https://sandbox-api.freemius.com"

# HTTP Headers
HEADER_AUTHORIZATION = "Authorization"
HEADER_DATE = "Date"
HEADER_CONTENT_MD5 = "Content-MD5"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_USER_AGENT = "User-Agent"

USER_AGENT = f"freemius-client-python/{SDK_VERSION}"

# Authorization schemes: secret-key HMAC, or public-key hash when both keys match
AUTH_TYPE_SECRET = "FS"
AUTH_TYPE_PUBLIC = "FSP"

# Signed URL query parameters
PARAM_AUTHORIZATION = "authorization"
PARAM_AUTH_DATE = "auth_date"

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_MULTIPART = "multipart/form-data"

# Methods that carry a request body
BODY_METHODS = ("POST", "PUT")
SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")

# Status codes retried by the default transport
RETRY_STATUSES = (429, 502, 503, 504)

# Only idempotent requests are resent after reaching the server
RETRY_METHODS = ("GET", "PUT", "DELETE")

# Shape of errors synthesized for unexpected failures
UNKNOWN_ERROR_TYPE = "Unknown"
UNKNOWN_ERROR_CODE = "unknown"
UNKNOWN_ERROR_HTTP = 402

# Default configuration values
DEFAULT_CONFIG = {
    'timeout': 30,          # HTTP timeout in seconds
    'max_retries': 2,       # extra attempts for transient transport failures
    'backoff_base': 0.5,    # seconds, doubled per attempt
    'backoff_max': 8.0,     # upper bound for a single backoff sleep
    'api_url': API_URL,
    'sandbox_api_url': SANDBOX_API_URL,
}
