"""
Custom exceptions for Freemius client library.
"""

from typing import Any, Dict, Optional

from .constants import UNKNOWN_ERROR_CODE, UNKNOWN_ERROR_HTTP, UNKNOWN_ERROR_TYPE


class FreemiusClientError(Exception):
    """Base exception for Freemius client errors."""
    pass


class ConfigurationError(FreemiusClientError):
    """Raised when client configuration or scope credentials are invalid."""
    pass


class ApiRequestError(FreemiusClientError):
    """
    Raised when a request fails at the API or transport level.

    Carries the structured error result (``{"error": {...}}``) when one is
    available, so the executor can map it onto an ``ApiError`` without
    guessing.
    """

    def __init__(self, message: str = "", result: Optional[Dict[str, Any]] = None):
        self.result = result if isinstance(result, dict) else None
        error = self._error_body()
        if not message:
            message = str(error.get('message', ''))
        super().__init__(message)

    def _error_body(self) -> Dict[str, Any]:
        if self.result and isinstance(self.result.get('error'), dict):
            return self.result['error']
        return {}

    @property
    def type(self) -> str:
        return str(self._error_body().get('type', UNKNOWN_ERROR_TYPE))

    @property
    def message(self) -> str:
        return str(self._error_body().get('message', self.args[0] if self.args else ''))

    @property
    def code(self) -> str:
        return str(self._error_body().get('code', UNKNOWN_ERROR_CODE))

    @property
    def http_status(self) -> int:
        try:
            return int(self._error_body().get('http', UNKNOWN_ERROR_HTTP))
        except (TypeError, ValueError):
            return UNKNOWN_ERROR_HTTP

    def to_api_error(self):
        """Build the typed error envelope for this failure."""
        from .result import ApiError

        return ApiError(
            type=self.type,
            message=self.message,
            code=self.code,
            http_status=self.http_status,
        )


class TransportError(ApiRequestError):
    """Raised when the HTTP request could not be completed."""
    pass
