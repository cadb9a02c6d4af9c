"""
Request execution with uniform error normalization.

Every call returns an ``ApiResult``; failures of any origin are folded into
its ``{"error": {...}}`` envelope instead of being raised.
"""

import logging
import traceback
from typing import Any, Callable, Dict, Optional

from .constants import SUPPORTED_METHODS
from .exceptions import ApiRequestError, ConfigurationError
from .path import canonize_path
from .result import ApiError, ApiResult
from .scope import ScopeContext
from .signer import Signer
from .transport import Transport

logger = logging.getLogger(__name__)


def _describe(exc: BaseException) -> str:
    """'<message> (<file>: <line>)' for the frame that raised exc."""
    frames = traceback.extract_tb(exc.__traceback__)
    message = str(exc) or type(exc).__name__
    if not frames:
        return message
    origin = frames[-1]
    return f"{message} ({origin.filename}: {origin.lineno})"


class RequestExecutor:
    """Canonicalizes, signs and sends requests through a transport."""

    def __init__(self, scope: ScopeContext, signer: Signer, transport: Transport):
        self.scope = scope
        self.signer = signer
        self.transport = transport

    def execute(self, raw_path: str, method: str = 'GET',
                params: Optional[Dict[str, Any]] = None,
                file_params: Optional[Dict[str, Any]] = None) -> ApiResult:
        """Resolve raw_path against the scope, then execute it."""
        return self._run(lambda: str(canonize_path(self.scope, raw_path)),
                         method, params, file_params)

    def execute_canonical(self, canonical_path: str, method: str = 'GET',
                          params: Optional[Dict[str, Any]] = None,
                          file_params: Optional[Dict[str, Any]] = None) -> ApiResult:
        """
        Execute a request whose path is already canonical.

        Never raises except for ConfigurationError: API errors, transport
        failures, bad arguments and unexpected exceptions all come back as
        an ApiResult carrying an error.

        Args:
            canonical_path: Versioned API path, e.g. /v1/ping.json
            method: GET, POST, PUT or DELETE (any case)
            params: Request params
            file_params: Field name to local file path, for uploads

        Returns:
            ApiResult
        """
        return self._run(lambda: canonical_path, method, params, file_params)

    def _run(self, resolve_path: Callable[[], str], method, params, file_params) -> ApiResult:
        try:
            canonical_path = resolve_path()
            method = method.upper()
            if method not in SUPPORTED_METHODS:
                return ApiResult.from_error(ApiError(
                    type='InvalidArgument',
                    message=f"Unsupported HTTP method: {method}",
                    code='invalid_method',
                    http_status=400,
                ))

            envelope = self.signer.sign_request(method, canonical_path, params, file_params)
            raw = self.transport.invoke(
                envelope.canonical_path,
                envelope.method,
                envelope.params,
                envelope.file_params,
                envelope.headers,
            )
        except ConfigurationError:
            raise
        except ApiRequestError as e:
            logger.debug("%s request failed: %s", method, e)
            return ApiResult.from_error(e.to_api_error())
        except Exception as e:
            logger.warning("Unexpected error during %s request", method, exc_info=True)
            return ApiResult.from_error(ApiError.unknown(_describe(e)))

        if not isinstance(raw, str):
            raw = raw.decode('utf-8', errors='replace') if isinstance(raw, bytes) else str(raw)
        return ApiResult.from_raw(raw)
