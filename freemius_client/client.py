"""
Freemius API client.

This module provides the scoped client facade: it resolves resource paths
for the configured scope, signs requests with the scope's keys and returns
every response, including failures, as an ``ApiResult``.
"""

import datetime
import logging
import time
from email.utils import parsedate_to_datetime
from typing import Any, Callable, Dict, Optional, Union
from urllib.parse import urlencode

from .constants import DEFAULT_CONFIG, UNKNOWN_ERROR_HTTP
from .exceptions import ApiRequestError, ConfigurationError
from .executor import RequestExecutor
from .path import canonize_path, versioned_path
from .result import ApiError, ApiResult
from .scope import ScopeContext, ScopeKind
from .signer import Signer
from .transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)

PING_PATH = versioned_path('ping.json')


def _invalid_timestamp(message: str) -> ApiRequestError:
    error = ApiError(
        type='InvalidTimestamp',
        message=message,
        code='invalid_timestamp',
        http_status=UNKNOWN_ERROR_HTTP,
    )
    return ApiRequestError(message, result={'error': error.to_dict()})


def parse_timestamp(value: Union[str, int, float]) -> float:
    """
    Parse an API timestamp into epoch seconds.

    Accepts epoch numbers, ISO 8601 / 'YYYY-MM-DD HH:MM:SS' and RFC 2822
    strings. Values without an offset are taken as UTC.

    Raises:
        ValueError: If the value is not a recognizable timestamp
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip()
    try:
        moment = datetime.datetime.fromisoformat(text.replace('Z', '+00:00'))
    except ValueError:
        try:
            moment = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            raise ValueError(f"Invalid timestamp: {value!r}") from None

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    return moment.timestamp()


class ApiClient:
    """
    Scoped client for the Freemius REST API.

    Example:
        client = ApiClient('developer', 1234, 'pk_...', 'sk_...')
        tag = client.api('plugins/115/tags.json', 'POST',
                         {'add_contributor': True}, {'file': './my-plugin.zip'})
    """

    def __init__(self, scope: Union[ScopeKind, str], scope_id, public_key: str, secret_key: str,
                 sandbox: bool = False, transport: Optional[Transport] = None,
                 clock: Optional[Callable[[], float]] = None, **config):
        """
        Initialize client.

        Args:
            scope: 'app', 'developer', 'store', 'user', 'plugin' or 'install'
            scope_id: Element's id
            public_key: Public key
            secret_key: Element's secret key
            sandbox: Whether to run the API in sandbox mode
            transport: Custom transport (defaults to RequestsTransport)
            clock: Returns local epoch seconds (defaults to time.time)
            **config: Configuration options (timeout, max_retries, backoff_base,
                backoff_max, api_url, sandbox_api_url)

        Raises:
            ConfigurationError: On unknown scope, missing credentials or bad config
        """
        self.scope = ScopeContext.create(scope, scope_id, public_key, secret_key, sandbox)

        # Merge default config with user overrides
        self.config = {**DEFAULT_CONFIG, **config}
        self._validate_config()

        self.clock = clock or time.time
        self.signer = Signer(self.scope, clock=self.clock)

        self._owns_transport = transport is None
        if transport is None:
            transport = RequestsTransport(self.base_url, **self.config)
        self.transport = transport

        self.executor = RequestExecutor(self.scope, self.signer, self.transport)

    def _validate_config(self):
        """Validate client configuration."""
        if not self.config['api_url']:
            raise ConfigurationError("api_url cannot be empty")

        if not self.config['sandbox_api_url']:
            raise ConfigurationError("sandbox_api_url cannot be empty")

    @property
    def base_url(self) -> str:
        key = 'sandbox_api_url' if self.scope.sandbox else 'api_url'
        return self.config[key].rstrip('/')

    def is_sandbox(self) -> bool:
        return self.scope.sandbox

    def get_url(self, canonical_path: str = '') -> str:
        """Absolute URL of a canonical path."""
        return self.base_url + canonical_path

    def canonize_path(self, path: str) -> str:
        return str(canonize_path(self.scope, path))

    def api(self, path: str, method: str = 'GET', params: Optional[Dict[str, Any]] = None,
            file_params: Optional[Dict[str, Any]] = None) -> ApiResult:
        """
        Call a resource relative to the client's scope.

        Never raises for request failures: check ``result.error``.

        Args:
            path: Resource path, e.g. 'plugins/7/tags' or 'plugins/7.json?fields=id'
            method: GET, POST, PUT or DELETE
            params: Query (GET/DELETE) or body (POST/PUT) params
            file_params: Field name to local file path, for uploads

        Returns:
            ApiResult
        """
        return self.executor.execute(path, method, params, file_params)

    def _ping(self) -> ApiResult:
        return self.executor.execute_canonical(PING_PATH)

    def test(self) -> bool:
        """
        Check connectivity to the API using the ping endpoint.

        Returns:
            True if the API answered with a pong
        """
        pong = self._ping()
        return pong.get('api') == 'pong'

    def find_clock_diff(self) -> int:
        """
        Find the clock difference between this machine and the API server.

        Returns:
            Seconds the local clock is ahead of the server (negative if behind)

        Raises:
            ApiRequestError: If the ping failed or carried no usable timestamp
        """
        local_time = self.clock()
        pong = self._ping()

        if pong.error is not None:
            raise ApiRequestError(result=pong.data)

        timestamp = pong.get('timestamp')
        if timestamp is None:
            raise _invalid_timestamp("Ping response carries no timestamp")

        try:
            server_time = parse_timestamp(timestamp)
        except ValueError as e:
            raise _invalid_timestamp(str(e)) from e

        return int(round(local_time - server_time))

    def sync_clock(self) -> int:
        """
        Measure the clock difference and apply it to future signatures.

        Returns:
            The clock difference in seconds
        """
        clock_diff = self.find_clock_diff()
        self.signer.clock_diff = clock_diff
        logger.info("Clock difference with API server: %ds", clock_diff)
        return clock_diff

    def get_signed_url(self, path: str) -> str:
        """
        Build a pre-authorized download URL without issuing a request.

        The URL can be fetched by any HTTP client without further signing.

        Args:
            path: Resource path relative to the scope, e.g.
                'plugins/7/tags/99.zip?is_premium=true'

        Returns:
            Absolute signed URL
        """
        canonical = canonize_path(self.scope, path)
        auth = urlencode(self.signer.auth_params(canonical.path))
        separator = '&' if canonical.query_string else '?'
        return self.get_url(str(canonical)) + separator + auth

    def close(self):
        """Close the transport if the client created it."""
        if self._owns_transport and hasattr(self.transport, 'close'):
            self.transport.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
