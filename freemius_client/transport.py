"""
HTTP transport for signed API requests.

The executor only depends on the ``Transport`` protocol; ``RequestsTransport``
is the default implementation on top of a ``requests.Session``.
"""

import contextlib
import logging
from typing import Any, Dict, Mapping, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

from .constants import (
    BODY_METHODS,
    DEFAULT_CONFIG,
    HEADER_USER_AGENT,
    RETRY_METHODS,
    RETRY_STATUSES,
    USER_AGENT,
)
from .exceptions import ApiRequestError, ConfigurationError, TransportError
from .result import ApiError
from .signer import json_body

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Sends one request and returns the response body."""

    def invoke(self, canonical_path: str, method: str, params: Mapping[str, Any],
               file_params: Mapping[str, Any], headers: Mapping[str, str]) -> str:
        ...


class RequestsTransport:
    """
    Transport backed by requests with timeouts and bounded retry.

    Retries are handled by a urllib3 ``Retry`` mounted on the session.
    Connection failures are retried for every method, since nothing reached
    the server. Read timeouts and HTTP 429/502/503/504 are retried for
    idempotent methods only, so uploads and other POSTs are never resent.
    Any other response is returned as-is, error bodies included.
    """

    def __init__(self, base_url: str, **config):
        """
        Initialize transport.

        Args:
            base_url: API base URL, e.g. https://api.freemius.com
            **config: timeout, max_retries, backoff_base, backoff_max
        """
        self.base_url = base_url.rstrip('/')
        self.config = {**DEFAULT_CONFIG, **config}
        self._validate_config()

        self._closed = False
        self.retry = Retry(
            total=self.config['max_retries'],
            backoff_factor=self.config['backoff_base'],
            backoff_max=self.config['backoff_max'],
            status_forcelist=RETRY_STATUSES,
            allowed_methods=RETRY_METHODS,
            raise_on_status=False,
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(max_retries=self.retry)

        self.session = requests.Session()
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.session.headers[HEADER_USER_AGENT] = USER_AGENT

    def _validate_config(self):
        """Validate transport configuration."""
        if not self.base_url:
            raise ConfigurationError("base_url cannot be empty")

        if self.config['timeout'] <= 0:
            raise ConfigurationError("timeout must be positive")

        if self.config['max_retries'] < 0:
            raise ConfigurationError("max_retries cannot be negative")

        if self.config['backoff_base'] < 0 or self.config['backoff_max'] < 0:
            raise ConfigurationError("backoff values cannot be negative")

    def _send(self, method: str, url: str, params, file_params, headers) -> requests.Response:
        kwargs: Dict[str, Any] = {
            'headers': dict(headers),
            'timeout': self.config['timeout'],
        }

        with contextlib.ExitStack() as stack:
            if method in BODY_METHODS:
                if file_params:
                    kwargs['data'] = dict(params)
                    kwargs['files'] = {
                        name: stack.enter_context(open(path, 'rb'))
                        for name, path in file_params.items()
                    }
                else:
                    kwargs['data'] = json_body(params)
            elif params:
                kwargs['params'] = dict(params)

            return self.session.request(method, url, **kwargs)

    def invoke(self, canonical_path: str, method: str, params: Mapping[str, Any],
               file_params: Mapping[str, Any], headers: Mapping[str, str]) -> str:
        """
        Make the HTTP request.

        Args:
            canonical_path: Canonical API path with optional query string
            method: Uppercase HTTP method
            params: Query params (GET/DELETE) or body params (POST/PUT)
            file_params: Field name to local file path, for uploads
            headers: Authentication headers

        Returns:
            Response body text

        Raises:
            ApiRequestError: If the API returned an empty body
            TransportError: If the request could not be completed
        """
        if self._closed:
            raise _transport_error("Transport closed")

        url = self.base_url + canonical_path
        logger.debug("%s %s", method, url)

        try:
            response = self._send(method, url, params, file_params, headers)
        except requests.RequestException as e:
            logger.warning("Request to %s failed: %s", url, e)
            raise _transport_error(f"HTTP request failed: {e}") from e

        body = response.text
        if not body:
            raise ApiRequestError("Empty API result", result={'error': {
                'type': 'EmptyResult',
                'message': 'Empty API result',
                'code': 'empty_result',
                'http': response.status_code,
            }})
        return body

    def close(self):
        """Close HTTP session and refuse further requests."""
        self._closed = True
        if self.session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def _transport_error(message: str) -> TransportError:
    return TransportError(message, result={'error': ApiError.unknown(message).to_dict()})
