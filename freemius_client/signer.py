"""
Request signing for the Freemius API.

Signatures are HMAC-SHA256 over a newline-joined canonical string
(method, content MD5, content type, date, resource path), keyed by the
scope's secret key and transported as URL-safe base64.
"""

import base64
import datetime
import hashlib
import hmac
import json
import time
from dataclasses import dataclass, field
from email.utils import format_datetime
from typing import Any, Callable, Dict, Optional

from .constants import (
    AUTH_TYPE_PUBLIC,
    AUTH_TYPE_SECRET,
    BODY_METHODS,
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_MULTIPART,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_MD5,
    HEADER_CONTENT_TYPE,
    HEADER_DATE,
    PARAM_AUTH_DATE,
    PARAM_AUTHORIZATION,
)
from .exceptions import ConfigurationError
from .scope import ScopeContext


def base64url_encode(data: bytes) -> str:
    """
    Base64 encoding that does not need to be URL-quoted.

    Same as standard base64 except '-' replaces '+', '_' replaces '/' and
    '=' padding is dropped.
    """
    encoded = base64.b64encode(data).decode('ascii')
    return encoded.replace('+', '-').replace('/', '_').rstrip('=')


def base64url_decode(data: str) -> bytes:
    """Inverse of base64url_encode; tolerates missing or present padding."""
    standard = data.replace('-', '+').replace('_', '/').rstrip('=')
    standard += '=' * (-len(standard) % 4)
    return base64.b64decode(standard)


def json_body(params: Optional[Dict[str, Any]]) -> bytes:
    """Serialize request params exactly as they are signed and sent."""
    return json.dumps(params or {}, separators=(',', ':')).encode('utf-8')


def body_md5(params: Optional[Dict[str, Any]]) -> str:
    """Hex MD5 of the JSON body built from params."""
    return hashlib.md5(json_body(params)).hexdigest()


def http_date(timestamp: float) -> str:
    """RFC 2822 date in UTC, e.g. 'Sun, 18 Oct 2026 10:00:00 +0000'."""
    moment = datetime.datetime.fromtimestamp(timestamp, datetime.timezone.utc)
    return format_datetime(moment)


@dataclass(frozen=True)
class SignedEnvelope:
    """Everything the transport needs to send one authenticated request."""

    canonical_path: str
    method: str
    params: Dict[str, Any] = field(default_factory=dict)
    file_params: Dict[str, Any] = field(default_factory=dict)
    auth_token: str = ''
    date: str = ''
    content_md5: str = ''
    content_type: str = ''

    @property
    def headers(self) -> Dict[str, str]:
        headers = {
            HEADER_AUTHORIZATION: self.auth_token,
            HEADER_DATE: self.date,
        }
        if self.content_md5:
            headers[HEADER_CONTENT_MD5] = self.content_md5
        # Multipart boundaries are chosen by the transport.
        if self.content_type == CONTENT_TYPE_JSON:
            headers[HEADER_CONTENT_TYPE] = self.content_type
        return headers


class Signer:
    """
    Derives authorization tokens for a scope.

    The secret key never leaves the process: only the token
    'FS {id}:{public_key}:{signature}' is transmitted.
    """

    def __init__(self, scope: ScopeContext, clock: Optional[Callable[[], float]] = None,
                 clock_diff: float = 0):
        """
        Initialize signer.

        Args:
            scope: Scope credentials
            clock: Returns local time in epoch seconds (defaults to time.time)
            clock_diff: Seconds the local clock runs ahead of the API server
        """
        if not scope.secret_key or not scope.public_key:
            raise ConfigurationError("scope credentials are incomplete")

        self.scope = scope
        self.clock = clock or time.time
        self.clock_diff = clock_diff

    def now(self) -> float:
        """Local time corrected by the known clock skew."""
        return self.clock() - self.clock_diff

    def string_to_sign(self, method: str, resource_path: str, content_md5: str,
                       content_type: str, date: str) -> str:
        return '\n'.join([method, content_md5, content_type, date, resource_path])

    def sign(self, method: str, canonical_path: str, params: Optional[Dict[str, Any]] = None,
             body_digest: Optional[str] = None, content_type: str = '',
             date: Optional[str] = None) -> str:
        """
        Generate the authorization token for a request.

        Body params (POST/PUT) are bound through the content MD5, computed
        from params when body_digest is not given. The query string is not
        part of the signed resource path, matching the API's verification,
        so GET/DELETE query params are not covered by the signature.

        Args:
            method: HTTP method
            canonical_path: Canonical path, optionally with a query string
            params: Request params (bound via body_digest)
            body_digest: Hex MD5 of the request body (derived from params if None)
            content_type: Content type of the request body, if any
            date: RFC 2822 date (defaults to the corrected current time)

        Returns:
            Authorization token
        """
        if date is None:
            date = http_date(self.now())

        method = method.upper()
        if body_digest is None:
            body_digest = body_md5(params) if method in BODY_METHODS and params else ''

        resource_path = canonical_path.split('?', 1)[0]
        message = self.string_to_sign(
            method, resource_path, body_digest, content_type, date
        )

        mac = hmac.new(
            self.scope.secret_key.encode('utf-8'),
            message.encode('utf-8'),
            hashlib.sha256
        )
        signature = base64url_encode(mac.hexdigest().encode('ascii'))

        auth_type = AUTH_TYPE_PUBLIC if self.scope.uses_public_key_auth else AUTH_TYPE_SECRET
        return f"{auth_type} {self.scope.id}:{self.scope.public_key}:{signature}"

    def sign_request(self, method: str, canonical_path: str,
                     params: Optional[Dict[str, Any]] = None,
                     file_params: Optional[Dict[str, Any]] = None) -> SignedEnvelope:
        """Sign a request and bundle it with the headers to send."""
        method = method.upper()
        params = dict(params or {})
        file_params = dict(file_params or {})

        content_md5 = ''
        content_type = ''
        if method in BODY_METHODS:
            if file_params:
                content_type = CONTENT_TYPE_MULTIPART
            else:
                content_type = CONTENT_TYPE_JSON
                if params:
                    content_md5 = body_md5(params)

        date = http_date(self.now())
        auth_token = self.sign(method, canonical_path, params, content_md5, content_type, date)

        return SignedEnvelope(
            canonical_path=canonical_path,
            method=method,
            params=params,
            file_params=file_params,
            auth_token=auth_token,
            date=date,
            content_md5=content_md5,
            content_type=content_type,
        )

    def auth_params(self, canonical_path: str) -> Dict[str, str]:
        """Query parameters that pre-authorize a GET of canonical_path."""
        date = http_date(self.now())
        return {
            PARAM_AUTHORIZATION: self.sign('GET', canonical_path, date=date),
            PARAM_AUTH_DATE: date,
        }
