"""Uniform result and error envelope returned by every API call."""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .constants import UNKNOWN_ERROR_CODE, UNKNOWN_ERROR_HTTP, UNKNOWN_ERROR_TYPE
from .exceptions import ApiRequestError


@dataclass(frozen=True)
class ApiError:
    """Error envelope, identical in shape whatever the failure origin."""

    type: str
    message: str
    code: str
    http_status: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApiError':
        """Build from the wire form {'type', 'message', 'code', 'http'}."""
        try:
            http_status = int(data.get('http', UNKNOWN_ERROR_HTTP))
        except (TypeError, ValueError):
            http_status = UNKNOWN_ERROR_HTTP
        return cls(
            type=str(data.get('type', UNKNOWN_ERROR_TYPE)),
            message=str(data.get('message', '')),
            code=str(data.get('code', UNKNOWN_ERROR_CODE)),
            http_status=http_status,
        )

    @classmethod
    def unknown(cls, message: str) -> 'ApiError':
        return cls(
            type=UNKNOWN_ERROR_TYPE,
            message=message,
            code=UNKNOWN_ERROR_CODE,
            http_status=UNKNOWN_ERROR_HTTP,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'message': self.message,
            'code': self.code,
            'http': self.http_status,
        }


@dataclass(frozen=True)
class ApiResult:
    """
    Decoded-or-raw result of an API call.

    ``data`` holds the decoded JSON when ``decoded`` is true; otherwise the
    response could not be decoded and ``raw`` is the only representation.
    Business and transport failures are results too: check ``error``.
    """

    raw: str
    data: Any = None
    decoded: bool = False

    @classmethod
    def from_raw(cls, raw: str) -> 'ApiResult':
        """Decode once; a null or undecodable payload stays raw."""
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return cls(raw=raw)
        if data is None:
            return cls(raw=raw)
        return cls(raw=raw, data=data, decoded=True)

    @classmethod
    def from_error(cls, error: ApiError) -> 'ApiResult':
        data = {'error': error.to_dict()}
        return cls(raw=json.dumps(data), data=data, decoded=True)

    @property
    def value(self) -> Any:
        return self.data if self.decoded else self.raw

    @property
    def error(self) -> Optional[ApiError]:
        if self.decoded and isinstance(self.data, dict) and isinstance(self.data.get('error'), dict):
            return ApiError.from_dict(self.data['error'])
        return None

    @property
    def ok(self) -> bool:
        return self.error is None

    def get(self, key: str, default: Any = None) -> Any:
        """Member of a decoded object, or default for any other shape."""
        if self.decoded and isinstance(self.data, dict):
            return self.data.get(key, default)
        return default

    def unwrap(self) -> Any:
        """
        Return the value, raising on an error envelope.

        Raises:
            ApiRequestError: If the result carries an error
        """
        if self.error is not None:
            raise ApiRequestError(result=self.data)
        return self.value
