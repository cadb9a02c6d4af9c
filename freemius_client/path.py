"""Resolution of relative resource paths into canonical API paths."""

from dataclasses import dataclass

from .constants import API_VERSION, FORMAT
from .exceptions import ConfigurationError
from .scope import ScopeContext, ScopeKind


@dataclass(frozen=True)
class CanonicalRequest:
    """Versioned, scope-prefixed path plus its untouched query string."""

    path: str
    query_string: str = ''
    format: str = FORMAT

    def __str__(self) -> str:
        return self.path + self.query_string


def _split_query(path: str):
    query_pos = path.find('?')
    if query_pos == -1:
        return path, ''
    return path[:query_pos], path[query_pos:]


def _strip_format(path: str) -> str:
    suffix = '.' + FORMAT
    if path.lower().endswith(suffix):
        return path[:-len(suffix)]
    return path


def _base_path(scope: ScopeContext) -> str:
    kind = scope.kind
    if kind is ScopeKind.APP:
        return f"/apps/{scope.id}"
    if kind is ScopeKind.DEVELOPER:
        return f"/developers/{scope.id}"
    if kind is ScopeKind.STORE:
        return f"/stores/{scope.id}"
    if kind is ScopeKind.USER:
        return f"/users/{scope.id}"
    if kind is ScopeKind.PLUGIN:
        return f"/plugins/{scope.id}"
    if kind is ScopeKind.INSTALL:
        return f"/installs/{scope.id}"
    # Reaching this means ScopeKind grew a member without a base path.
    raise ConfigurationError("Scope not implemented")


def canonize_path(scope: ScopeContext, raw_path: str) -> CanonicalRequest:
    """
    Turn a relative resource path into a canonical API path.

    'plugins/7/tags' in developer scope 42 becomes
    '/v1/developers/42/plugins/7/tags.json'. A trailing '.json' is accepted
    and not doubled; paths already containing a '.' (e.g. 'tags/3.zip') are
    left without a format suffix. A query string is carried over verbatim.

    Args:
        scope: Scope the path is resolved against
        raw_path: Resource path relative to the scope

    Returns:
        CanonicalRequest

    Raises:
        ConfigurationError: If the scope kind has no base path
    """
    path, query = _split_query((raw_path or '').strip('/'))
    path = _strip_format(path)

    base = _base_path(scope)
    suffix = '' if '.' in path else '.' + FORMAT

    canonical = f"/v{API_VERSION}{base}"
    if path:
        canonical += '/' + path
    canonical += suffix

    return CanonicalRequest(path=canonical, query_string=query)


def versioned_path(path: str) -> str:
    """Unscoped versioned path, e.g. 'ping.json' -> '/v1/ping.json'."""
    return f"/v{API_VERSION}/{path.lstrip('/')}"
