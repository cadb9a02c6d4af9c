"""
Authentication scope for API calls.

A scope identifies which kind of principal is calling (developer, app, user,
...) and carries its credentials. It decides the base path every resource
path is resolved against.
"""

import enum
from dataclasses import dataclass, field
from typing import Union

from .exceptions import ConfigurationError


class ScopeKind(enum.Enum):
    """Kinds of principals the API accepts."""

    APP = 'app'
    DEVELOPER = 'developer'
    STORE = 'store'
    USER = 'user'
    PLUGIN = 'plugin'
    INSTALL = 'install'

    @classmethod
    def parse(cls, value: Union['ScopeKind', str]) -> 'ScopeKind':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError("Scope not implemented") from None


@dataclass(frozen=True)
class ScopeContext:
    """Immutable scope credentials shared by every call of a client."""

    kind: ScopeKind
    id: str
    public_key: str
    secret_key: str = field(repr=False)
    sandbox: bool = False

    @classmethod
    def create(cls, scope, scope_id, public_key: str, secret_key: str,
               sandbox: bool = False) -> 'ScopeContext':
        """
        Validate and build a scope context.

        Args:
            scope: ScopeKind or its name ('developer', 'app', ...)
            scope_id: Element's id
            public_key: Public key
            secret_key: Element's secret key
            sandbox: Whether to run against the sandbox API

        Raises:
            ConfigurationError: On unknown scope or missing credentials
        """
        kind = ScopeKind.parse(scope)

        if scope_id is None or str(scope_id) == '':
            raise ConfigurationError("scope id cannot be empty")
        if not public_key:
            raise ConfigurationError("public_key cannot be empty")
        if not secret_key:
            raise ConfigurationError("secret_key cannot be empty")

        return cls(
            kind=kind,
            id=str(scope_id),
            public_key=public_key,
            secret_key=secret_key,
            sandbox=bool(sandbox),
        )

    @property
    def uses_public_key_auth(self) -> bool:
        # Identical keys mean the signature is keyed by the public key hash.
        return self.public_key == self.secret_key
