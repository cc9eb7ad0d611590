"""
AuthProvider — Client-side contract of the identity provider.

Implementations return plain mappings with normalized keys; the token
manager and session builder validate them into the models below so that a
provider contract violation surfaces as ConfigurationFault instead of a
KeyError deep in the call stack.

Every operation may raise:
    AuthRejected: bad credentials, expired or revoked token.
    AccountUnverified: login for an account whose email is unconfirmed.
    ProviderUnavailable: transport failure or provider-side outage.
    AuthProviderError: any other rejection.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional
from collections.abc import Mapping

from pydantic import BaseModel, Field, ValidationError

from ..exceptions import ConfigurationFault


class LoginResult(BaseModel):
    """Tokens returned by a successful username/password login."""

    id_token: str = Field(repr=False, min_length=1)
    refresh_token: str = Field(repr=False, min_length=1)


class RefreshResult(BaseModel):
    """Tokens returned by a refresh-token exchange.

    Providers that rotate refresh tokens include the new one.
    """

    id_token: str = Field(repr=False, min_length=1)
    refresh_token: Optional[str] = Field(default=None, repr=False)


def parse_response(model: type, payload: Mapping[str, Any], operation: str) -> Any:
    """Validate a provider payload into ``model``.

    Raises:
        ConfigurationFault: Naming every missing or invalid field.
    """
    try:
        return model.model_validate(dict(payload or {}))
    except ValidationError as err:
        fields = sorted({
            ".".join(str(part) for part in error["loc"]) for error in err.errors()
        })
        raise ConfigurationFault(
            f"{operation} response is missing or has invalid fields: "
            f"{', '.join(fields)}"
        ) from err


class AuthProvider(ABC):
    """Asynchronous identity provider client."""

    @abstractmethod
    async def login(self, username: str, password: str) -> Mapping[str, Any]:
        """Return ``{"id_token": ..., "refresh_token": ...}``."""

    @abstractmethod
    async def refresh(self, refresh_token: str) -> Mapping[str, Any]:
        """Return ``{"id_token": ...}`` and optionally a rotated refresh token."""

    @abstractmethod
    async def resolve_identity(self, id_token: str) -> str:
        """Return the stable identity id for the authenticated user."""

    @abstractmethod
    async def exchange_credentials(
        self, identity_id: str, id_token: str
    ) -> Mapping[str, Any]:
        """Return ``access_key``, ``secret_key``, ``session_token``, ``expiry``."""

    @abstractmethod
    async def sign_up(self, email: str, username: str, password: str) -> str:
        """Register a new account and return its user id."""

    async def close(self) -> None:
        """Release transport resources; no-op by default."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
