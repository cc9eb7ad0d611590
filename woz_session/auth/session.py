"""
AuthenticatedSessionBuilder — Scoped storage credentials for one command.

Composes the token manager with the provider's credentials exchange:

    ensure_id_token() -> ensure_identity_id() -> exchange_credentials()

Each step needs the previous step's output, so they run sequentially.
Credentials are held in memory only.
"""
import logging
from datetime import datetime, timezone
from typing import Any, NamedTuple

from pydantic import BaseModel, Field, field_validator

from .provider import AuthProvider, parse_response
from .tokens import TokenLifecycleManager

logger = logging.getLogger("woz.session")


class SessionCredentials(BaseModel):
    """Temporary storage credentials."""

    access_key: str = Field(min_length=1)
    secret_key: str = Field(repr=False, min_length=1)
    session_token: str = Field(repr=False, min_length=1)
    expiry: datetime

    model_config = {"frozen": True}

    @field_validator("expiry", mode="before")
    @classmethod
    def parse_expiry(cls, v: Any) -> Any:
        """Accept epoch seconds as well as datetimes and ISO strings."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return datetime.fromtimestamp(v, tz=timezone.utc)
        return v

    @field_validator("expiry")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def expired(self) -> bool:
        return self.expiry <= datetime.now(timezone.utc)


class AuthenticatedSession(NamedTuple):
    identity_id: str
    id_token: str
    credentials: SessionCredentials

    def key_prefix(self, project_id: str) -> str:
        """Storage namespace for a project: ``<identity_id>/<project_id>``."""
        return f"{self.identity_id}/{project_id}"


class AuthenticatedSessionBuilder:
    """Build an AuthenticatedSession for the current invocation."""

    def __init__(self, manager: TokenLifecycleManager, provider: AuthProvider):
        self._manager = manager
        self._provider = provider

    async def exchange(self, identity_id: str, id_token: str) -> SessionCredentials:
        """Trade an id token for temporary credentials.

        Raises:
            ConfigurationFault: If the response lacks any credential field.
        """
        payload = await self._provider.exchange_credentials(identity_id, id_token)
        credentials = parse_response(
            SessionCredentials, payload, "credentials exchange",
        )
        logger.debug("Obtained credentials expiring at %s", credentials.expiry)
        return credentials

    async def build(self) -> AuthenticatedSession:
        id_token = await self._manager.ensure_id_token()
        identity_id = await self._manager.ensure_identity_id(id_token)
        credentials = await self.exchange(identity_id, id_token)
        return AuthenticatedSession(identity_id, id_token, credentials)
