"""
Cognito AuthProvider — Amazon Cognito over its JSON 1.1 protocol.

User pool calls (``InitiateAuth``, ``SignUp``) and identity pool calls
(``GetId``, ``GetCredentialsForIdentity``) are all unsigned, so a plain
aiohttp session is enough.

Security Note:
    Never log request bodies; they carry passwords and tokens.
"""
import os
import asyncio
import logging
from typing import Any, Optional
from collections.abc import Mapping

import aiohttp
import orjson
from pydantic import BaseModel, Field

from ..conf import (
    REGION_ENV,
    CLIENT_ID_ENV,
    IDENTITY_POOL_ID_ENV,
    IDENTITY_POOL_URL_ENV,
    HTTP_TIMEOUT_ENV,
    DEFAULT_REGION,
    require_env,
)
from ..exceptions import (
    AccountUnverified,
    AuthProviderError,
    AuthRejected,
    ConfigurationFault,
    ProviderUnavailable,
)
from .provider import AuthProvider

logger = logging.getLogger("woz.session")

_CONTENT_TYPE = "application/x-amz-json-1.1"
_IDP_TARGET = "AWSCognitoIdentityProviderService"
_IDENTITY_TARGET = "AWSCognitoIdentityService"

_UNVERIFIED_ERRORS = frozenset({"UserNotConfirmedException"})
_REJECTED_ERRORS = frozenset({
    "NotAuthorizedException",
    "UserNotFoundException",
    "PasswordResetRequiredException",
    "InvalidPasswordException",
    "UsernameExistsException",
    "InvalidParameterException",
    "CodeMismatchException",
})
_UNAVAILABLE_ERRORS = frozenset({
    "TooManyRequestsException",
    "LimitExceededException",
    "InternalErrorException",
    "ServiceUnavailable",
})


class CognitoConfig(BaseModel):
    """Validated Cognito endpoints and identifiers."""

    region: str = Field(default=DEFAULT_REGION, min_length=1)
    client_id: str = Field(min_length=1)
    identity_pool_id: str = Field(min_length=1)
    identity_pool_url: str = Field(min_length=1)
    timeout: float = Field(default=30.0, gt=0)

    model_config = {"frozen": True}

    @property
    def idp_endpoint(self) -> str:
        return f"https://cognito-idp.{self.region}.amazonaws.com/"

    @property
    def identity_endpoint(self) -> str:
        return f"https://cognito-identity.{self.region}.amazonaws.com/"

    @classmethod
    def from_env(cls) -> "CognitoConfig":
        """Create CognitoConfig by loading values from environment."""
        return cls(
            region=os.environ.get(REGION_ENV, DEFAULT_REGION),
            client_id=require_env(CLIENT_ID_ENV),
            identity_pool_id=require_env(IDENTITY_POOL_ID_ENV),
            identity_pool_url=require_env(IDENTITY_POOL_URL_ENV),
            timeout=float(os.environ.get(HTTP_TIMEOUT_ENV, 30.0)),
        )


def error_for(error_type: str, message: str, status: int) -> AuthProviderError:
    """Map a Cognito error type to the matching exception.

    Args:
        error_type: ``__type`` from the error body, with or without the
            ``namespace#`` prefix.
        message: Human-readable message from the error body.
        status: HTTP status code.
    """
    code = error_type.rsplit("#", 1)[-1] if error_type else ""
    message = message or code or f"HTTP {status}"
    if code in _UNVERIFIED_ERRORS:
        return AccountUnverified(message, code=code)
    if code in _REJECTED_ERRORS:
        return AuthRejected(message, code=code)
    if code in _UNAVAILABLE_ERRORS or status >= 500:
        return ProviderUnavailable(message, code=code or None)
    return AuthProviderError(message, code=code or None)


def _require(payload: Mapping[str, Any], field: str, operation: str) -> Any:
    value = payload.get(field) if payload else None
    if value is None:
        raise ConfigurationFault(f"{operation} response is missing {field}")
    return value


def _require_object(payload: Mapping[str, Any], field: str, operation: str) -> Mapping[str, Any]:
    value = _require(payload, field, operation)
    if not isinstance(value, Mapping):
        raise ConfigurationFault(
            f"{operation} response field {field} is a {type(value).__name__}, expected an object"
        )
    return value


class CognitoAuthProvider(AuthProvider):
    """AuthProvider backed by a Cognito user pool and identity pool."""

    def __init__(
        self,
        config: CognitoConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self._config = config
        self._session = session
        self._owns_session = session is None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.timeout),
                headers={"Content-Type": _CONTENT_TYPE},
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _call(self, endpoint: str, target: str, body: dict) -> dict:
        """POST one JSON 1.1 action and return the decoded body.

        Raises:
            ProviderUnavailable: On transport errors, timeouts and 5xx.
            AuthProviderError: Or a subclass, for 4xx error bodies.
            ConfigurationFault: When a non-5xx body is not a JSON object.
        """
        session = await self._ensure_session()
        action = target.rsplit(".", 1)[-1]
        try:
            async with session.post(
                endpoint,
                data=orjson.dumps(body),
                headers={"X-Amz-Target": target, "Content-Type": _CONTENT_TYPE},
            ) as response:
                raw = await response.read()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            logger.warning("Cognito %s failed: %s", action, err)
            raise ProviderUnavailable(
                f"Could not reach the identity provider ({action}): {err}"
            ) from err

        try:
            data = orjson.loads(raw) if raw else {}
        except orjson.JSONDecodeError as err:
            if status >= 500:
                raise ProviderUnavailable(
                    f"{action} failed with HTTP {status}"
                ) from err
            raise ConfigurationFault(
                f"{action} returned a body that is not JSON (HTTP {status})"
            ) from err

        if not isinstance(data, dict):
            if status >= 500:
                raise ProviderUnavailable(f"{action} failed with HTTP {status}")
            raise ConfigurationFault(
                f"{action} returned a JSON {type(data).__name__}, expected an object (HTTP {status})"
            )

        if status >= 400:
            logger.debug("Cognito %s returned HTTP %d", action, status)
            raise error_for(
                data.get("__type", ""),
                data.get("message") or data.get("Message", ""),
                status,
            )
        return data

    # ------------------------------------------------------------------
    # User pool
    # ------------------------------------------------------------------

    async def _initiate_auth(self, flow: str, parameters: dict) -> Mapping[str, Any]:
        data = await self._call(
            self._config.idp_endpoint,
            f"{_IDP_TARGET}.InitiateAuth",
            {
                "AuthFlow": flow,
                "ClientId": self._config.client_id,
                "AuthParameters": parameters,
            },
        )
        return _require_object(data, "AuthenticationResult", flow)

    async def login(self, username: str, password: str) -> Mapping[str, Any]:
        result = await self._initiate_auth(
            "USER_PASSWORD_AUTH",
            {"USERNAME": username, "PASSWORD": password},
        )
        return {
            "id_token": result.get("IdToken"),
            "refresh_token": result.get("RefreshToken"),
        }

    async def refresh(self, refresh_token: str) -> Mapping[str, Any]:
        result = await self._initiate_auth(
            "REFRESH_TOKEN_AUTH", {"REFRESH_TOKEN": refresh_token},
        )
        return {
            "id_token": result.get("IdToken"),
            "refresh_token": result.get("RefreshToken"),
        }

    async def sign_up(self, email: str, username: str, password: str) -> str:
        data = await self._call(
            self._config.idp_endpoint,
            f"{_IDP_TARGET}.SignUp",
            {
                "ClientId": self._config.client_id,
                "Username": username,
                "Password": password,
                "UserAttributes": [{"Name": "email", "Value": email}],
            },
        )
        return _require(data, "UserSub", "SignUp")

    # ------------------------------------------------------------------
    # Identity pool
    # ------------------------------------------------------------------

    def _logins(self, id_token: str) -> dict:
        return {self._config.identity_pool_url: id_token}

    async def resolve_identity(self, id_token: str) -> str:
        data = await self._call(
            self._config.identity_endpoint,
            f"{_IDENTITY_TARGET}.GetId",
            {
                "IdentityPoolId": self._config.identity_pool_id,
                "Logins": self._logins(id_token),
            },
        )
        return _require(data, "IdentityId", "GetId")

    async def exchange_credentials(
        self, identity_id: str, id_token: str
    ) -> Mapping[str, Any]:
        data = await self._call(
            self._config.identity_endpoint,
            f"{_IDENTITY_TARGET}.GetCredentialsForIdentity",
            {"IdentityId": identity_id, "Logins": self._logins(id_token)},
        )
        credentials = _require_object(data, "Credentials", "GetCredentialsForIdentity")
        return {
            "access_key": credentials.get("AccessKeyId"),
            "secret_key": credentials.get("SecretKey"),
            "session_token": credentials.get("SessionToken"),
            "expiry": credentials.get("Expiration"),
        }
