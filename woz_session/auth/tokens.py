"""
TokenLifecycleManager — Keeps the CLI holding a valid id token.

State machine, entered once per command invocation:

    HAVE_CACHED_REFRESH_TOKEN  -- refresh accepted --> HAVE_FRESH_ID_TOKEN
    HAVE_CACHED_REFRESH_TOKEN  -- refresh rejected --> NEED_LOGIN
    (no cached token, or it fails to decrypt)      --> NEED_LOGIN
    NEED_LOGIN                 -- login accepted   --> HAVE_FRESH_ID_TOKEN
    NEED_LOGIN                 -- login rejected   --> NEED_LOGIN

The login loop is the only place a failure is retried, and it retries
until the user gets it right. Everything else fails fast.

Security Note:
    Never log tokens, usernames or passwords. Id tokens are held in memory
    only and discarded when the process exits.
"""
import logging
from enum import Enum
from typing import Optional

from ..exceptions import (
    AccountUnverified,
    AuthProviderError,
    AuthRejected,
    CacheMiss,
    ConfigurationFault,
    CryptoFailure,
    ProviderUnavailable,
)
from ..vault.credentials import CredentialCache
from .provider import AuthProvider, LoginResult, RefreshResult, parse_response
from .prompt import Prompter

logger = logging.getLogger("woz.session")

UNVERIFIED_MESSAGE = (
    "Your account is not verified yet. "
    "Please check your verification email and try again."
)


class TokenState(str, Enum):
    HAVE_CACHED_REFRESH_TOKEN = "have_cached_refresh_token"
    NEED_LOGIN = "need_login"
    HAVE_FRESH_ID_TOKEN = "have_fresh_id_token"


class TokenLifecycleManager:
    """Obtain and refresh id tokens, prompting only when required.

    Args:
        cache: Credential cache holding the refresh token and identity id.
        provider: Identity provider client.
        prompter: Source of interactive login answers.
    """

    def __init__(
        self,
        cache: CredentialCache,
        provider: AuthProvider,
        prompter: Prompter,
    ):
        self._cache = cache
        self._provider = provider
        self._prompter = prompter
        self._id_token: Optional[str] = None
        self.state = TokenState.HAVE_CACHED_REFRESH_TOKEN
        self.login_attempts = 0

    @property
    def id_token(self) -> Optional[str]:
        """Id token obtained during this invocation, if any."""
        return self._id_token

    def _transition(self, state: TokenState) -> None:
        if state is not self.state:
            logger.debug("Token state: %s -> %s", self.state.value, state.value)
        self.state = state

    # ------------------------------------------------------------------
    # Refresh token
    # ------------------------------------------------------------------

    def cached_refresh_token(self) -> Optional[str]:
        """Return the cached refresh token, or None when unusable."""
        try:
            return self._cache.refresh_token()
        except CacheMiss:
            logger.debug("No cached refresh token")
        except CryptoFailure as err:
            logger.warning("Cached refresh token is unreadable, ignoring it: %s", err)
        return None

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    async def login(self) -> LoginResult:
        """Prompt for credentials until the provider accepts them.

        The refresh token from the successful response is cached before
        returning.

        Raises:
            AccountUnverified: The account must be confirmed out of band.
            ConfigurationFault: The provider response lacks a token.
        """
        self._transition(TokenState.NEED_LOGIN)
        result: Optional[LoginResult] = None
        while result is None:
            self.login_attempts += 1
            username, password = self._prompter.ask_login()
            try:
                payload = await self._provider.login(username, password)
            except AccountUnverified:
                self._prompter.notify(UNVERIFIED_MESSAGE)
                raise
            except AuthRejected as err:
                logger.info("Login attempt %d rejected", self.login_attempts)
                self._prompter.notify(f"Login failed: {err}")
                continue
            except ProviderUnavailable as err:
                logger.warning(
                    "Login attempt %d could not reach the provider: %s",
                    self.login_attempts, err,
                )
                self._prompter.notify(f"Login failed: {err}")
                continue
            result = parse_response(LoginResult, payload, "login")

        self._cache.store_refresh_token(result.refresh_token)
        self._id_token = result.id_token
        self._transition(TokenState.HAVE_FRESH_ID_TOKEN)
        logger.info("Logged in after %d attempt(s)", self.login_attempts)
        return result

    # ------------------------------------------------------------------
    # Id token
    # ------------------------------------------------------------------

    async def ensure_id_token(self) -> str:
        """Return a valid id token for this invocation.

        Uses the cached refresh token when possible; a rejected refresh
        falls back to one interactive login.

        Raises:
            ProviderUnavailable: The refresh call could not reach the provider.
            ConfigurationFault: The refresh response was malformed.
            AccountUnverified: Propagated from login().
        """
        if self.state is TokenState.HAVE_FRESH_ID_TOKEN and self._id_token:
            return self._id_token

        refresh_token = self.cached_refresh_token()
        if refresh_token is None:
            result = await self.login()
            return result.id_token

        self._transition(TokenState.HAVE_CACHED_REFRESH_TOKEN)
        try:
            payload = await self._provider.refresh(refresh_token)
        except (ProviderUnavailable, ConfigurationFault):
            raise
        except AuthProviderError as err:
            logger.info("Refreshing the id token failed, logging in again: %s", err)
            self._prompter.notify("Your session has expired.")
            result = await self.login()
            return result.id_token

        refreshed = parse_response(RefreshResult, payload, "refresh")
        if refreshed.refresh_token and refreshed.refresh_token != refresh_token:
            self._cache.store_refresh_token(refreshed.refresh_token)
        self._id_token = refreshed.id_token
        self._transition(TokenState.HAVE_FRESH_ID_TOKEN)
        return refreshed.id_token

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    async def ensure_identity_id(self, id_token: str) -> str:
        """Return the cached identity id, resolving and caching it on a miss."""
        try:
            return self._cache.identity_id()
        except CacheMiss:
            logger.debug("No cached identity id, resolving it")
        except CryptoFailure as err:
            logger.warning("Cached identity id is unreadable, resolving it: %s", err)
        return await self.resolve_identity_id(id_token)

    async def resolve_identity_id(self, id_token: str) -> str:
        """Ask the provider for the identity id and overwrite the cached one.

        Used after an explicit login, where the new token may belong to a
        different account than the cached identity.
        """
        identity_id = await self._provider.resolve_identity(id_token)
        self._cache.store_identity_id(identity_id)
        return identity_id

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    async def register(self) -> str:
        """Sign up a new account and cache its user id.

        Returns:
            The provider's user id for the new account.
        """
        values = self._prompter.ask_signup()
        try:
            user_id = await self._provider.sign_up(
                values.email, values.username, values.password,
            )
        except AuthProviderError as err:
            self._prompter.notify(f"Signup failed: {err}")
            raise
        self._cache.store_user_id(user_id)
        self._prompter.notify(
            "Please check your inbox for an email to verify your account."
        )
        return user_id
