"""Shared fixtures and scripted collaborators for woz_session tests."""
import pytest

from woz_session.vault import StoreConfig, SecretStore, CredentialCache
from woz_session.auth.provider import AuthProvider
from woz_session.auth.prompt import Prompter, LoginCredentials, SignupValues


class ScriptedProvider(AuthProvider):
    """AuthProvider replaying canned responses.

    Each script entry is either a payload to return or an exception
    instance to raise; entries are consumed in order.
    """

    def __init__(
        self,
        login=None,
        refresh=None,
        identity=None,
        credentials=None,
        sign_up=None,
    ):
        self.scripts = {
            "login": list(login or []),
            "refresh": list(refresh or []),
            "resolve_identity": list(identity or []),
            "exchange_credentials": list(credentials or []),
            "sign_up": list(sign_up or []),
        }
        self.calls = {name: [] for name in self.scripts}
        self.closed = False

    def _next(self, operation, *args):
        self.calls[operation].append(args)
        script = self.scripts[operation]
        if not script:
            raise AssertionError(f"unexpected {operation} call")
        outcome = script.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def login(self, username, password):
        return self._next("login", username, password)

    async def refresh(self, refresh_token):
        return self._next("refresh", refresh_token)

    async def resolve_identity(self, id_token):
        return self._next("resolve_identity", id_token)

    async def exchange_credentials(self, identity_id, id_token):
        return self._next("exchange_credentials", identity_id, id_token)

    async def sign_up(self, email, username, password):
        return self._next("sign_up", email, username, password)

    async def close(self):
        self.closed = True


class ScriptedPrompter(Prompter):
    """Prompter with canned answers that records every message."""

    def __init__(self, logins=None, answers=None, signup=None):
        self.logins = list(logins or [])
        self.answers = list(answers or [])
        self.signup = signup
        self.messages = []
        self.questions = []
        self.login_prompts = 0

    def ask_login(self):
        self.login_prompts += 1
        if self.logins:
            return self.logins.pop(0)
        return LoginCredentials("alice", "correct horse")

    def ask_yes_no(self, question):
        self.questions.append(question)
        return self.answers.pop(0)

    def ask_signup(self):
        return self.signup or SignupValues("alice@example.com", "alice", "correct horse")

    def notify(self, message):
        self.messages.append(message)


@pytest.fixture
def store_config(tmp_path):
    """StoreConfig rooted in a temporary woz home."""
    return StoreConfig(
        root=tmp_path / ".woz",
        password="test password",
        salt="test salt",
    )


@pytest.fixture
def store(store_config):
    return SecretStore.from_config(store_config)


@pytest.fixture
def cache(store):
    return CredentialCache(store)


@pytest.fixture
def prompter():
    return ScriptedPrompter()


@pytest.fixture
def scripted_provider():
    """The ScriptedProvider class, for tests that build their own script."""
    return ScriptedProvider


@pytest.fixture
def scripted_prompter():
    """The ScriptedPrompter class, for tests that need canned answers."""
    return ScriptedPrompter
