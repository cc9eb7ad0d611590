"""Token lifecycle and session credentials for the woz CLI."""

from .provider import AuthProvider, LoginResult, RefreshResult
from .prompt import Prompter, TerminalPrompter, LoginCredentials, SignupValues
from .tokens import TokenLifecycleManager, TokenState
from .session import (
    AuthenticatedSession,
    AuthenticatedSessionBuilder,
    SessionCredentials,
)
from .cognito import CognitoAuthProvider, CognitoConfig

__all__ = [
    "AuthProvider",
    "LoginResult",
    "RefreshResult",
    "Prompter",
    "TerminalPrompter",
    "LoginCredentials",
    "SignupValues",
    "TokenLifecycleManager",
    "TokenState",
    "AuthenticatedSession",
    "AuthenticatedSessionBuilder",
    "SessionCredentials",
    "CognitoAuthProvider",
    "CognitoConfig",
]
