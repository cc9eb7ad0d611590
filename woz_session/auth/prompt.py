"""Interactive prompting, injected into the token manager."""
import sys
import getpass
from abc import ABC, abstractmethod
from typing import NamedTuple


class LoginCredentials(NamedTuple):
    username: str
    password: str


class SignupValues(NamedTuple):
    email: str
    username: str
    password: str


class Prompter(ABC):
    """Source of interactive answers.

    The terminal implementation blocks on stdin; tests supply canned
    answers instead.
    """

    @abstractmethod
    def ask_login(self) -> LoginCredentials:
        ...

    @abstractmethod
    def ask_yes_no(self, question: str) -> bool:
        ...

    @abstractmethod
    def ask_signup(self) -> SignupValues:
        ...

    @abstractmethod
    def notify(self, message: str) -> None:
        """Show a message to the user."""


class TerminalPrompter(Prompter):
    """Prompter reading from stdin and writing to stdout."""

    def __init__(self, stream=None):
        self._stream = stream or sys.stdout

    def _username_password(self) -> LoginCredentials:
        username = input("Username: ").strip().lower()
        password = getpass.getpass("Password: ", stream=self._stream)
        return LoginCredentials(username, password)

    def ask_login(self) -> LoginCredentials:
        self.notify("Please login to continue")
        return self._username_password()

    def ask_yes_no(self, question: str) -> bool:
        while True:
            answer = input(f"{question} [y/n]: ").strip().lower()
            if answer in ("y", "yes"):
                return True
            if answer in ("n", "no"):
                return False
            self.notify("Please answer 'y' or 'n'")

    def ask_signup(self) -> SignupValues:
        self.notify("Please enter the following information")
        username, password = self._username_password()
        email = input("Email: ").strip().lower()
        return SignupValues(email, username, password)

    def notify(self, message: str) -> None:
        print(message, file=self._stream)
