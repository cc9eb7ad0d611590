"""CLI entrypoint for woz-session."""
import sys
import asyncio
import logging
import argparse
from typing import Optional

from .version import __version__
from .exceptions import (
    AccountUnverified,
    AuthProviderError,
    ConfigurationFault,
    ProviderUnavailable,
)
from .vault import StoreConfig, SecretStore, CredentialCache
from .auth import (
    AuthProvider,
    AuthenticatedSessionBuilder,
    CognitoAuthProvider,
    CognitoConfig,
    Prompter,
    TerminalPrompter,
    TokenLifecycleManager,
)

logger = logging.getLogger("woz.session")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="woz-session",
        description="Manage the woz CLI login stored on this machine.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--home",
        help="Directory holding cached credentials (default: $XDG_CONFIG_HOME/.woz or $HOME/.woz)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup", help="Create a new woz account")
    subparsers.add_parser("login", help="Log in and cache a refresh token")
    subparsers.add_parser("whoami", help="Print the cached identity id")
    subparsers.add_parser(
        "credentials", help="Obtain temporary storage credentials",
    )
    return parser


async def cmd_setup(manager: TokenLifecycleManager, builder, prompter: Prompter) -> int:
    user_id = await manager.register()
    logger.info("Registered user %s", user_id)
    return 0


async def cmd_login(manager: TokenLifecycleManager, builder, prompter: Prompter) -> int:
    if manager.cached_refresh_token() is not None and not prompter.ask_yes_no(
        "You are already logged in. Log in again?"
    ):
        return 0
    result = await manager.login()
    identity_id = await manager.resolve_identity_id(result.id_token)
    prompter.notify(f"Logged in as {identity_id}")
    return 0


async def cmd_whoami(manager: TokenLifecycleManager, builder, prompter: Prompter) -> int:
    id_token = await manager.ensure_id_token()
    identity_id = await manager.ensure_identity_id(id_token)
    prompter.notify(identity_id)
    return 0


async def cmd_credentials(manager: TokenLifecycleManager, builder, prompter: Prompter) -> int:
    session = await builder.build()
    prompter.notify(f"Access key: {session.credentials.access_key}")
    prompter.notify(f"Expires: {session.credentials.expiry.isoformat()}")
    return 0


COMMANDS = {
    "setup": cmd_setup,
    "login": cmd_login,
    "whoami": cmd_whoami,
    "credentials": cmd_credentials,
}


async def run(
    args: argparse.Namespace,
    store_config: StoreConfig,
    provider: AuthProvider,
    prompter: Prompter,
) -> int:
    """Run one subcommand and map known failures to exit codes."""
    cache = CredentialCache(SecretStore.from_config(store_config))
    manager = TokenLifecycleManager(cache, provider, prompter)
    builder = AuthenticatedSessionBuilder(manager, provider)
    handler = COMMANDS[args.command]
    try:
        async with provider:
            return await handler(manager, builder, prompter)
    except AccountUnverified:
        # the manager already told the user what to do
        return 1
    except ProviderUnavailable as err:
        prompter.notify(
            f"Could not reach the woz identity service, please try again later: {err}"
        )
        return 1
    except ConfigurationFault as err:
        logger.error("Identity provider response was malformed: %s", err)
        prompter.notify(
            "The woz identity service returned an unexpected response. "
            "Please upgrade woz or report this issue."
        )
        return 2
    except AuthProviderError as err:
        prompter.notify(f"Authentication failed: {err}")
        return 1


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
    )
    try:
        store_config = StoreConfig.from_env(home=args.home)
        provider = CognitoAuthProvider(CognitoConfig.from_env())
    except (RuntimeError, ValueError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return 2
    prompter = TerminalPrompter()
    try:
        return asyncio.run(run(args, store_config, provider, prompter))
    except KeyboardInterrupt:
        print(file=sys.stderr)
        return 130
    except EOFError:
        print("\nError: input closed before a required answer was given", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
