"""
Penelope CLI entry point.

Provides command-line interface for running the bot and inspecting its
configuration.
"""

import argparse
import sys
from pathlib import Path

from penelope import __version__
from penelope.config.logging import get_logger, setup_logging
from penelope.config.settings import Settings, load_settings


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog="penelope",
        description="LLM-powered Discord bot that replies when mentioned",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Penelope {__version__}",
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to .env file (default: .env in current directory)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level from config",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "run",
        help="Connect to Discord and answer mentions",
    )

    subparsers.add_parser(
        "config",
        help="Show current configuration",
    )

    return parser


def cmd_config(settings: Settings) -> int:
    """Show current configuration."""
    logger = get_logger(__name__)
    secrets = settings.secrets

    def _is_set(value) -> str:
        return "Set" if value else "Not set"

    def _source(direct: str, secret_name: str) -> str:
        if direct:
            return "Set (environment)"
        return "From vault" if secret_name else "Not set"

    logger.info("\n=== Penelope Configuration ===\n")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Log Level: {settings.log_level}")
    logger.info(f"Log File: {settings.log_file or 'None (console only)'}")
    logger.info(f"Discord Log Level: {settings.discord_log_level}")
    logger.info(f"\nBot Name: {settings.bot.name}")
    logger.info(f"History Limit: {settings.bot.history_limit}")
    logger.info(f"Shutdown Drain: {settings.bot.shutdown_drain_seconds}s")
    logger.info(f"\nLLM Model: {settings.llm.model}")
    logger.info(f"LLM Temperature: {settings.llm.temperature}")
    logger.info(f"LLM Timeout: {settings.llm.timeout or 'None (wait forever)'}")
    logger.info(f"\nKey Vault URI: {secrets.keyvault_uri or 'Not set'}")
    logger.info(f"Service Principal: {_is_set(secrets.client_id and secrets.client_secret and secrets.tenant_id)}")
    logger.info(f"Token Secret Name: {secrets.keyvault_token_secret or 'Not set'}")
    logger.info(
        f"Completion Endpoint: {_source(secrets.chat_completion_uri, secrets.keyvault_completion_uri_secret)}"
    )
    logger.info(
        f"Completion API Key: {_source(secrets.chat_completion_apikey, secrets.keyvault_apikey_secret)}"
    )

    return 0


def cmd_run(settings: Settings) -> int:
    """Resolve secrets, build the completion client and start the bot."""
    logger = get_logger(__name__)

    from penelope.config.secrets import KeyVaultSecretsProvider, SecretsError
    from penelope.llm import LLMError, build_completion_client

    try:
        secrets = KeyVaultSecretsProvider(settings.secrets)
        token = secrets.get_bot_token()
        completion = build_completion_client(
            endpoint=secrets.get_completion_endpoint(),
            api_key=secrets.get_api_key(),
            settings=settings.llm,
        )
    except (SecretsError, LLMError) as e:
        logger.error(f"Startup failed: {e}")
        return 1

    from penelope.bot import PenelopeBot

    bot = PenelopeBot(settings, completion)
    logger.info(f"Starting {settings.bot.name}...")
    # log_handler=None: disable discord.py's default logging setup and use ours
    bot.run(token, log_handler=None)
    return 0


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    # Load settings
    try:
        settings = load_settings(env_file=args.env_file)
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Override log level if specified
    if args.log_level:
        settings.log_level = args.log_level

    # Setup logging
    setup_logging(settings)

    # Execute command
    if args.command == "config":
        return cmd_config(settings)
    elif args.command == "run":
        return cmd_run(settings)
    else:
        # Default: show help
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
