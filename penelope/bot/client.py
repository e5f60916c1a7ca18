"""
PenelopeBot — discord.py bot client.

Manages the bot lifecycle:
- Receives the completion client built at startup and wraps it in a
  MessageResponder shared by every reply
- Loads the MentionCog, which feeds gateway events to the responder
- On shutdown optionally waits for in-flight replies, then logs out and
  stops the gateway connection
"""

from __future__ import annotations

import discord
from discord.ext import commands

from penelope.bot.responder import MessageResponder
from penelope.config.logging import get_logger
from penelope.config.settings import Settings
from penelope.llm import CompletionClient

logger = get_logger(__name__)


class PenelopeBot(commands.Bot):
    """
    Discord bot that answers mentions with an LLM reply.

    Args:
        settings: Full application settings
        completion: Completion client built once at startup
    """

    def __init__(self, settings: Settings, completion: CompletionClient) -> None:
        intents = discord.Intents.default()
        intents.message_content = True  # Required to read message text and history
        intents.members = True  # Required to resolve guild display names
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
        )
        self.settings = settings
        self.completion = completion
        self.responder = MessageResponder(
            completion=completion,
            history_limit=settings.bot.history_limit,
            temperature=settings.llm.temperature,
        )

    async def setup_hook(self) -> None:
        """Called after login, before connecting to the Gateway."""
        from penelope.bot.cogs.mentions import MentionCog

        await self.add_cog(MentionCog(self))
        logger.info("Cogs loaded")

    async def on_message(self, message: discord.Message) -> None:
        # No prefix commands; mentions are handled by MentionCog's listener
        return

    async def on_ready(self) -> None:
        """Called when the bot successfully connects to Discord."""
        logger.info(f"Logged in as {self.user} (id: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")

    async def close(self) -> None:
        """Graceful shutdown: optionally drain replies, then disconnect."""
        logger.info(f"Shutting down {self.settings.bot.name}...")
        await self.responder.drain(self.settings.bot.shutdown_drain_seconds)
        await super().close()
