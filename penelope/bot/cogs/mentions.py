"""
MentionCog — forwards gateway events to the MessageResponder.

  - on_ready: caches the bot's own user id for mention matching
  - on_message: hands every message to MessageResponder.dispatch(), which
    filters it and starts the reply in its own task
"""

from __future__ import annotations

import discord
from discord.ext import commands

from penelope.config.logging import get_logger

logger = get_logger(__name__)


class MentionCog(commands.Cog):
    """Replies to @Penelope mentions in guild channels."""

    def __init__(self, bot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_ready(self) -> None:
        self.bot.responder.set_identity(self.bot.user.id)

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        # dispatch() only schedules work, so the gateway loop is never held up
        task = self.bot.responder.dispatch(message)
        if task is not None:
            logger.debug(
                f"Replying to {message.author} in #{message.channel} ({message.id})"
            )
