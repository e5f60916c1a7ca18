"""
MessageResponder — turns a bot mention into a model reply.

Per inbound message:

    filter (not a bot, mentions us, in a guild)
        ↓  asyncio task, event handler returns immediately
    fetch history before the message (newest first) → reverse
        ↓
    resolve display names (concurrently, order preserved)
        ↓
    render prompt → CompletionClient.complete() → channel.send(text)

Each reply is an independent task with its own history snapshot and prompt.
Failures are logged at the task boundary and nothing is posted; one failed
reply never affects another.
"""

from __future__ import annotations

import asyncio

import discord

from penelope.config.logging import get_logger
from penelope.llm import CompletionClient, LLMError, format_history, render_prompt
from penelope.llm.prompts import load_system_template

logger = get_logger(__name__)


class MessageResponder:
    """
    Answers guild messages that mention the bot.

    The bot's own user id is learned from the ready event via set_identity().
    Until then no message can be matched against the mention list, so every
    message is ignored.

    Args:
        completion: Shared completion client
        history_limit: Messages fetched before the trigger (default: 50)
        temperature: Sampling temperature for replies (default: 0.7)
        system_template: Persona template; defaults to the bundled one
    """

    def __init__(
        self,
        completion: CompletionClient,
        history_limit: int = 50,
        temperature: float = 0.7,
        system_template: str | None = None,
    ):
        self._completion = completion
        self._history_limit = history_limit
        self._temperature = temperature
        self._system_template = system_template or load_system_template()
        self._bot_user_id: int | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def bot_user_id(self) -> int | None:
        return self._bot_user_id

    @property
    def pending(self) -> int:
        """Number of replies still in flight."""
        return len(self._tasks)

    def set_identity(self, user_id: int) -> None:
        """Cache the bot's user id. Only the first call takes effect."""
        if self._bot_user_id is None:
            self._bot_user_id = user_id
            logger.info(f"Responding to mentions of user id {user_id}")
        elif self._bot_user_id != user_id:
            logger.warning(
                f"Ignoring identity change {self._bot_user_id} -> {user_id}; "
                "identity is fixed for the process lifetime"
            )

    # ------------------------------------------------------------------
    # Filter + dispatch
    # ------------------------------------------------------------------

    def should_respond(self, message: discord.Message) -> bool:
        """
        Return True if the message is a guild message mentioning the bot.

        Ignores:
        - Messages from bots (including ourselves)
        - Everything received before the bot identity is known
        - Messages that don't mention this bot
        - Direct messages
        """
        if message.author.bot:
            return False
        if self._bot_user_id is None:
            logger.debug(f"Identity not known yet; ignoring message {message.id}")
            return False
        if not any(user.id == self._bot_user_id for user in message.mentions):
            return False
        if message.guild is None:
            return False
        return True

    def dispatch(self, message: discord.Message) -> asyncio.Task | None:
        """
        Start a reply task for a qualifying message and return at once.

        Returns the task (for tests and shutdown draining) or None when the
        message was filtered out.
        """
        if not self.should_respond(message):
            return None

        task = asyncio.create_task(
            self.respond(message), name=f"penelope-reply-{message.id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self, timeout: float) -> None:
        """Wait up to `timeout` seconds for in-flight replies; abandon the rest."""
        if not self._tasks or timeout <= 0:
            return
        logger.info(f"Waiting up to {timeout}s for {len(self._tasks)} in-flight replies")
        done, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        if pending:
            logger.warning(f"Abandoning {len(pending)} unfinished replies")

    # ------------------------------------------------------------------
    # One reply
    # ------------------------------------------------------------------

    async def respond(self, message: discord.Message) -> None:
        """
        Gather context, ask the model and post its reply.

        Never raises: errors are logged and the message goes unanswered.
        """
        try:
            guild = message.guild
            history = await self.gather_history(message)

            names = await asyncio.gather(
                *(self.resolve_display_name(m.author, guild) for m in history)
            )
            history_block = format_history(
                (name, m.content) for name, m in zip(names, history)
            )
            author = await self.resolve_display_name(message.author, guild)

            prompt = render_prompt(
                history_block,
                author,
                message.content,
                template=self._system_template,
            )
            response = await self._completion.complete(
                prompt, temperature=self._temperature
            )
            await message.channel.send(response.text)
        except LLMError as e:
            logger.error(f"Completion failed for message {message.id}: {e}")
        except Exception as e:
            logger.exception(f"Error processing message {message.id}: {e}")

    async def gather_history(self, message: discord.Message) -> list[discord.Message]:
        """
        Fetch the messages before `message`, oldest first.

        discord.py yields history newest first when `before` is given.
        """
        newest_first = [
            m async for m in message.channel.history(
                limit=self._history_limit, before=message
            )
        ]
        newest_first.reverse()
        return newest_first

    async def resolve_display_name(
        self,
        user: discord.abc.User,
        guild: discord.Guild,
    ) -> str:
        """
        Return the name `user` goes by in `guild`.

        Uses the member profile attached to the message when there is one,
        then the guild's member cache, then an API lookup. Users who are no
        longer members fall back to their username.
        """
        if isinstance(user, discord.Member):
            return user.display_name

        member = guild.get_member(user.id)
        if member is None:
            try:
                member = await guild.fetch_member(user.id)
            except discord.NotFound:
                return user.name
        return member.display_name
