"""
Prompt construction for the Penelope persona.

The system prompt is a fixed template (prompts/system.txt) with two
placeholders, {history} and {author}. Substitution is a single regex pass,
so braces or placeholder-like text inside chat messages are copied as-is.
The user turn is the triggering message content, unmodified.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

SYSTEM_TEMPLATE_PATH = Path(__file__).parent.parent / "prompts" / "system.txt"

_PLACEHOLDER_RE = re.compile(r"\{(history|author)\}")


def load_system_template(path: Path = SYSTEM_TEMPLATE_PATH) -> str:
    return path.read_text(encoding="utf-8")


class RenderedPrompt(BaseModel):
    """System instructions plus the user turn for one completion."""

    system: str = Field(description="Persona rules with history and author filled in")
    user: str = Field(description="Triggering message content, verbatim")

    def to_messages(self) -> list[dict[str, Any]]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]


def format_history(entries: Iterable[tuple[str, str]]) -> str:
    """
    Turn (display_name, content) pairs into the history block.

    One "name: content" line per message, in the order given.
    """
    return "\n".join(f"{name}: {content}" for name, content in entries)


def render_prompt(
    history: str,
    author: str,
    content: str,
    template: str | None = None,
) -> RenderedPrompt:
    """
    Build the prompt for one reply.

    Args:
        history: Chronological history block from format_history()
        author: Display name of the user being answered
        content: Raw content of the triggering message
        template: System template; defaults to the bundled persona
    """
    if template is None:
        template = load_system_template()

    values = {"history": history, "author": author}
    system = _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)
    return RenderedPrompt(system=system, user=content)
