"""
Discord Bot Layer.

Receives gateway events, decides which messages to answer and posts the
model's replies for the Penelope bot.
"""

from penelope.bot.client import PenelopeBot
from penelope.bot.responder import MessageResponder

__all__ = ["PenelopeBot", "MessageResponder"]
