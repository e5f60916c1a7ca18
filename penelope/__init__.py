"""
Penelope - LLM-powered Discord bot that replies when mentioned.

When a guild message mentions the bot, the preceding channel history and the
message are sent to a chat completion endpoint and the reply is posted back
to the channel.
"""

__version__ = "0.1.0"
