"""
Application settings and configuration management.

Uses Pydantic Settings for validation and environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class BotSettings(BaseSettings):
    """Discord bot configuration."""

    name: str = Field(default="Penelope", description="Bot display name")
    history_limit: int = Field(
        default=50,
        gt=0,
        description="Number of messages before the mention fed to the model as context",
    )
    shutdown_drain_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="How long to wait for in-flight replies on shutdown. "
                    "0 abandons them immediately.",
    )


class LLMSettings(BaseSettings):
    """Chat completion configuration."""

    model: str = Field(
        default="openai/Meta-Llama-3-70B-Instruct",
        description="LiteLLM model string. The 'openai/' prefix routes the request to "
                    "any OpenAI-compatible endpoint given as api_base.",
    )
    temperature: float = Field(default=0.7, description="Sampling temperature")
    max_tokens: int | None = Field(
        default=None, description="Maximum tokens in response (None: provider default)"
    )
    timeout: float | None = Field(
        default=120.0,
        gt=0,
        description="Seconds to wait for a completion before giving up. None waits forever.",
    )

    model_config = SettingsConfigDict(env_prefix="LLM_", env_parse_none_str="None")


class SecretSettings(BaseSettings):
    """
    Azure Key Vault access and completion endpoint configuration.

    Read from the same AZURE_* variables the service principal tooling uses.
    The completion endpoint and key may be given directly or stored in the
    vault under the names in the *_secret fields.
    """

    keyvault_uri: str = Field(default="", description="Key Vault URL")
    client_id: str = Field(default="", description="Service principal client id")
    client_secret: str = Field(default="", description="Service principal secret")
    tenant_id: str = Field(default="", description="Azure AD tenant id")

    keyvault_token_secret: str = Field(
        default="", description="Name of the vault secret holding the Discord bot token"
    )
    keyvault_completion_uri_secret: str = Field(
        default="", description="Name of the vault secret holding the completion endpoint"
    )
    keyvault_apikey_secret: str = Field(
        default="", description="Name of the vault secret holding the completion API key"
    )

    chat_completion_uri: str = Field(
        default="", description="Completion endpoint; takes precedence over the vault"
    )
    chat_completion_apikey: str = Field(
        default="", description="Completion API key; takes precedence over the vault"
    )

    model_config = SettingsConfigDict(
        env_prefix="AZURE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class Settings(BaseSettings):
    """Main application settings."""

    # Environment
    environment: Literal["development", "production"] = Field(
        default="development", description="Deployment environment"
    )

    # Logging
    log_level: LogLevel = Field(default="INFO", description="Logging level")
    log_file: Path | None = Field(default=None, description="Log file path")
    discord_log_level: LogLevel = Field(
        default="INFO", description="Level for discord.py's own gateway logging"
    )

    # Sub-configurations
    bot: BotSettings = Field(default_factory=BotSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    secrets: SecretSettings = Field(default_factory=SecretSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings(env_file: str | Path | None = None) -> Settings:
    """
    Load settings from file and environment.

    Args:
        env_file: Path to .env file (optional)

    Returns:
        Loaded settings instance
    """
    global _settings
    if env_file:
        # SecretSettings reads AZURE_* itself, so point it at the same file
        _settings = Settings(
            _env_file=env_file,
            secrets=SecretSettings(_env_file=env_file),
        )
    else:
        _settings = Settings()
    return _settings
