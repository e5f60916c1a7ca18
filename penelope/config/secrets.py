"""
Startup secrets from Azure Key Vault.

The bot token always comes from the vault. The completion endpoint and API
key come from the environment when set there, otherwise from the vault.
Every lookup is a single synchronous call made before the bot connects;
any failure raises SecretsError and the process must not start.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from azure.core.exceptions import AzureError
from azure.identity import ClientSecretCredential
from azure.keyvault.secrets import SecretClient

from penelope.config.logging import get_logger
from penelope.config.settings import SecretSettings

logger = get_logger(__name__)


class SecretsError(Exception):
    """A required secret or credential could not be resolved."""


class SecretsProvider(ABC):
    """Read-only access to the values the bot needs at startup."""

    @abstractmethod
    def get_bot_token(self) -> str:
        """Return the Discord bot token."""

    @abstractmethod
    def get_completion_endpoint(self) -> str:
        """Return the chat completion endpoint URL."""

    @abstractmethod
    def get_api_key(self) -> str:
        """Return the chat completion API key."""

    @abstractmethod
    def get_credential(self) -> ClientSecretCredential:
        """Return the credential used to reach the vault."""


class KeyVaultSecretsProvider(SecretsProvider):
    """
    SecretsProvider backed by an Azure Key Vault.

    Args:
        settings: Vault URI, service principal and secret names
        secret_client: Pre-built client (tests); built from settings if omitted

    Raises:
        SecretsError: If the vault URI or service principal fields are missing
    """

    def __init__(
        self,
        settings: SecretSettings,
        secret_client: SecretClient | None = None,
    ):
        self._settings = settings

        missing = [
            env_name
            for env_name, value in (
                ("AZURE_KEYVAULT_URI", settings.keyvault_uri),
                ("AZURE_TENANT_ID", settings.tenant_id),
                ("AZURE_CLIENT_ID", settings.client_id),
                ("AZURE_CLIENT_SECRET", settings.client_secret),
            )
            if not value
        ]
        if missing:
            raise SecretsError(f"Missing Key Vault configuration: {', '.join(missing)}")

        self._credential = ClientSecretCredential(
            settings.tenant_id, settings.client_id, settings.client_secret
        )
        self._client = secret_client or SecretClient(
            vault_url=settings.keyvault_uri, credential=self._credential
        )

    def _read_secret(self, secret_name: str, env_name: str) -> str:
        if not secret_name:
            raise SecretsError(f"{env_name} is not set")

        logger.debug(f"Reading secret {secret_name!r} from {self._settings.keyvault_uri}")
        try:
            secret = self._client.get_secret(secret_name)
        except AzureError as e:
            raise SecretsError(f"Could not read secret {secret_name!r}: {e}") from e

        if not secret.value:
            raise SecretsError(f"Secret {secret_name!r} is empty")
        return secret.value

    def get_bot_token(self) -> str:
        return self._read_secret(
            self._settings.keyvault_token_secret, "AZURE_KEYVAULT_TOKEN_SECRET"
        )

    def get_completion_endpoint(self) -> str:
        if self._settings.chat_completion_uri:
            return self._settings.chat_completion_uri
        return self._read_secret(
            self._settings.keyvault_completion_uri_secret,
            "AZURE_CHAT_COMPLETION_URI or AZURE_KEYVAULT_COMPLETION_URI_SECRET",
        )

    def get_api_key(self) -> str:
        if self._settings.chat_completion_apikey:
            return self._settings.chat_completion_apikey
        return self._read_secret(
            self._settings.keyvault_apikey_secret,
            "AZURE_CHAT_COMPLETION_APIKEY or AZURE_KEYVAULT_APIKEY_SECRET",
        )

    def get_credential(self) -> ClientSecretCredential:
        return self._credential
