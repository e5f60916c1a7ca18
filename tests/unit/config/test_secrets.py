"""
Tests for KeyVaultSecretsProvider.

The Azure SecretClient is replaced with a MagicMock and the credential class
is patched, so nothing talks to Azure.
"""

from unittest.mock import MagicMock, patch

import pytest
from azure.core.exceptions import ResourceNotFoundError, ServiceRequestError

from penelope.config.secrets import KeyVaultSecretsProvider, SecretsError
from penelope.config.settings import SecretSettings


def _secret_settings(**overrides) -> SecretSettings:
    values = dict(
        keyvault_uri="https://penelope.vault.azure.net/",
        client_id="client-id",
        client_secret="client-secret",
        tenant_id="tenant-id",
        keyvault_token_secret="discord-token",
        keyvault_completion_uri_secret="",
        keyvault_apikey_secret="",
        chat_completion_uri="https://llm.example.com/v1",
        chat_completion_apikey="env-api-key",
    )
    values.update(overrides)
    return SecretSettings(_env_file=None, **values)


def _vault(secrets: dict[str, str]) -> MagicMock:
    """SecretClient mock serving `secrets` by name."""

    def get_secret(name):
        if name not in secrets:
            raise ResourceNotFoundError(f"Secret {name} not found")
        secret = MagicMock()
        secret.value = secrets[name]
        return secret

    client = MagicMock()
    client.get_secret.side_effect = get_secret
    return client


@pytest.fixture(autouse=True)
def credential_cls():
    with patch("penelope.config.secrets.ClientSecretCredential") as cls:
        yield cls


class TestConstruction:
    def test_builds_credential_from_service_principal(self, credential_cls):
        provider = KeyVaultSecretsProvider(_secret_settings(), secret_client=_vault({}))

        credential_cls.assert_called_once_with("tenant-id", "client-id", "client-secret")
        assert provider.get_credential() is credential_cls.return_value

    def test_builds_secret_client_when_not_given(self, credential_cls):
        with patch("penelope.config.secrets.SecretClient") as client_cls:
            KeyVaultSecretsProvider(_secret_settings())

        client_cls.assert_called_once_with(
            vault_url="https://penelope.vault.azure.net/",
            credential=credential_cls.return_value,
        )

    @pytest.mark.parametrize(
        "field, env_name",
        [
            ("keyvault_uri", "AZURE_KEYVAULT_URI"),
            ("tenant_id", "AZURE_TENANT_ID"),
            ("client_id", "AZURE_CLIENT_ID"),
            ("client_secret", "AZURE_CLIENT_SECRET"),
        ],
    )
    def test_missing_vault_configuration_is_fatal(self, field, env_name):
        with pytest.raises(SecretsError, match=env_name):
            KeyVaultSecretsProvider(_secret_settings(**{field: ""}), secret_client=_vault({}))


class TestBotToken:
    def test_reads_token_from_vault(self):
        vault = _vault({"discord-token": "tok-123"})
        provider = KeyVaultSecretsProvider(_secret_settings(), secret_client=vault)

        assert provider.get_bot_token() == "tok-123"
        vault.get_secret.assert_called_once_with("discord-token")

    def test_missing_secret_name_is_fatal(self):
        provider = KeyVaultSecretsProvider(
            _secret_settings(keyvault_token_secret=""), secret_client=_vault({})
        )
        with pytest.raises(SecretsError, match="AZURE_KEYVAULT_TOKEN_SECRET"):
            provider.get_bot_token()

    def test_secret_not_found_is_fatal(self):
        provider = KeyVaultSecretsProvider(_secret_settings(), secret_client=_vault({}))
        with pytest.raises(SecretsError, match="discord-token"):
            provider.get_bot_token()

    def test_unreachable_vault_is_fatal_and_not_retried(self):
        vault = MagicMock()
        vault.get_secret.side_effect = ServiceRequestError("connection refused")
        provider = KeyVaultSecretsProvider(_secret_settings(), secret_client=vault)

        with pytest.raises(SecretsError, match="connection refused"):
            provider.get_bot_token()
        assert vault.get_secret.call_count == 1

    def test_empty_secret_is_fatal(self):
        provider = KeyVaultSecretsProvider(
            _secret_settings(), secret_client=_vault({"discord-token": ""})
        )
        with pytest.raises(SecretsError, match="empty"):
            provider.get_bot_token()


class TestCompletionSecrets:
    def test_environment_values_win(self):
        vault = _vault({})
        provider = KeyVaultSecretsProvider(_secret_settings(), secret_client=vault)

        assert provider.get_completion_endpoint() == "https://llm.example.com/v1"
        assert provider.get_api_key() == "env-api-key"
        vault.get_secret.assert_not_called()

    def test_falls_back_to_vault_secret_names(self):
        settings = _secret_settings(
            chat_completion_uri="",
            chat_completion_apikey="",
            keyvault_completion_uri_secret="llm-endpoint",
            keyvault_apikey_secret="llm-key",
        )
        vault = _vault({"llm-endpoint": "https://vault-llm.example.com", "llm-key": "vault-key"})
        provider = KeyVaultSecretsProvider(settings, secret_client=vault)

        assert provider.get_completion_endpoint() == "https://vault-llm.example.com"
        assert provider.get_api_key() == "vault-key"

    def test_neither_source_configured_is_fatal(self):
        settings = _secret_settings(chat_completion_uri="", chat_completion_apikey="")
        provider = KeyVaultSecretsProvider(settings, secret_client=_vault({}))

        with pytest.raises(SecretsError, match="AZURE_CHAT_COMPLETION_URI"):
            provider.get_completion_endpoint()
        with pytest.raises(SecretsError, match="AZURE_CHAT_COMPLETION_APIKEY"):
            provider.get_api_key()
