"""
Configuration Tests

Tests environment loading, defaults and certificate material trimming.
"""

import pytest
from pydantic import ValidationError

from aad_sso.config import SCOPE, USER_INFO_URL, Settings, get_settings


def test_defaults_without_environment():
    settings = Settings(_env_file=None)

    assert settings.AAD_SSO_TENANT_ID == "common"
    assert settings.AAD_SSO_CLIENT_ID == ""
    assert settings.AAD_SSO_CLIENT_VALUE == ""
    assert settings.AAD_BASE_HOST_URL is None
    assert settings.azure_authority == "https://login.microsoftonline.com/common"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("AAD_SSO_TENANT_ID", "contoso.onmicrosoft.com")
    monkeypatch.setenv("AAD_SSO_CLIENT_ID", "11111111-2222-3333-4444-555555555555")
    monkeypatch.setenv("AAD_SSO_CLIENT_VALUE", "env-secret")
    monkeypatch.setenv("AAD_BASE_HOST_URL", "https://portal.contoso.com")

    settings = get_settings()

    assert settings.azure_authority == "https://login.microsoftonline.com/contoso.onmicrosoft.com"
    assert settings.AAD_SSO_CLIENT_ID == "11111111-2222-3333-4444-555555555555"
    assert settings.AAD_SSO_CLIENT_VALUE == "env-secret"
    assert settings.AAD_BASE_HOST_URL == "https://portal.contoso.com"


def test_thumbprint_accepts_corrected_spelling(monkeypatch):
    monkeypatch.setenv("AAD_SSO_CERT_THUMBPRINT", "  abcdef  ")

    assert get_settings().AAD_SSO_CERT_THUBMPRINT == "abcdef"


def test_reads_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("AAD_SSO_CLIENT_ID=from-dotenv\n")

    assert Settings().AAD_SSO_CLIENT_ID == "from-dotenv"


def test_invalid_log_level_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, LOG_LEVEL="verbose")


def test_log_level_normalized():
    assert Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


def test_constants():
    assert SCOPE == ["user.read"]
    assert USER_INFO_URL == "https://graph.microsoft.com/v1.0/me"
