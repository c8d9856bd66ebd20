"""
Configuration module for the AAD SSO login service.

This module uses Pydantic Settings to load environment variables for the
Azure AD (Microsoft Entra ID) confidential client: tenant, client id and
the client credential (shared secret or certificate).

Environment variables are loaded from .env file or system environment.
Nothing here checks that a credential is actually present; see
``aad_sso.credentials`` for how the authentication mode is chosen.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Delegated permission requested on every login and code exchange
SCOPE: List[str] = ["user.read"]

# Profile ("me") endpoint of Microsoft Graph
USER_INFO_URL = "https://graph.microsoft.com/v1.0/me"

LOGIN_AUTHORITY_HOST = "https://login.microsoftonline.com"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field is optional; an empty credential only surfaces as an
    error when the identity provider rejects a login.
    """

    # =========================================================================
    # Redirect Construction
    # =========================================================================

    AAD_BASE_HOST_URL: Optional[str] = Field(
        None,
        description="Base host used instead of the request host when building the callback URL",
    )

    AAD_SSO_CALLBACK_PATH: str = Field(
        default="/api/sso/aad/callback",
        description="Path of the endpoint that receives the form_post authorization response",
    )

    # =========================================================================
    # Azure AD / Entra ID Application
    # =========================================================================

    AAD_SSO_TENANT_ID: str = Field(
        default="common",
        description="Azure AD tenant ID ('common' for multi-tenant and personal accounts)",
    )

    AAD_SSO_CLIENT_ID: str = Field(
        default="",
        description="Azure AD Application (Client) ID",
    )

    AAD_SSO_CLIENT_VALUE: str = Field(
        default="",
        description="Azure AD client secret value",
    )

    # openssl x509 -in <certificate>.txt -noout -fingerprint -sha1 | sed 's/.*=//;s/://g'
    AAD_SSO_CERT_THUBMPRINT: str = Field(
        default="",
        validation_alias=AliasChoices("AAD_SSO_CERT_THUBMPRINT", "AAD_SSO_CERT_THUMBPRINT"),
        description="SHA-1 thumbprint of the client certificate (40 hex characters)",
    )

    # openssl pkcs8 -topk8 -nocrypt -in <private_key>.txt
    AAD_SSO_CERT_PRIVATE_KEY: str = Field(
        default="",
        description="Private key of the client certificate in PKCS8 PEM format",
    )

    # =========================================================================
    # Server Configuration
    # =========================================================================

    HOST: str = Field(default="0.0.0.0", description="Host to bind the server")

    PORT: int = Field(default=8080, description="Port to bind the server", ge=1, le=65535)

    LOG_LEVEL: str = Field(default="INFO", description="Root logging level")

    # =========================================================================
    # Pydantic Settings Configuration
    # =========================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def azure_authority(self) -> str:
        """
        Construct the Azure AD authority URL for the configured tenant.

        Returns:
            Authority URL handed to MSAL.
        """
        return f"{LOGIN_AUTHORITY_HOST}/{self.AAD_SSO_TENANT_ID}"

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("AAD_SSO_CERT_THUBMPRINT", "AAD_SSO_CERT_PRIVATE_KEY")
    @classmethod
    def strip_certificate_material(cls, v: str) -> str:
        """Trim surrounding whitespace left over from multi-line env values."""
        return (v or "").strip()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

        level = v.upper()
        if level not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}, got: {v}")

        return level


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    Settings are read once per process; call ``get_settings.cache_clear()``
    to force a reload (tests do this after changing the environment).
    """
    return Settings()
