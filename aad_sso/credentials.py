"""
Client credential resolution for the MSAL confidential client.

The authentication mode is chosen once, from settings, by priority:

1. Certificate (40 character thumbprint plus a private key)
2. Shared secret
3. Unconfigured: a warning is logged and startup continues. Logins will
   then be rejected by Azure AD, not here.
"""

import logging
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from aad_sso.config import Settings

logger = logging.getLogger("aad_sso.credentials")

THUMBPRINT_LENGTH = 40


class CertificateCredential(BaseModel):
    """X.509 certificate credential (thumbprint + PKCS8 private key)."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["certificate"] = "certificate"
    thumbprint: str = Field(..., min_length=THUMBPRINT_LENGTH, max_length=THUMBPRINT_LENGTH)
    private_key: SecretStr

    def to_msal(self) -> Dict[str, str]:
        # https://learn.microsoft.com/entra/msal/python/advanced/client-credentials
        return {
            "thumbprint": self.thumbprint,
            "private_key": self.private_key.get_secret_value(),
        }


class SecretCredential(BaseModel):
    """Shared client secret credential."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["secret"] = "secret"
    client_secret: SecretStr

    def to_msal(self) -> str:
        return self.client_secret.get_secret_value()


class Unconfigured(BaseModel):
    """No usable credential was found in the environment."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["unconfigured"] = "unconfigured"

    def to_msal(self) -> None:
        return None


ClientCredential = Annotated[
    Union[CertificateCredential, SecretCredential, Unconfigured],
    Field(discriminator="kind"),
]


def resolve_credential(settings: Settings) -> ClientCredential:
    """
    Pick the client credential described by ``settings``.

    A certificate wins over a secret when both are present. When neither is
    present a warning is logged and ``Unconfigured`` is returned; this never
    raises.

    Args:
        settings: Loaded application settings

    Returns:
        One of CertificateCredential, SecretCredential or Unconfigured
    """
    thumbprint = settings.AAD_SSO_CERT_THUBMPRINT
    private_key = settings.AAD_SSO_CERT_PRIVATE_KEY

    if len(thumbprint) == THUMBPRINT_LENGTH and private_key:
        logger.info("AAD client authenticates with certificate %s", thumbprint)
        return CertificateCredential(thumbprint=thumbprint, private_key=private_key)

    if settings.AAD_SSO_CLIENT_VALUE:
        logger.info("AAD client authenticates with client secret")
        return SecretCredential(client_secret=settings.AAD_SSO_CLIENT_VALUE)

    logger.warning("AAD configuration missing either client secret or certificate")
    return Unconfigured()


def describe_credential(credential: ClientCredential) -> Dict[str, Optional[Any]]:
    """
    Return a loggable summary of the credential. Does NOT return secret values.
    """
    return {
        "mode": credential.kind,
        "thumbprint": getattr(credential, "thumbprint", None),
    }
