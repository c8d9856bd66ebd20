"""
Azure AD login client built on MSAL for Python.

This module handles:
- Building the authorization URL the user is sent to for login
- Exchanging the returned authorization code for tokens
- Fetching the signed-in user's profile from Microsoft Graph

Token exchange, client assertions and token validation all happen inside
MSAL; this module only feeds it configuration and arguments.
"""

import asyncio
import logging
import threading
from functools import lru_cache, partial
from typing import Any, Dict, Mapping, Optional, Union

import httpx
import msal

from aad_sso.callback import CallbackUrlBuilder, get_login_callback_url
from aad_sso.config import SCOPE, USER_INFO_URL, Settings, get_settings
from aad_sso.credentials import ClientCredential, resolve_credential
from aad_sso.models import AuthorizationCodeRequest

logger = logging.getLogger("aad_sso.client")

LOGIN_URL_ERROR_MESSAGE = "Failed to construct Login URL"


class LoginUrlError(Exception):
    """Raised when the authorization URL cannot be built. Carries no cause."""

    def __init__(self, message: str = LOGIN_URL_ERROR_MESSAGE):
        super().__init__(message)
        self.message = message


class AADLoginClient:
    """
    Long-lived login client for one Azure AD application.

    Holds the resolved settings and credential and a lazily built
    ``msal.ConfidentialClientApplication``. Pass ``msal_app`` or
    ``http_client`` to substitute collaborators (tests do).

    Attributes:
        settings: Settings the client was built from
        credential: Client credential chosen for MSAL
    """

    def __init__(
        self,
        settings: Settings,
        credential: Optional[ClientCredential] = None,
        *,
        msal_app: Optional[msal.ConfidentialClientApplication] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        callback_url_builder: Optional[CallbackUrlBuilder] = None,
    ):
        self.settings = settings
        self.credential = credential if credential is not None else resolve_credential(settings)

        self._msal_app = msal_app
        self._msal_lock = threading.Lock()
        self._http_client = http_client
        self._callback_url_builder = callback_url_builder or partial(
            get_login_callback_url,
            callback_path=settings.AAD_SSO_CALLBACK_PATH,
        )

    @property
    def msal_app(self) -> msal.ConfidentialClientApplication:
        """
        The MSAL application, built on first use.

        MSAL fetches the authority metadata when constructed, so building it
        is deferred until a login actually needs it. The build runs in worker
        threads, so it is serialized and happens once per client.
        """
        if self._msal_app is not None:
            return self._msal_app

        with self._msal_lock:
            if self._msal_app is None:
                self._msal_app = msal.ConfidentialClientApplication(
                    self.settings.AAD_SSO_CLIENT_ID,
                    authority=self.settings.azure_authority,
                    client_credential=self.credential.to_msal(),
                )
                logger.info(
                    "MSAL app initialized for tenant %s (credential: %s)",
                    self.settings.AAD_SSO_TENANT_ID,
                    self.credential.kind,
                )
        return self._msal_app

    # =========================================================================
    # Login URL
    # =========================================================================

    async def get_login_url(self, request_url: str) -> str:
        """
        Build the Azure AD authorization URL for a login started at ``request_url``.

        The derived callback URL is sent both as ``redirect_uri`` and as
        ``state`` so it comes back with the authorization response, which is
        delivered by form POST.

        Args:
            request_url: URL of the request that initiated the login

        Returns:
            Authorization URL to send the user agent to

        Raises:
            LoginUrlError: If MSAL fails to build the URL, whatever the reason
        """
        redirect_uri = self._callback_url_builder(request_url, self.settings.AAD_BASE_HOST_URL)

        try:
            return await asyncio.to_thread(
                lambda: self.msal_app.get_authorization_request_url(
                    list(SCOPE),
                    redirect_uri=redirect_uri,
                    state=redirect_uri,
                    prompt="select_account",
                    response_mode="form_post",
                )
            )
        except Exception:
            logger.error("Unable to build Azure AD authorization URL", exc_info=True)
            raise LoginUrlError() from None

    # =========================================================================
    # Token Exchange
    # =========================================================================

    async def get_auth_access_token_from_code(
        self,
        redirect_uri: str,
        params: Union[AuthorizationCodeRequest, Mapping[str, Any]],
    ) -> Dict[str, Any]:
        """
        Exchange an authorization code for tokens.

        ``scopes`` defaults to user.read when the request has none, and
        ``redirect_uri`` always replaces whatever the request carried. The
        caller's object is left untouched.

        Args:
            redirect_uri: Redirect URI that was used to obtain the code
            params: Authorization code request (model or mapping)

        Returns:
            MSAL token result dict, unmodified. On failure MSAL returns a
            dict with ``error`` and ``error_description`` instead.
        """
        if not isinstance(params, AuthorizationCodeRequest):
            params = AuthorizationCodeRequest.model_validate(params)

        request = params.model_copy(
            update={
                "scopes": params.scopes if params.scopes is not None else list(SCOPE),
                "redirect_uri": redirect_uri,
            }
        )

        extra: Dict[str, Any] = {}
        if request.nonce:
            extra["nonce"] = request.nonce
        if request.claims_challenge:
            extra["claims_challenge"] = request.claims_challenge

        return await asyncio.to_thread(
            lambda: self.msal_app.acquire_token_by_authorization_code(
                request.code,
                request.scopes,
                redirect_uri=request.redirect_uri,
                **extra,
            )
        )

    # =========================================================================
    # User Profile
    # =========================================================================

    async def get_user_info(self, access_token: str) -> Dict[str, Any]:
        """
        Fetch the signed-in user's profile from Microsoft Graph.

        Args:
            access_token: Bearer access token from the code exchange

        Returns:
            Parsed JSON profile, unmodified

        Raises:
            httpx.HTTPStatusError: If Graph answers with a non-2xx status
            httpx.HTTPError: On network failure
        """
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }

        if self._http_client is not None:
            response = await self._http_client.get(USER_INFO_URL, headers=headers)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.get(USER_INFO_URL, headers=headers)

        response.raise_for_status()
        return response.json()


# =============================================================================
# Process-wide Client
# =============================================================================

@lru_cache()
def get_login_client() -> AADLoginClient:
    """
    Get or create the process-wide login client.

    Credential resolution (and its missing-credential warning) happens
    here, once per process.
    """
    return AADLoginClient(get_settings())


async def get_login_url(request_url: str) -> str:
    return await get_login_client().get_login_url(request_url)


async def get_auth_access_token_from_code(
    redirect_uri: str,
    params: Union[AuthorizationCodeRequest, Mapping[str, Any]],
) -> Dict[str, Any]:
    return await get_login_client().get_auth_access_token_from_code(redirect_uri, params)


async def get_user_info(access_token: str) -> Dict[str, Any]:
    return await get_login_client().get_user_info(access_token)
