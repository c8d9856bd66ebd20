"""
SSO routes for the Azure AD authorization code flow.

Login redirects the user to Azure AD; Azure AD posts the authorization
response back to the callback (response_mode=form_post), where the code is
exchanged for tokens and the user's Graph profile is returned.
"""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from aad_sso.client import AADLoginClient, LoginUrlError, get_login_client
from aad_sso.models import LoginUrlResponse, SSOCallbackResponse

logger = logging.getLogger("aad_sso.routes")


# =============================================================================
# Router Setup
# =============================================================================

sso_router = APIRouter(
    prefix="/api/sso/aad",
    tags=["sso"],
)


async def _build_login_url(request: Request, client: AADLoginClient) -> str:
    try:
        return await client.get_login_url(str(request.url))
    except LoginUrlError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "login_url_unavailable", "message": e.message},
        )


# =============================================================================
# Login Endpoints
# =============================================================================

@sso_router.get("/login", response_class=RedirectResponse)
async def login(request: Request, client: AADLoginClient = Depends(get_login_client)):
    """
    Start the login by redirecting to the Azure AD authorization endpoint.

    Returns:
        302 RedirectResponse to Microsoft login, or 502 if the URL
        could not be built
    """
    login_url = await _build_login_url(request, client)
    return RedirectResponse(url=login_url, status_code=status.HTTP_302_FOUND)


@sso_router.get("/login-url", response_model=LoginUrlResponse)
async def login_url(request: Request, client: AADLoginClient = Depends(get_login_client)):
    """Return the authorization URL as JSON, for clients that redirect themselves."""
    return LoginUrlResponse(login_url=await _build_login_url(request, client))


# =============================================================================
# Callback Endpoint
# =============================================================================

@sso_router.post("/callback", response_model=SSOCallbackResponse)
async def callback(
    code: Optional[str] = Form(None, description="Authorization code from Azure AD"),
    state: Optional[str] = Form(None, description="Redirect URI round-tripped through state"),
    error: Optional[str] = Form(None, description="Error code if authentication failed"),
    error_description: Optional[str] = Form(None, description="Error description"),
    client: AADLoginClient = Depends(get_login_client),
):
    """
    Handle the form_post authorization response from Azure AD.

    The ``state`` field carries the redirect URI the login was started
    with, and is used as the redirect URI of the code exchange.

    Returns:
        Token metadata and the user's Graph profile
    """
    if error:
        logger.warning("Azure AD returned an authorization error: %s", error)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": error, "message": error_description or error},
        )

    if not code or not state:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "message": "Missing required parameters (code or state)"},
        )

    result = await client.get_auth_access_token_from_code(state, {"code": code})

    if "error" in result or "access_token" not in result:
        logger.warning("Token exchange failed: %s", result.get("error", "no access token"))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": result.get("error", "invalid_grant"),
                "message": result.get("error_description") or "Token exchange failed",
            },
        )

    try:
        user = await client.get_user_info(result["access_token"])
    except httpx.HTTPError as e:
        logger.error("Graph profile request failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "profile_unavailable", "message": "Unable to fetch user profile"},
        )

    return SSOCallbackResponse(
        token_type=result.get("token_type", "Bearer"),
        expires_in=result.get("expires_in"),
        scope=result.get("scope"),
        redirect_uri=state,
        user=user,
    )
