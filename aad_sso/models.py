"""
Data Models Module

Pydantic models for the SSO login flow: the authorization code request
handed to MSAL and the request/response bodies of the HTTP endpoints.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Token Exchange Models
# ============================================================================

class AuthorizationCodeRequest(BaseModel):
    """Parameters for exchanging an authorization code for tokens."""
    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(..., description="Authorization code returned by Azure AD")
    scopes: Optional[List[str]] = Field(None, description="Scopes to request (defaults to user.read)")
    redirect_uri: Optional[str] = Field(
        None,
        alias="redirectUri",
        description="Redirect URI used in the login request; always overwritten before the exchange",
    )
    nonce: Optional[str] = Field(None, description="Nonce sent in the login request, if any")
    claims_challenge: Optional[str] = Field(None, description="Claims challenge from a resource API")


# ============================================================================
# HTTP Response Models
# ============================================================================

class LoginUrlResponse(BaseModel):
    """Authorization URL the user agent should be sent to."""
    login_url: str = Field(..., description="Azure AD authorization URL")


class SSOCallbackResponse(BaseModel):
    """Result of a completed login: token metadata and Graph profile."""
    token_type: str = Field(default="Bearer", description="Token type")
    expires_in: Optional[int] = Field(None, description="Access token lifetime in seconds")
    scope: Optional[Union[str, List[str]]] = Field(None, description="Scopes granted by Azure AD")
    redirect_uri: str = Field(..., description="Redirect URI that round-tripped through state")
    user: Dict[str, Any] = Field(..., description="Profile returned by the Graph /me endpoint")


class ErrorResponse(BaseModel):
    """Standard error body."""
    error: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    detail: Optional[Any] = Field(None, description="Additional error details")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(default="ok", description="Service status")
    service: str = Field(default="aad-sso", description="Service name")
    version: str = Field(..., description="Service version")
    credential_mode: str = Field(..., description="Configured client credential mode")
    tenant_id: str = Field(..., description="Configured tenant ID")
