"""
AAD SSO Package

Azure AD (Microsoft Entra ID) authorization code login on top of MSAL.

Modules:
- config: Environment settings (tenant, client id, secret or certificate)
- credentials: Certificate / secret / unconfigured credential selection
- callback: Callback URL derivation from the login request
- client: Login URL, code exchange and Graph profile fetch
- routes: HTTP endpoints for login and the form_post callback

The login flow:
1. Client is sent to the URL from get_login_url
2. User signs in with Azure AD and picks an account
3. Azure AD posts the code to the callback, with the redirect URI in state
4. get_auth_access_token_from_code exchanges the code via MSAL
5. get_user_info reads the profile from Microsoft Graph
"""

__version__ = "1.0.0"

from .client import (
    AADLoginClient,
    LoginUrlError,
    get_auth_access_token_from_code,
    get_login_client,
    get_login_url,
    get_user_info,
)

__all__ = [
    "AADLoginClient",
    "LoginUrlError",
    "get_auth_access_token_from_code",
    "get_login_client",
    "get_login_url",
    "get_user_info",
]
