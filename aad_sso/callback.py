"""
Callback URL derivation for the SSO login flow.
"""

from typing import Callable, Optional
from urllib.parse import urlsplit, urlunsplit

DEFAULT_CALLBACK_PATH = "/api/sso/aad/callback"

# (request_url, base_host) -> redirect URL
CallbackUrlBuilder = Callable[[str, Optional[str]], str]


def _split_origin(url: str):
    parts = urlsplit(url if "://" in url else f"https://{url}")
    if not parts.netloc:
        raise ValueError(f"Cannot derive a host from URL: {url!r}")
    return parts.scheme or "https", parts.netloc, parts.path


def get_login_callback_url(
    request_url: str,
    base_host: Optional[str] = None,
    callback_path: str = DEFAULT_CALLBACK_PATH,
) -> str:
    """
    Build the redirect URL Azure AD posts the authorization result to.

    Scheme and host are taken from ``base_host`` when set (a bare host name
    means https), otherwise from the incoming ``request_url``. A path on
    ``base_host`` is kept as a prefix, so an app mounted under ``/portal``
    gets ``/portal/api/sso/aad/callback``. Query string and fragment of the
    request are dropped.

    Args:
        request_url: Full URL of the request that started the login
        base_host: Optional public base URL override (e.g. behind a proxy)
        callback_path: Path of the callback endpoint

    Returns:
        Absolute callback URL
    """
    if base_host:
        scheme, netloc, prefix = _split_origin(base_host.strip())
    else:
        scheme, netloc, _ = _split_origin(request_url)
        prefix = ""

    path = prefix.rstrip("/") + "/" + callback_path.lstrip("/")
    return urlunsplit((scheme, netloc, path, "", ""))
