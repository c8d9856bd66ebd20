"""
FastAPI Application Factory
===========================

Entry point for the AAD SSO login service.

Routers:
    - /api/sso/aad/*  : Login redirect, login URL and form_post callback
    - /health         : Health check endpoint

Environment Variables:
    - AAD_BASE_HOST_URL: Public base URL used for the callback (optional)
    - AAD_SSO_TENANT_ID: Tenant ID (default: common)
    - AAD_SSO_CLIENT_ID: Application (client) ID
    - AAD_SSO_CLIENT_VALUE: Client secret
    - AAD_SSO_CERT_THUBMPRINT / AAD_SSO_CERT_PRIVATE_KEY: Client certificate
    - LOG_LEVEL: Logging level (default: INFO)

Running the Service:
    Development:
        uvicorn aad_sso.main:app --reload --host 0.0.0.0 --port 8080

    Production:
        uvicorn aad_sso.main:app --host 0.0.0.0 --port 8080 --workers 4
"""

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from aad_sso import __version__
from aad_sso.client import AADLoginClient, get_login_client
from aad_sso.config import get_settings
from aad_sso.credentials import describe_credential
from aad_sso.models import HealthResponse
from aad_sso.routes import sso_router


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup resolves the login client once, so a missing credential is
    reported in the startup log rather than on the first login.
    """
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    logger = logging.getLogger("aad_sso.main")

    client = get_login_client()
    credential = describe_credential(client.credential)
    logger.info(
        "Starting AAD SSO service (tenant: %s, credential mode: %s, thumbprint: %s, base host: %s)",
        settings.AAD_SSO_TENANT_ID,
        credential["mode"],
        credential["thumbprint"],
        settings.AAD_BASE_HOST_URL,
    )

    yield

    logger.info("AAD SSO service shutdown complete")


def create_application() -> FastAPI:
    """
    Application factory function.

    Returns:
        FastAPI: Configured application instance
    """
    app = FastAPI(
        title="AAD SSO Service",
        description="Azure AD authorization code login for web clients",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(sso_router)

    @app.get("/health", tags=["System"], response_model=HealthResponse)
    async def health_check(client: AADLoginClient = Depends(get_login_client)) -> HealthResponse:
        """Service status and configured credential mode (no secret values)."""
        return HealthResponse(
            version=__version__,
            credential_mode=client.credential.kind,
            tenant_id=client.settings.AAD_SSO_TENANT_ID,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Log unhandled errors and return a standardized error response.
        """
        logger = logging.getLogger("aad_sso.main")
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__
            },
            exc_info=True
        )

        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred",
                "detail": str(exc) if get_settings().LOG_LEVEL == "DEBUG" else None
            }
        )

    return app


app = create_application()


if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "aad_sso.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
