"""FastAPI application factory for the encryption provider status API.

Usage::

    from encryptionprovider.api.app import create_app

    app = create_app(provider=provider, cache=cache, config=config)

The factory is used by both the production bootstrap
(``encryptionprovider.app``) and unit tests.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from encryptionprovider.api.routes import metrics_router, router
from encryptionprovider.api.schemas import ErrorResponse

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api/v1"


def create_app(
    provider: Any,
    cache: Any = None,
    config: Any = None,
) -> FastAPI:
    """Create and configure the status API.

    Args:
        provider: EncryptionProvider instance. Only read; the API never polls.
        cache:    Optional SecretCache, reported in health and status.
        config:   Optional EncryptionProviderConfig.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from encryptionprovider import __version__

    app = FastAPI(
        title="encryption-provider",
        summary="Encrypted group-resource coordination status",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url=None,
        openapi_url="/api/v1/openapi.json",
    )

    app.state.provider = provider
    app.state.cache = cache
    app.state.config = config

    app.include_router(router, prefix=_API_PREFIX)
    app.include_router(metrics_router)

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                detail="An unexpected error occurred.",
            ).model_dump(),
        )

    return app
