"""Status API routes."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from encryptionprovider.api.schemas import HealthResponse, StatusResponse

router = APIRouter()
metrics_router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> JSONResponse:
    """Readiness of the provider: gate open and secret cache synced."""
    provider = request.app.state.provider
    cache = request.app.state.cache

    ready, err = provider.should_run_encryption_controllers()
    cache_synced = bool(cache.synced) if cache is not None else True
    healthy = ready and err is None and cache_synced
    body = HealthResponse(
        status="ok" if healthy else "degraded",
        cache_synced=cache_synced,
        ready=ready,
        ready_error=str(err) if err is not None else None,
    )
    return JSONResponse(status_code=200 if healthy else 503, content=body.model_dump())


@router.get("/status", response_model=StatusResponse)
async def status(request: Request) -> StatusResponse:
    """Report the configured protocol and the outcome of the last poll."""
    from encryptionprovider import __version__

    provider = request.app.state.provider
    cache = request.app.state.cache
    return StatusResponse(
        version=__version__,
        mode=provider.mode.value,
        target_namespace=provider.target_namespace,
        secret_name=provider.secret_name,
        secret_namespace=provider.secret_namespace,
        annotation_key=provider.annotation_key,
        authoritative_grs=[str(gr) for gr in provider.all_encrypted_grs],
        external_grs=provider.external_grs,
        managed_grs=[str(gr) for gr in provider.last_resolved],
        cached_secrets=len(cache) if cache is not None else 0,
    )


@metrics_router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
