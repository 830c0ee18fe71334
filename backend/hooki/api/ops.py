"""Operations endpoints providing health checks and metrics."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from hooki.container import Container, get_container
from hooki.obs import health

router = APIRouter(prefix="", tags=["ops"])


@router.get("/health")
async def health_live() -> dict:
	return await health.liveness()


@router.get("/health/ready")
async def health_ready(container: Container = Depends(get_container)) -> Response:
	status_code, payload = await health.readiness(container.store)
	return JSONResponse(content=payload, status_code=status_code)


@router.get("/metrics")
async def metrics_endpoint() -> Response:
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
