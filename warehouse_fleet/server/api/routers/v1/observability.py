"""Observability endpoints (metrics)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from warehouse_fleet.enterprise.config.settings import AppSettings
from warehouse_fleet.observability.metrics import metrics_registry
from warehouse_fleet.server.dependencies import get_app_settings

router = APIRouter(prefix="/observability", tags=["observability"])


@router.get("/metrics", response_class=Response)
async def metrics(settings: AppSettings = Depends(get_app_settings)) -> Response:
    if not settings.telemetry.metrics_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Metrics are disabled")
    return Response(generate_latest(metrics_registry), media_type=CONTENT_TYPE_LATEST)
