"""Liveness and readiness probes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from warehouse_fleet.persistence.store import EntityStore, StoreError
from warehouse_fleet.server.dependencies import get_store

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/ready")
async def ready(store: EntityStore = Depends(get_store)) -> dict[str, str]:
    try:
        await store.list_robots()
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return {"status": "ready"}
