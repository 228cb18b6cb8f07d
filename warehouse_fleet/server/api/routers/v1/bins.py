"""Bin listing and maintenance endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from warehouse_fleet.persistence.store import EntityNotFoundError, EntityStore, StoreError
from warehouse_fleet.server.api.schemas.fleet import BinMaintenanceRequest, BinSchema
from warehouse_fleet.server.dependencies import get_store
from warehouse_fleet.services import set_bin_maintenance

router = APIRouter(prefix="/bins", tags=["bins"])


@router.get("", response_model=List[BinSchema])
async def list_bins(store: EntityStore = Depends(get_store)) -> List[BinSchema]:
    try:
        bins = await store.list_bins()
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return [BinSchema.from_domain(bin_) for bin_ in bins]


@router.post("/{bin_id}/maintenance", response_model=BinSchema)
async def set_maintenance(
    bin_id: str,
    payload: BinMaintenanceRequest,
    store: EntityStore = Depends(get_store),
) -> BinSchema:
    try:
        bin_ = await set_bin_maintenance(store, bin_id, payload.enabled)
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bin not found") from exc
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return BinSchema.from_domain(bin_)
