"""Package listing endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from warehouse_fleet.enterprise.core import PackageFilter, PackageStatus
from warehouse_fleet.persistence.store import EntityStore, StoreError
from warehouse_fleet.server.api.schemas.fleet import PackageSchema
from warehouse_fleet.server.dependencies import get_store

router = APIRouter(prefix="/packages", tags=["packages"])


@router.get("", response_model=List[PackageSchema])
async def list_packages(
    package_status: Optional[PackageStatus] = Query(None, alias="status"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    store: EntityStore = Depends(get_store),
) -> List[PackageSchema]:
    try:
        packages = await store.list_packages(PackageFilter(status=package_status), limit=limit)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return [PackageSchema.from_domain(package) for package in packages]
