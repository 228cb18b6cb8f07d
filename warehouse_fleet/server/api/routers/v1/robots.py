"""Robot listing endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from warehouse_fleet.enterprise.core import RobotStatus
from warehouse_fleet.persistence.store import EntityStore, StoreError
from warehouse_fleet.server.api.schemas.fleet import RobotSchema
from warehouse_fleet.server.dependencies import get_store

router = APIRouter(prefix="/robots", tags=["robots"])


@router.get("", response_model=List[RobotSchema])
async def list_robots(
    robot_status: Optional[RobotStatus] = Query(None, alias="status"),
    store: EntityStore = Depends(get_store),
) -> List[RobotSchema]:
    try:
        robots = await store.list_robots(status=robot_status)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return [RobotSchema.from_domain(robot) for robot in robots]
