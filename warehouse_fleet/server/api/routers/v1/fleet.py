"""Fleet run-state control and query endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from warehouse_fleet.persistence.store import EntityStore, StoreError
from warehouse_fleet.server.api.schemas.fleet import AppConfigSchema, FleetOverviewSchema, SystemStateSchema
from warehouse_fleet.server.dependencies import get_app_settings, get_fleet_controller, get_store
from warehouse_fleet.services import FleetController, build_overview

router = APIRouter(prefix="/fleet", tags=["fleet"])


@router.get("/state", response_model=SystemStateSchema)
async def get_state(controller: FleetController = Depends(get_fleet_controller)) -> SystemStateSchema:
    return SystemStateSchema(state=controller.state)


@router.post("/start", response_model=SystemStateSchema)
async def start(controller: FleetController = Depends(get_fleet_controller)) -> SystemStateSchema:
    return SystemStateSchema(state=await controller.start())


@router.post("/pause", response_model=SystemStateSchema)
async def pause(controller: FleetController = Depends(get_fleet_controller)) -> SystemStateSchema:
    return SystemStateSchema(state=await controller.pause())


@router.post("/emergency-stop", response_model=SystemStateSchema)
async def emergency_stop(controller: FleetController = Depends(get_fleet_controller)) -> SystemStateSchema:
    return SystemStateSchema(state=await controller.emergency_stop())


@router.get("/overview", response_model=FleetOverviewSchema)
async def overview(
    controller: FleetController = Depends(get_fleet_controller),
    store: EntityStore = Depends(get_store),
) -> FleetOverviewSchema:
    try:
        summary = await build_overview(store, controller.state)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return FleetOverviewSchema.from_domain(summary)


@router.get("/config", response_model=AppConfigSchema)
async def get_configuration(settings=Depends(get_app_settings)) -> AppConfigSchema:
    return AppConfigSchema.from_settings(settings)
