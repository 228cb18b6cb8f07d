"""Pydantic schemas for fleet API responses."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel

from warehouse_fleet.enterprise.config.settings import AppSettings
from warehouse_fleet.enterprise.core import Bin, Package, Robot, SystemState
from warehouse_fleet.services.overview import FleetOverview


class SystemStateSchema(BaseModel):
    state: SystemState


class RobotSchema(BaseModel):
    id: str
    name: str
    battery_level: int
    status: str
    current_row: int

    @classmethod
    def from_domain(cls, robot: Robot) -> "RobotSchema":
        return cls(
            id=robot.id,
            name=robot.name,
            battery_level=robot.battery_level,
            status=robot.status.value,
            current_row=robot.current_row,
        )


class PackageSchema(BaseModel):
    id: str
    uid: str
    status: str
    bot_assigned: Optional[str]
    created_at: datetime

    @classmethod
    def from_domain(cls, package: Package) -> "PackageSchema":
        return cls(
            id=package.id,
            uid=package.uid,
            status=package.status.value,
            bot_assigned=package.bot_assigned,
            created_at=package.created_at,
        )


class BinSchema(BaseModel):
    id: str
    location: str
    capacity: int
    current_count: int
    status: str
    fill_percentage: int
    fill_label: str

    @classmethod
    def from_domain(cls, bin_: Bin) -> "BinSchema":
        return cls(
            id=bin_.id,
            location=bin_.location,
            capacity=bin_.capacity,
            current_count=bin_.current_count,
            status=bin_.status.value,
            fill_percentage=bin_.fill_percentage,
            fill_label=bin_.fill_label,
        )


class BinMaintenanceRequest(BaseModel):
    enabled: bool


class FleetOverviewSchema(BaseModel):
    state: SystemState
    robots: Dict[str, int]
    packages: Dict[str, int]
    bins: Dict[str, int]
    active_robots: str
    robot_health: str

    @classmethod
    def from_domain(cls, overview: FleetOverview) -> "FleetOverviewSchema":
        return cls(
            state=overview.state,
            robots=overview.robots,
            packages=overview.packages,
            bins=overview.bins,
            active_robots=overview.active_robots,
            robot_health=overview.robot_health,
        )


class AppConfigSchema(BaseModel):
    environment: str
    timing: dict
    simulation: dict
    database: dict
    telemetry: dict

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "AppConfigSchema":
        return cls(
            environment=settings.environment,
            timing=settings.timing.model_dump(),
            simulation=settings.simulation.model_dump(),
            database=settings.database.model_dump(mode="json", include={"enabled", "pool_size", "echo"}),
            telemetry=settings.telemetry.model_dump(),
        )
