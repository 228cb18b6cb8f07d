"""Entity store interface consumed by the fleet control loop."""

from __future__ import annotations

from typing import List, Optional

from warehouse_fleet.enterprise.core import (
    Bin,
    BinUpdate,
    Package,
    PackageFilter,
    PackageUpdate,
    Robot,
    RobotStatus,
    RobotUpdate,
)
from warehouse_fleet.enterprise.config.settings import FleetSeedSettings


class StoreError(Exception):
    """Read or write failure against the entity store."""


class EntityNotFoundError(StoreError):
    """Raised when a record addressed by id does not exist."""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"{kind} {entity_id} not found")
        self.kind = kind
        self.entity_id = entity_id


class EntityStore:
    """Abstract async access to robot, package, and bin records.

    Every method may raise :class:`StoreError`. Bulk updates apply the same
    partial update to every record matching the filter and return the number
    of records touched.
    """

    async def list_robots(self, status: Optional[RobotStatus] = None) -> List[Robot]:  # pragma: no cover - interface
        raise NotImplementedError

    async def update_robot(self, robot_id: str, update: RobotUpdate) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    async def update_robots(
        self,
        update: RobotUpdate,
        *,
        status: Optional[RobotStatus] = None,
        exclude_status: Optional[RobotStatus] = None,
    ) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    async def list_packages(
        self,
        filter: Optional[PackageFilter] = None,
        limit: Optional[int] = None,
    ) -> List[Package]:  # pragma: no cover - interface
        raise NotImplementedError

    async def update_package(self, package_id: str, update: PackageUpdate) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    async def update_packages(self, update: PackageUpdate, filter: PackageFilter) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    async def create_random_package(self) -> Package:  # pragma: no cover - interface
        raise NotImplementedError

    async def list_bins(self) -> List[Bin]:  # pragma: no cover - interface
        raise NotImplementedError

    async def get_bin(self, bin_id: str) -> Bin:  # pragma: no cover - interface
        raise NotImplementedError

    async def update_bin(self, bin_id: str, update: BinUpdate) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    async def seed(self, settings: FleetSeedSettings) -> bool:  # pragma: no cover - interface
        raise NotImplementedError


def default_fleet(settings: FleetSeedSettings) -> tuple[List[Robot], List[Bin], List[Package]]:
    """Build the records used to populate an empty store."""

    robots = [
        Robot(name=f"BOT-{idx + 1}", battery_level=max(100 - idx * 10, 50), current_row=idx % 4)
        for idx in range(settings.robots)
    ]
    bins = [
        Bin(location=f"{chr(ord('A') + row)}{column + 1}", capacity=settings.bin_capacity)
        for row in range(settings.bin_rows)
        for column in range(settings.bin_columns)
    ]
    packages = [Package() for _ in range(settings.pending_packages)]
    return robots, bins, packages
