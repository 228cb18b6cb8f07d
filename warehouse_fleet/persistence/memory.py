"""In-memory entity store used when persistent storage is unavailable."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from warehouse_fleet.enterprise.config.settings import FleetSeedSettings
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

from .store import EntityNotFoundError, EntityStore, default_fleet


class InMemoryEntityStore(EntityStore):
    """Simplistic store that keeps records in process memory.

    Records are copied on the way in and out so callers never hold a live
    reference to stored state.
    """

    def __init__(
        self,
        robots: Iterable[Robot] = (),
        packages: Iterable[Package] = (),
        bins: Iterable[Bin] = (),
    ) -> None:
        self.robots: Dict[str, Robot] = {robot.id: robot.model_copy() for robot in robots}
        self.packages: Dict[str, Package] = {package.id: package.model_copy() for package in packages}
        self.bins: Dict[str, Bin] = {bin_.id: bin_.model_copy() for bin_ in bins}

    async def list_robots(self, status: Optional[RobotStatus] = None) -> List[Robot]:
        return [
            robot.model_copy()
            for robot in self.robots.values()
            if status is None or robot.status == status
        ]

    async def update_robot(self, robot_id: str, update: RobotUpdate) -> None:
        robot = self.robots.get(robot_id)
        if robot is None:
            raise EntityNotFoundError("robot", robot_id)
        self.robots[robot_id] = robot.model_copy(update=update.changes())

    async def update_robots(
        self,
        update: RobotUpdate,
        *,
        status: Optional[RobotStatus] = None,
        exclude_status: Optional[RobotStatus] = None,
    ) -> int:
        changed = 0
        for robot_id, robot in list(self.robots.items()):
            if status is not None and robot.status != status:
                continue
            if exclude_status is not None and robot.status == exclude_status:
                continue
            self.robots[robot_id] = robot.model_copy(update=update.changes())
            changed += 1
        return changed

    async def list_packages(
        self,
        filter: Optional[PackageFilter] = None,
        limit: Optional[int] = None,
    ) -> List[Package]:
        matches = [
            package.model_copy()
            for package in self.packages.values()
            if filter is None or filter.matches(package)
        ]
        return matches[:limit] if limit is not None else matches

    async def update_package(self, package_id: str, update: PackageUpdate) -> None:
        package = self.packages.get(package_id)
        if package is None:
            raise EntityNotFoundError("package", package_id)
        self.packages[package_id] = package.model_copy(update=update.changes())

    async def update_packages(self, update: PackageUpdate, filter: PackageFilter) -> int:
        changed = 0
        for package_id, package in list(self.packages.items()):
            if filter.matches(package):
                self.packages[package_id] = package.model_copy(update=update.changes())
                changed += 1
        return changed

    async def create_random_package(self) -> Package:
        package = Package()
        self.packages[package.id] = package
        return package.model_copy()

    async def list_bins(self) -> List[Bin]:
        return [bin_.model_copy() for bin_ in self.bins.values()]

    async def get_bin(self, bin_id: str) -> Bin:
        bin_ = self.bins.get(bin_id)
        if bin_ is None:
            raise EntityNotFoundError("bin", bin_id)
        return bin_.model_copy()

    async def update_bin(self, bin_id: str, update: BinUpdate) -> None:
        bin_ = self.bins.get(bin_id)
        if bin_ is None:
            raise EntityNotFoundError("bin", bin_id)
        self.bins[bin_id] = bin_.model_copy(update=update.changes())

    async def seed(self, settings: FleetSeedSettings) -> bool:
        if self.robots or self.bins:
            return False
        robots, bins, packages = default_fleet(settings)
        self.robots = {robot.id: robot for robot in robots}
        self.bins = {bin_.id: bin_ for bin_ in bins}
        self.packages = {package.id: package for package in packages}
        return True

    @classmethod
    def seeded(cls, settings: FleetSeedSettings) -> "InMemoryEntityStore":
        robots, bins, packages = default_fleet(settings)
        return cls(robots=robots, packages=packages, bins=bins)
