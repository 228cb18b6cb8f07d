"""Aggregate view of the fleet for dashboards."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict

from warehouse_fleet.enterprise.core import BinStatus, PackageStatus, RobotStatus, SystemState
from warehouse_fleet.persistence.store import EntityStore


def ratio_health(current: int, total: int) -> str:
    """Classify a ``current/total`` ratio as healthy, warning, or critical."""

    if current == total:
        return "healthy"
    if current >= total * 0.5:
        return "warning"
    return "critical"


@dataclass
class FleetOverview:
    state: SystemState
    robots: Dict[str, int] = field(default_factory=dict)
    packages: Dict[str, int] = field(default_factory=dict)
    bins: Dict[str, int] = field(default_factory=dict)
    total_robots: int = 0

    @property
    def active_robots(self) -> str:
        return f"{self.robots.get(RobotStatus.ACTIVE.value, 0)}/{self.total_robots}"

    @property
    def robot_health(self) -> str:
        return ratio_health(self.robots.get(RobotStatus.ACTIVE.value, 0), self.total_robots)


async def build_overview(store: EntityStore, state: SystemState) -> FleetOverview:
    """Count robots, packages, and bins by status. Store errors propagate."""

    robots = await store.list_robots()
    packages = await store.list_packages()
    bins = await store.list_bins()

    robot_counts = Counter(robot.status.value for robot in robots)
    package_counts = Counter(package.status.value for package in packages)
    bin_counts = Counter(bin_.status.value for bin_ in bins)

    return FleetOverview(
        state=state,
        robots={status.value: robot_counts.get(status.value, 0) for status in RobotStatus},
        packages={status.value: package_counts.get(status.value, 0) for status in PackageStatus},
        bins={status.value: bin_counts.get(status.value, 0) for status in BinStatus},
        total_robots=len(robots),
    )
