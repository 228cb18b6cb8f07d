"""One step of the fleet simulation.

A tick runs four steps in a fixed order, each against a fresh read of the
store:

1. robots drain or recharge and move between lanes,
2. one pending package may be assigned to an eligible robot,
3. one processing package may be completed,
4. one bin may drift its occupancy by a single item.

Robot updates come first so a robot sent to charge during this tick is no
longer eligible for an assignment in the same tick. A store failure only
skips the robot or step it hit; it is logged and counted, and the rest of the
tick carries on. Nothing propagates to the caller.
"""

from __future__ import annotations

import time
from typing import Awaitable, Optional

import structlog

from warehouse_fleet.enterprise.config.settings import SimulationSettings, get_settings
from warehouse_fleet.enterprise.core import (
    BinStatus,
    BinUpdate,
    PackageFilter,
    PackageStatus,
    PackageUpdate,
    Robot,
    RobotStatus,
    RobotUpdate,
)
from warehouse_fleet.observability.metrics import (
    TICK_COUNTER,
    TICK_DURATION,
    TICK_FAILURES,
    record_package_transition,
    record_store_error,
)
from warehouse_fleet.observability.tracing import get_tracer
from warehouse_fleet.persistence.store import EntityStore, StoreError
from warehouse_fleet.services.randomness import RandomSource

logger = structlog.get_logger(__name__)
_tracer = get_tracer(__name__)


def clamp_battery(level: float) -> int:
    return max(0, min(100, round(level)))


class FleetTickEngine:
    """Applies one simulation step to the records behind an :class:`EntityStore`."""

    def __init__(
        self,
        store: EntityStore,
        settings: Optional[SimulationSettings] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.store = store
        self.settings = settings or get_settings().simulation
        self.rng = rng or RandomSource(self.settings.seed)

    async def run_tick(self) -> int:
        """Run one tick and return the number of robots or steps skipped by store errors."""

        started = time.perf_counter()
        TICK_COUNTER.inc()
        failed = 0
        with _tracer.start_as_current_span("fleet.tick"):
            try:
                failed += await self.update_robots()
                failed += not await self._guarded("assign_package", self.assign_package())
                failed += not await self._guarded("complete_package", self.complete_package())
                failed += not await self._guarded("drift_bin", self.drift_bin())
            finally:
                TICK_DURATION.observe(time.perf_counter() - started)
        if failed:
            TICK_FAILURES.inc()
            logger.warning("fleet_tick_degraded", failed_steps=failed)
        return failed

    async def _guarded(self, operation: str, step: Awaitable[None]) -> bool:
        try:
            await step
        except StoreError as exc:
            record_store_error(operation)
            logger.warning("fleet_tick_step_failed", step=operation, error=str(exc))
            return False
        return True

    async def update_robots(self) -> int:
        """Update every robot independently; returns how many could not be updated."""

        try:
            robots = await self.store.list_robots()
        except StoreError as exc:
            record_store_error("list_robots")
            logger.warning("fleet_tick_step_failed", step="list_robots", error=str(exc))
            return 1

        failed = 0
        for robot in robots:
            # Release and status write stay together so a charging robot never keeps a package.
            failed += not await self._guarded("update_robot", self._update_robot(robot))
        return failed

    async def _update_robot(self, robot: Robot) -> None:
        settings = self.settings
        status = robot.status

        if robot.status == RobotStatus.ACTIVE:
            battery = max(0.0, robot.battery_level - self.rng.uniform(*settings.battery_drain))
            row = self.rng.randint(0, settings.lane_count - 1)
            if battery <= settings.low_battery_threshold:
                status = RobotStatus.CHARGING
                row = settings.charging_row
                await self._release_packages(robot)
        elif robot.status == RobotStatus.CHARGING:
            battery = min(100.0, robot.battery_level + self.rng.uniform(*settings.battery_charge))
            row = settings.charging_row
            if battery >= settings.recharged_threshold:
                status = RobotStatus.ACTIVE
        else:
            # Idle robots wait for the controller to reactivate them.
            return

        await self.store.update_robot(
            robot.id,
            RobotUpdate(battery_level=clamp_battery(battery), status=status, current_row=row),
        )
        if status != robot.status:
            logger.info(
                "robot_status_changed",
                robot=robot.name,
                previous=robot.status.value,
                status=status.value,
                battery=clamp_battery(battery),
            )

    async def _release_packages(self, robot: Robot) -> None:
        released = await self.store.update_packages(
            PackageUpdate(status=PackageStatus.PENDING, bot_assigned=None),
            PackageFilter(status=PackageStatus.PROCESSING, bot_assigned=robot.name),
        )
        if released:
            record_package_transition("released", released)
            logger.info("packages_released", robot=robot.name, count=released)

    async def assign_package(self) -> None:
        if not self.rng.chance(self.settings.assignment_probability):
            return

        pending = await self.store.list_packages(
            PackageFilter(status=PackageStatus.PENDING, unassigned=True), limit=1
        )
        if not pending:
            return

        candidates = [
            robot
            for robot in await self.store.list_robots(status=RobotStatus.ACTIVE)
            if robot.battery_level > self.settings.assignment_min_battery
        ]
        if candidates:
            carrying = {
                package.bot_assigned
                for package in await self.store.list_packages(PackageFilter(status=PackageStatus.PROCESSING))
            }
            candidates = [robot for robot in candidates if robot.name not in carrying]
        if not candidates:
            return

        package = pending[0]
        robot = self.rng.choice(candidates)
        await self.store.update_package(
            package.id,
            PackageUpdate(status=PackageStatus.PROCESSING, bot_assigned=robot.name),
        )
        record_package_transition("assigned")
        logger.info("package_assigned", package=package.uid, robot=robot.name)

    async def complete_package(self) -> None:
        if not self.rng.chance(self.settings.completion_probability):
            return

        processing = await self.store.list_packages(PackageFilter(status=PackageStatus.PROCESSING), limit=1)
        if not processing:
            return

        package = processing[0]
        await self.store.update_package(
            package.id,
            PackageUpdate(status=PackageStatus.COMPLETED, bot_assigned=None),
        )
        record_package_transition("completed")
        logger.info("package_completed", package=package.uid, robot=package.bot_assigned)

    async def drift_bin(self) -> None:
        if not self.rng.chance(self.settings.bin_drift_probability):
            return

        bins = await self.store.list_bins()
        if not bins:
            return

        bin_ = self.rng.choice(bins)
        count = max(0, min(bin_.capacity, bin_.current_count + self.rng.randint(-1, 1)))
        if bin_.status == BinStatus.MAINTENANCE:
            update = BinUpdate(current_count=count)
        else:
            status = BinStatus.FULL if count >= bin_.capacity else BinStatus.AVAILABLE
            update = BinUpdate(current_count=count, status=status)
        await self.store.update_bin(bin_.id, update)
        logger.debug("bin_drifted", location=bin_.location, count=count, capacity=bin_.capacity)
