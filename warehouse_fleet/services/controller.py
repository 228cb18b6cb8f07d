"""Run state machine of the fleet simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import structlog

from warehouse_fleet.enterprise.config.settings import AppSettings, get_settings
from warehouse_fleet.enterprise.core import (
    PackageFilter,
    PackageStatus,
    PackageUpdate,
    RobotStatus,
    RobotUpdate,
    SystemState,
)
from warehouse_fleet.enterprise.core.models import utcnow
from warehouse_fleet.observability.metrics import record_store_error, record_system_state
from warehouse_fleet.persistence.store import EntityStore, StoreError
from warehouse_fleet.services.generator import PackageGenerator
from warehouse_fleet.services.periodic import PeriodicTask
from warehouse_fleet.services.randomness import RandomSource
from warehouse_fleet.services.tick import FleetTickEngine

logger = structlog.get_logger(__name__)


@dataclass
class RunState:
    """In-memory run flag owned by a single :class:`FleetController`."""

    state: SystemState = SystemState.STOPPED
    changed_at: datetime = field(default_factory=utcnow)

    def transition(self, target: SystemState) -> SystemState:
        previous = self.state
        self.state = target
        self.changed_at = utcnow()
        record_system_state(target)
        if previous != target:
            logger.info("system_state_changed", previous=previous.value, state=target.value)
        return previous


class FleetController:
    """Starts, pauses, and emergency-stops the fleet simulation.

    The controller owns two periodic schedules: the fleet tick and the
    package generator. Both are armed together by :meth:`start` and cancelled
    together, before any store call, by :meth:`pause` and
    :meth:`emergency_stop`. Each bulk reset is attempted on its own and a
    store failure in one is logged without skipping the other; the state
    transition itself always completes.
    """

    def __init__(
        self,
        store: EntityStore,
        settings: Optional[AppSettings] = None,
        tick_engine: Optional[FleetTickEngine] = None,
        generator: Optional[PackageGenerator] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store
        self.tick_engine = tick_engine or FleetTickEngine(store, self.settings.simulation, rng)
        self.generator = generator or PackageGenerator(store)
        self._run_state = RunState()
        self._tick_task = PeriodicTask(
            "fleet-tick",
            self.settings.timing.tick_interval_s,
            self.tick_engine.run_tick,
            run_immediately=True,
        )
        self._generator_task = PeriodicTask(
            "package-generator",
            self.settings.timing.package_interval_s,
            self.generator.generate,
        )

    @property
    def state(self) -> SystemState:
        return self._run_state.state

    def get_state(self) -> SystemState:
        return self._run_state.state

    @property
    def schedules_running(self) -> bool:
        return self._tick_task.running and self._generator_task.running

    async def start(self) -> SystemState:
        """Enter ``running``, reactivate idle robots, and (re)arm both schedules.

        The tick schedule fires once straight away; later firings follow the
        configured period.
        """

        self._run_state.transition(SystemState.RUNNING)
        self._cancel_schedules()

        try:
            reactivated = await self.store.update_robots(
                RobotUpdate(status=RobotStatus.ACTIVE), status=RobotStatus.IDLE
            )
            logger.info("idle_robots_reactivated", count=reactivated)
        except StoreError as exc:
            record_store_error("reactivate_robots")
            logger.warning("idle_robot_reactivation_failed", error=str(exc))

        # A pause or emergency stop may have landed while the store call was outstanding.
        if self._run_state.state != SystemState.RUNNING:
            return self._run_state.state

        self._tick_task.start()
        self._generator_task.start()
        return self._run_state.state

    async def pause(self) -> SystemState:
        """Enter ``paused`` from ``running``; no entity is touched."""

        if self._run_state.state != SystemState.RUNNING:
            logger.info("pause_ignored", state=self._run_state.state.value)
            return self._run_state.state

        self._run_state.transition(SystemState.PAUSED)
        self._cancel_schedules()
        return self._run_state.state

    async def emergency_stop(self) -> SystemState:
        """Enter ``stopped``, idle every non-charging robot, and unassign all in-flight packages."""

        self._run_state.transition(SystemState.STOPPED)
        self._cancel_schedules()

        idled: Optional[int] = None
        released: Optional[int] = None
        try:
            idled = await self.store.update_robots(
                RobotUpdate(status=RobotStatus.IDLE), exclude_status=RobotStatus.CHARGING
            )
        except StoreError as exc:
            record_store_error("idle_robots")
            logger.error("emergency_stop_idle_failed", error=str(exc))
        try:
            released = await self.store.update_packages(
                PackageUpdate(status=PackageStatus.PENDING, bot_assigned=None),
                PackageFilter(status=PackageStatus.PROCESSING),
            )
        except StoreError as exc:
            record_store_error("release_packages")
            logger.error("emergency_stop_release_failed", error=str(exc))
        logger.warning("emergency_stop_completed", robots_idled=idled, packages_released=released)
        return self._run_state.state

    async def shutdown(self) -> None:
        """Cancel both schedules and wait for them to unwind."""

        await self._tick_task.stop()
        await self._generator_task.stop()
        logger.info("fleet_controller_shutdown", state=self._run_state.state.value)

    def _cancel_schedules(self) -> None:
        self._tick_task.cancel()
        self._generator_task.cancel()
