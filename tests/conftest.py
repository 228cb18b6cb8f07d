"""Shared fixtures and helpers for the fleet test-suite."""

from __future__ import annotations

from typing import Iterable, List, Sequence, TypeVar

import pytest

from warehouse_fleet.enterprise.config.settings import FleetSeedSettings, get_settings
from warehouse_fleet.enterprise.core import Robot, RobotStatus
from warehouse_fleet.persistence import InMemoryEntityStore, StoreError
from warehouse_fleet.services import RandomSource

T = TypeVar("T")


class ScriptedRandom(RandomSource):
    """Random source replaying queued outcomes.

    ``chances`` answers the assignment, completion and bin drift draws in
    order; ``uniforms`` gives the exact drain or charge amounts; ``ints``
    feeds lane picks and bin deltas. Exhausted queues fall back to ``False``
    and the lower bound.
    """

    def __init__(
        self,
        chances: Iterable[bool] = (),
        uniforms: Iterable[float] = (),
        ints: Iterable[int] = (),
        pick: int = 0,
    ) -> None:
        super().__init__(seed=0)
        self.chances: List[bool] = list(chances)
        self.uniforms: List[float] = list(uniforms)
        self.ints: List[int] = list(ints)
        self.pick = pick

    def chance(self, probability: float) -> bool:
        return self.chances.pop(0) if self.chances else False

    def uniform(self, low: float, high: float) -> float:
        return self.uniforms.pop(0) if self.uniforms else low

    def randint(self, low: int, high: int) -> int:
        return self.ints.pop(0) if self.ints else low

    def choice(self, items: Sequence[T]) -> T:
        return items[self.pick] if self.pick < len(items) else items[0]


class FailingStore(InMemoryEntityStore):
    """Store whose every read and write fails."""

    async def _fail(self, operation: str):
        raise StoreError(f"{operation} unavailable")

    async def list_robots(self, status=None):
        await self._fail("list_robots")

    async def update_robot(self, robot_id, update):
        await self._fail("update_robot")

    async def update_robots(self, update, *, status=None, exclude_status=None):
        await self._fail("update_robots")

    async def list_packages(self, filter=None, limit=None):
        await self._fail("list_packages")

    async def update_package(self, package_id, update):
        await self._fail("update_package")

    async def update_packages(self, update, filter):
        await self._fail("update_packages")

    async def create_random_package(self):
        await self._fail("create_random_package")

    async def list_bins(self):
        await self._fail("list_bins")

    async def get_bin(self, bin_id):
        await self._fail("get_bin")

    async def update_bin(self, bin_id, update):
        await self._fail("update_bin")


def make_robot(
    name: str = "BOT-1",
    battery: int = 80,
    status: RobotStatus = RobotStatus.ACTIVE,
    row: int = 0,
) -> Robot:
    return Robot(name=name, battery_level=battery, status=status, current_row=row)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    yield
    get_settings.cache_clear()


@pytest.fixture
def seeded_store() -> InMemoryEntityStore:
    return InMemoryEntityStore.seeded(FleetSeedSettings())
