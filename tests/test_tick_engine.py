import pytest

from conftest import FailingStore, ScriptedRandom, make_robot
from warehouse_fleet.enterprise.config.settings import SimulationSettings
from warehouse_fleet.enterprise.core import (
    Bin,
    BinStatus,
    Package,
    PackageFilter,
    PackageStatus,
    RobotStatus,
)
from warehouse_fleet.observability.metrics import metrics_registry
from warehouse_fleet.persistence import InMemoryEntityStore, StoreError
from warehouse_fleet.services import FleetTickEngine, PackageGenerator, RandomSource
from warehouse_fleet.services.tick import clamp_battery


class RobotWriteFails(InMemoryEntityStore):
    """Rejects writes to a single robot."""

    def __init__(self, broken_id: str, **records) -> None:
        super().__init__(**records)
        self.broken_id = broken_id

    async def update_robot(self, robot_id, update):
        if robot_id == self.broken_id:
            raise StoreError("robot row locked")
        await super().update_robot(robot_id, update)


class PackageReadsFail(InMemoryEntityStore):
    async def list_packages(self, filter=None, limit=None):
        raise StoreError("packages table unavailable")


def _engine(store, rng) -> FleetTickEngine:
    return FleetTickEngine(store, SimulationSettings(), rng)


def _only_robot(store: InMemoryEntityStore):
    (robot,) = store.robots.values()
    return robot


def test_clamp_battery_rounds_and_bounds():
    assert clamp_battery(47.4) == 47
    assert clamp_battery(47.6) == 48
    assert clamp_battery(-3.0) == 0
    assert clamp_battery(104.0) == 100


@pytest.mark.asyncio
async def test_low_battery_robot_goes_to_charge_and_drops_its_package():
    robot = make_robot(battery=17, row=1)
    carried = Package(status=PackageStatus.PROCESSING, bot_assigned=robot.name)
    waiting = Package()
    store = InMemoryEntityStore(robots=[robot], packages=[carried, waiting])

    await _engine(store, ScriptedRandom(uniforms=[3.0])).run_tick()

    updated = _only_robot(store)
    assert updated.status == RobotStatus.CHARGING
    assert updated.battery_level == 14
    assert updated.current_row == 4
    released = store.packages[carried.id]
    assert released.status == PackageStatus.PENDING
    assert released.bot_assigned is None
    assert store.packages[waiting.id].status == PackageStatus.PENDING


@pytest.mark.asyncio
async def test_threshold_is_inclusive():
    store = InMemoryEntityStore(robots=[make_robot(battery=17)])

    await _engine(store, ScriptedRandom(uniforms=[2.0])).run_tick()

    assert _only_robot(store).status == RobotStatus.CHARGING
    assert _only_robot(store).battery_level == 15


@pytest.mark.asyncio
async def test_threshold_uses_unrounded_battery():
    store = InMemoryEntityStore(robots=[make_robot(battery=17)])

    await _engine(store, ScriptedRandom(uniforms=[1.6], ints=[3])).run_tick()

    robot = _only_robot(store)
    assert robot.status == RobotStatus.ACTIVE
    assert robot.battery_level == 15
    assert robot.current_row == 3


@pytest.mark.asyncio
async def test_active_robot_drains_and_moves_lane():
    store = InMemoryEntityStore(robots=[make_robot(battery=80, row=0)])

    await _engine(store, ScriptedRandom(uniforms=[2.6], ints=[2])).run_tick()

    robot = _only_robot(store)
    assert robot.status == RobotStatus.ACTIVE
    assert robot.battery_level == 77
    assert robot.current_row == 2


@pytest.mark.asyncio
async def test_battery_never_drops_below_zero():
    store = InMemoryEntityStore(robots=[make_robot(battery=1)])

    await _engine(store, ScriptedRandom(uniforms=[5.0])).run_tick()

    robot = _only_robot(store)
    assert robot.battery_level == 0
    assert robot.status == RobotStatus.CHARGING


@pytest.mark.asyncio
async def test_charging_robot_stays_on_charging_row():
    store = InMemoryEntityStore(robots=[make_robot(battery=50, status=RobotStatus.CHARGING, row=2)])

    await _engine(store, ScriptedRandom(uniforms=[5.0])).run_tick()

    robot = _only_robot(store)
    assert robot.status == RobotStatus.CHARGING
    assert robot.battery_level == 55
    assert robot.current_row == 4


@pytest.mark.asyncio
async def test_recharged_robot_returns_to_work():
    store = InMemoryEntityStore(robots=[make_robot(battery=90, status=RobotStatus.CHARGING, row=4)])

    await _engine(store, ScriptedRandom(uniforms=[6.0])).run_tick()

    robot = _only_robot(store)
    assert robot.status == RobotStatus.ACTIVE
    assert robot.battery_level == 96
    assert robot.current_row == 4


@pytest.mark.asyncio
async def test_battery_never_exceeds_hundred():
    store = InMemoryEntityStore(robots=[make_robot(battery=99, status=RobotStatus.CHARGING, row=4)])

    await _engine(store, ScriptedRandom(uniforms=[8.0])).run_tick()

    assert _only_robot(store).battery_level == 100


@pytest.mark.asyncio
async def test_idle_robot_is_left_alone():
    idle = make_robot(battery=40, status=RobotStatus.IDLE, row=1)
    store = InMemoryEntityStore(robots=[idle])

    await _engine(store, ScriptedRandom(uniforms=[5.0])).run_tick()

    assert _only_robot(store) == idle


@pytest.mark.asyncio
async def test_pending_package_is_assigned_to_eligible_robot():
    robot = make_robot(battery=80)
    package = Package()
    store = InMemoryEntityStore(robots=[robot], packages=[package])

    await _engine(store, ScriptedRandom(chances=[True, False, False])).run_tick()

    assigned = store.packages[package.id]
    assert assigned.status == PackageStatus.PROCESSING
    assert assigned.bot_assigned == robot.name


@pytest.mark.asyncio
async def test_assignment_requires_battery_above_minimum():
    # 22 - 2 leaves exactly the minimum, which is not enough.
    store = InMemoryEntityStore(robots=[make_robot(battery=22)], packages=[Package()])

    await _engine(store, ScriptedRandom(chances=[True, False, False], uniforms=[2.0])).run_tick()

    (package,) = store.packages.values()
    assert package.status == PackageStatus.PENDING
    assert package.bot_assigned is None


@pytest.mark.asyncio
async def test_robot_sent_to_charge_is_not_assigned_in_same_tick():
    store = InMemoryEntityStore(robots=[make_robot(battery=16)], packages=[Package()])

    await _engine(store, ScriptedRandom(chances=[True, False, False], uniforms=[2.0])).run_tick()

    (package,) = store.packages.values()
    assert package.status == PackageStatus.PENDING
    assert _only_robot(store).status == RobotStatus.CHARGING


@pytest.mark.asyncio
async def test_robot_carrying_a_package_is_not_given_another():
    busy = make_robot(name="BOT-1", battery=80)
    free = make_robot(name="BOT-2", battery=80)
    carried = Package(status=PackageStatus.PROCESSING, bot_assigned=busy.name)
    waiting = Package()
    store = InMemoryEntityStore(robots=[busy, free], packages=[carried, waiting])

    await _engine(store, ScriptedRandom(chances=[True, False, False], pick=0)).run_tick()

    assert store.packages[waiting.id].bot_assigned == free.name


@pytest.mark.asyncio
async def test_no_assignment_when_every_robot_is_busy():
    busy = make_robot(battery=80)
    carried = Package(status=PackageStatus.PROCESSING, bot_assigned=busy.name)
    waiting = Package()
    store = InMemoryEntityStore(robots=[busy], packages=[carried, waiting])

    await _engine(store, ScriptedRandom(chances=[True, False, False])).run_tick()

    assert store.packages[waiting.id].status == PackageStatus.PENDING


@pytest.mark.asyncio
async def test_processing_package_is_completed():
    package = Package(status=PackageStatus.PROCESSING, bot_assigned="BOT-9")
    store = InMemoryEntityStore(packages=[package])

    await _engine(store, ScriptedRandom(chances=[False, True, False])).run_tick()

    completed = store.packages[package.id]
    assert completed.status == PackageStatus.COMPLETED
    assert completed.bot_assigned is None


@pytest.mark.asyncio
async def test_full_bin_status_recomputed_without_drift():
    bin_ = Bin(location="A1", capacity=10, current_count=10, status=BinStatus.AVAILABLE)
    store = InMemoryEntityStore(bins=[bin_])

    await _engine(store, ScriptedRandom(chances=[False, False, True], ints=[0])).run_tick()

    drifted = store.bins[bin_.id]
    assert drifted.current_count == 10
    assert drifted.status == BinStatus.FULL


@pytest.mark.asyncio
async def test_bin_drift_is_clamped():
    empty = Bin(location="A1", capacity=10, current_count=0)
    store = InMemoryEntityStore(bins=[empty])

    await _engine(store, ScriptedRandom(chances=[False, False, True], ints=[-1])).run_tick()

    assert store.bins[empty.id].current_count == 0
    assert store.bins[empty.id].status == BinStatus.AVAILABLE


@pytest.mark.asyncio
async def test_full_bin_becomes_available_when_emptied():
    full = Bin(location="A1", capacity=10, current_count=10, status=BinStatus.FULL)
    store = InMemoryEntityStore(bins=[full])

    await _engine(store, ScriptedRandom(chances=[False, False, True], ints=[-1])).run_tick()

    assert store.bins[full.id].current_count == 9
    assert store.bins[full.id].status == BinStatus.AVAILABLE


@pytest.mark.asyncio
async def test_bin_in_maintenance_keeps_its_status():
    bin_ = Bin(location="B2", capacity=10, current_count=5, status=BinStatus.MAINTENANCE)
    store = InMemoryEntityStore(bins=[bin_])

    await _engine(store, ScriptedRandom(chances=[False, False, True], ints=[1])).run_tick()

    assert store.bins[bin_.id].current_count == 6
    assert store.bins[bin_.id].status == BinStatus.MAINTENANCE


@pytest.mark.asyncio
async def test_store_failure_is_contained():
    before = metrics_registry.get_sample_value("warehouse_fleet_tick_failures_total") or 0.0

    await _engine(FailingStore(), ScriptedRandom()).run_tick()

    after = metrics_registry.get_sample_value("warehouse_fleet_tick_failures_total")
    assert after == before + 1


@pytest.mark.asyncio
async def test_invariants_hold_over_many_seeded_ticks(seeded_store):
    settings = SimulationSettings()
    engine = FleetTickEngine(seeded_store, settings, RandomSource(seed=1234))
    generator = PackageGenerator(seeded_store)

    for tick in range(400):
        if tick % 2 == 0:
            await generator.generate()
        await engine.run_tick()

        robots = await seeded_store.list_robots()
        processing = await seeded_store.list_packages(PackageFilter(status=PackageStatus.PROCESSING))
        carriers = [package.bot_assigned for package in processing]

        for robot in robots:
            assert 0 <= robot.battery_level <= 100
            assert 0 <= robot.current_row < settings.lane_count
            if robot.status == RobotStatus.CHARGING:
                assert robot.current_row == settings.charging_row
                assert robot.name not in carriers
        assert None not in carriers
        assert len(carriers) == len(set(carriers))
        for bin_ in await seeded_store.list_bins():
            assert 0 <= bin_.current_count <= bin_.capacity

    completed = await seeded_store.list_packages(PackageFilter(status=PackageStatus.COMPLETED))
    assert completed


@pytest.mark.asyncio
async def test_failed_robot_write_does_not_skip_the_rest_of_the_tick():
    broken = make_robot(name="BOT-1", battery=80, row=0)
    healthy = make_robot(name="BOT-2", battery=80, row=0)
    package = Package()
    bin_ = Bin(location="A1", capacity=10, current_count=5)
    store = RobotWriteFails(broken.id, robots=[broken, healthy], packages=[package], bins=[bin_])
    rng = ScriptedRandom(chances=[True, False, True], uniforms=[3.0, 3.0], ints=[1, 2, 1], pick=1)
    before = metrics_registry.get_sample_value(
        "warehouse_fleet_store_errors_total", {"operation": "update_robot"}
    ) or 0.0

    assert await _engine(store, rng).run_tick() == 1

    assert store.robots[broken.id] == broken
    assert store.robots[healthy.id].battery_level == 77
    assert store.robots[healthy.id].current_row == 2
    assert store.packages[package.id].status == PackageStatus.PROCESSING
    assert store.packages[package.id].bot_assigned == healthy.name
    assert store.bins[bin_.id].current_count == 6
    assert metrics_registry.get_sample_value(
        "warehouse_fleet_store_errors_total", {"operation": "update_robot"}
    ) == before + 1


@pytest.mark.asyncio
async def test_failed_package_steps_still_let_bins_drift():
    bin_ = Bin(location="A1", capacity=10, current_count=5)
    store = PackageReadsFail(bins=[bin_])

    failed = await _engine(store, ScriptedRandom(chances=[True, True, True], ints=[1])).run_tick()

    assert failed == 2
    assert store.bins[bin_.id].current_count == 6
