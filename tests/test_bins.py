import pytest

from warehouse_fleet.enterprise.core import Bin, BinStatus
from warehouse_fleet.persistence import EntityNotFoundError, InMemoryEntityStore
from warehouse_fleet.services import set_bin_maintenance, toggle_bin_maintenance


@pytest.mark.asyncio
async def test_maintenance_round_trip_restores_fill_status():
    bin_ = Bin(location="C4", capacity=10, current_count=10, status=BinStatus.FULL)
    store = InMemoryEntityStore(bins=[bin_])

    flagged = await set_bin_maintenance(store, bin_.id, True)
    assert flagged.status == BinStatus.MAINTENANCE
    assert flagged.fill_label == "Full"

    restored = await set_bin_maintenance(store, bin_.id, False)
    assert restored.status == BinStatus.FULL
    assert store.bins[bin_.id].status == BinStatus.FULL


@pytest.mark.asyncio
async def test_toggle_flips_maintenance():
    bin_ = Bin(location="A1", capacity=10, current_count=3)
    store = InMemoryEntityStore(bins=[bin_])

    assert (await toggle_bin_maintenance(store, bin_.id)).status == BinStatus.MAINTENANCE
    assert (await toggle_bin_maintenance(store, bin_.id)).status == BinStatus.AVAILABLE


@pytest.mark.asyncio
async def test_unknown_bin_raises():
    with pytest.raises(EntityNotFoundError):
        await set_bin_maintenance(InMemoryEntityStore(), "nope", True)


def test_fill_label_thresholds():
    assert Bin(location="A1", capacity=10, current_count=4).fill_label == "Available"
    assert Bin(location="A1", capacity=10, current_count=5).fill_label == "Filling"
    assert Bin(location="A1", capacity=10, current_count=10).fill_label == "Full"
    assert Bin(location="A1", capacity=10, current_count=5).fill_percentage == 50
