"""Operator-driven bin maintenance."""

from __future__ import annotations

import structlog

from warehouse_fleet.enterprise.core import Bin, BinStatus, BinUpdate
from warehouse_fleet.persistence.store import EntityStore

logger = structlog.get_logger(__name__)


def status_after_maintenance(bin_: Bin) -> BinStatus:
    """Status a bin returns to once maintenance is switched off."""

    return BinStatus.FULL if bin_.current_count >= bin_.capacity else BinStatus.AVAILABLE


async def set_bin_maintenance(store: EntityStore, bin_id: str, enabled: bool) -> Bin:
    """Put a bin into (``enabled=True``) or take it out of maintenance.

    Store errors propagate to the caller; the presentation layer decides how
    to report them.
    """

    bin_ = await store.get_bin(bin_id)
    status = BinStatus.MAINTENANCE if enabled else status_after_maintenance(bin_)
    if status != bin_.status:
        await store.update_bin(bin_id, BinUpdate(status=status))
        logger.info("bin_maintenance_changed", location=bin_.location, status=status.value)
    return bin_.model_copy(update={"status": status})


async def toggle_bin_maintenance(store: EntityStore, bin_id: str) -> Bin:
    bin_ = await store.get_bin(bin_id)
    return await set_bin_maintenance(store, bin_id, enabled=bin_.status != BinStatus.MAINTENANCE)
