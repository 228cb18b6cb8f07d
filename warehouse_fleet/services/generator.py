"""Periodic creation of new pending packages."""

from __future__ import annotations

from typing import Optional

import structlog

from warehouse_fleet.enterprise.core import Package
from warehouse_fleet.observability.metrics import PACKAGES_GENERATED, record_store_error
from warehouse_fleet.persistence.store import EntityStore, StoreError

logger = structlog.get_logger(__name__)


class PackageGenerator:
    """Creates one pending, unassigned package per call."""

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    async def generate(self) -> Optional[Package]:
        try:
            package = await self.store.create_random_package()
        except StoreError as exc:
            record_store_error("create_package")
            logger.warning("package_generation_failed", error=str(exc))
            return None
        PACKAGES_GENERATED.inc()
        logger.info("package_generated", package=package.uid)
        return package
