"""SQL-backed entity store."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from warehouse_fleet.enterprise.config.settings import FleetSeedSettings
from warehouse_fleet.enterprise.core import (
    Bin,
    BinUpdate,
    Package,
    PackageFilter,
    PackageStatus,
    PackageUpdate,
    Robot,
    RobotStatus,
    RobotUpdate,
)
from warehouse_fleet.enterprise.core.models import new_package_uid, utcnow

from .models import BinRecord, PackageRecord, RobotRecord
from .store import EntityNotFoundError, EntityStore, StoreError, default_fleet


def _key(kind: str, entity_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(entity_id)
    except ValueError as exc:
        raise EntityNotFoundError(kind, entity_id) from exc


def _package_conditions(filter: Optional[PackageFilter]) -> list:
    if filter is None:
        return []
    conditions = []
    if filter.status is not None:
        conditions.append(PackageRecord.status == filter.status)
    if filter.bot_assigned is not None:
        conditions.append(PackageRecord.bot_assigned == filter.bot_assigned)
    if filter.unassigned:
        conditions.append(PackageRecord.bot_assigned.is_(None))
    return conditions


class SqlEntityStore(EntityStore):
    """Entity store over async SQLAlchemy; one short transaction per call."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessionmaker() as session, session.begin():
                yield session
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    async def list_robots(self, status: Optional[RobotStatus] = None) -> List[Robot]:
        stmt = select(RobotRecord).order_by(RobotRecord.name)
        if status is not None:
            stmt = stmt.where(RobotRecord.status == status)
        async with self._transaction() as session:
            result = await session.execute(stmt)
            return [record.to_domain() for record in result.scalars()]

    async def update_robot(self, robot_id: str, update_: RobotUpdate) -> None:
        changes = update_.changes()
        if not changes:
            return
        stmt = update(RobotRecord).where(RobotRecord.id == _key("robot", robot_id)).values(**changes)
        async with self._transaction() as session:
            result = await session.execute(stmt.execution_options(synchronize_session=False))
            if result.rowcount == 0:
                raise EntityNotFoundError("robot", robot_id)

    async def update_robots(
        self,
        update_: RobotUpdate,
        *,
        status: Optional[RobotStatus] = None,
        exclude_status: Optional[RobotStatus] = None,
    ) -> int:
        changes = update_.changes()
        if not changes:
            return 0
        stmt = update(RobotRecord).values(**changes)
        if status is not None:
            stmt = stmt.where(RobotRecord.status == status)
        if exclude_status is not None:
            stmt = stmt.where(RobotRecord.status != exclude_status)
        async with self._transaction() as session:
            result = await session.execute(stmt.execution_options(synchronize_session=False))
            return result.rowcount

    async def list_packages(
        self,
        filter: Optional[PackageFilter] = None,
        limit: Optional[int] = None,
    ) -> List[Package]:
        stmt = select(PackageRecord).where(*_package_conditions(filter)).order_by(PackageRecord.created_at)
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._transaction() as session:
            result = await session.execute(stmt)
            return [record.to_domain() for record in result.scalars()]

    async def update_package(self, package_id: str, update_: PackageUpdate) -> None:
        changes = update_.changes()
        if not changes:
            return
        stmt = update(PackageRecord).where(PackageRecord.id == _key("package", package_id)).values(**changes)
        async with self._transaction() as session:
            result = await session.execute(stmt.execution_options(synchronize_session=False))
            if result.rowcount == 0:
                raise EntityNotFoundError("package", package_id)

    async def update_packages(self, update_: PackageUpdate, filter: PackageFilter) -> int:
        changes = update_.changes()
        if not changes:
            return 0
        stmt = update(PackageRecord).where(*_package_conditions(filter)).values(**changes)
        async with self._transaction() as session:
            result = await session.execute(stmt.execution_options(synchronize_session=False))
            return result.rowcount

    async def create_random_package(self) -> Package:
        record = PackageRecord(
            id=uuid.uuid4(),
            uid=new_package_uid(),
            created_at=utcnow(),
            status=PackageStatus.PENDING,
            bot_assigned=None,
        )
        async with self._transaction() as session:
            session.add(record)
            await session.flush()
            return record.to_domain()

    async def list_bins(self) -> List[Bin]:
        async with self._transaction() as session:
            result = await session.execute(select(BinRecord).order_by(BinRecord.location))
            return [record.to_domain() for record in result.scalars()]

    async def get_bin(self, bin_id: str) -> Bin:
        async with self._transaction() as session:
            record = await session.get(BinRecord, _key("bin", bin_id))
            if record is None:
                raise EntityNotFoundError("bin", bin_id)
            return record.to_domain()

    async def update_bin(self, bin_id: str, update_: BinUpdate) -> None:
        changes = update_.changes()
        if not changes:
            return
        stmt = update(BinRecord).where(BinRecord.id == _key("bin", bin_id)).values(**changes)
        async with self._transaction() as session:
            result = await session.execute(stmt.execution_options(synchronize_session=False))
            if result.rowcount == 0:
                raise EntityNotFoundError("bin", bin_id)

    async def seed(self, settings: FleetSeedSettings) -> bool:
        robots, bins, packages = default_fleet(settings)
        async with self._transaction() as session:
            existing = await session.scalar(select(func.count()).select_from(RobotRecord))
            if existing:
                return False
            session.add_all(
                RobotRecord(
                    id=uuid.UUID(robot.id),
                    name=robot.name,
                    battery_level=robot.battery_level,
                    status=robot.status,
                    current_row=robot.current_row,
                )
                for robot in robots
            )
            session.add_all(
                BinRecord(
                    id=uuid.UUID(bin_.id),
                    location=bin_.location,
                    capacity=bin_.capacity,
                    current_count=bin_.current_count,
                    status=bin_.status,
                )
                for bin_ in bins
            )
            session.add_all(
                PackageRecord(
                    id=uuid.UUID(package.id),
                    uid=package.uid,
                    created_at=package.created_at,
                    status=package.status,
                    bot_assigned=package.bot_assigned,
                )
                for package in packages
            )
        return True
