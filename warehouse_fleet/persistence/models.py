"""SQLAlchemy ORM models for the fleet records."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from warehouse_fleet.enterprise.core import (
    Bin,
    BinStatus,
    Package,
    PackageStatus,
    Robot,
    RobotStatus,
)
from warehouse_fleet.enterprise.core.models import utcnow

from .database import Base


def _enum(enum_cls) -> Enum:
    # Stores the lower-case values ("active", "pending", ...) rather than member names.
    return Enum(enum_cls, values_callable=lambda members: [member.value for member in members])


class RobotRecord(Base):
    __tablename__ = "robots"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    battery_level: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    status: Mapped[RobotStatus] = mapped_column(_enum(RobotStatus), nullable=False, default=RobotStatus.ACTIVE)
    current_row: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def to_domain(self) -> Robot:
        return Robot(
            id=str(self.id),
            name=self.name,
            battery_level=self.battery_level,
            status=self.status,
            current_row=self.current_row,
        )


class PackageRecord(Base):
    __tablename__ = "packages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    uid: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    status: Mapped[PackageStatus] = mapped_column(
        _enum(PackageStatus), nullable=False, default=PackageStatus.PENDING, index=True
    )
    bot_assigned: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    def to_domain(self) -> Package:
        return Package(
            id=str(self.id),
            uid=self.uid,
            created_at=self.created_at,
            status=self.status,
            bot_assigned=self.bot_assigned,
        )


class BinRecord(Base):
    __tablename__ = "bins"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    location: Mapped[str] = mapped_column(String(16), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    current_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[BinStatus] = mapped_column(_enum(BinStatus), nullable=False, default=BinStatus.AVAILABLE)

    def to_domain(self) -> Bin:
        return Bin(
            id=str(self.id),
            location=self.location,
            capacity=self.capacity,
            current_count=self.current_count,
            status=self.status,
        )
