"""Domain models for the warehouse fleet.

These models provide a typed representation of the records the fleet
controller reads and writes. They are intentionally framework-agnostic
so they can be reused by services, APIs, and persistence layers. Field
names match the columns of the entity store.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, NonNegativeInt, PositiveInt


class SystemState(str, enum.Enum):
    """Run states of the fleet controller."""

    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


class RobotStatus(str, enum.Enum):
    """Operational states for a robot."""

    ACTIVE = "active"
    CHARGING = "charging"
    IDLE = "idle"


class PackageStatus(str, enum.Enum):
    """Lifecycle states for a package within the system."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"


class BinStatus(str, enum.Enum):
    """Availability of a storage bin."""

    AVAILABLE = "available"
    FULL = "full"
    MAINTENANCE = "maintenance"


class Robot(BaseModel):
    """A mobile robot of the fleet."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    battery_level: int = Field(100, ge=0, le=100, description="Battery percentage (0-100).")
    status: RobotStatus = RobotStatus.ACTIVE
    current_row: NonNegativeInt = Field(0, description="Lane index; the last lane holds the chargers.")


class Package(BaseModel):
    """Represents a unit of work carried by a robot."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    uid: str = Field(default_factory=lambda: new_package_uid())
    created_at: datetime = Field(default_factory=lambda: utcnow())
    status: PackageStatus = PackageStatus.PENDING
    bot_assigned: Optional[str] = None


class Bin(BaseModel):
    """Storage bin with a finite capacity."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    location: str
    capacity: PositiveInt
    current_count: NonNegativeInt = 0
    status: BinStatus = BinStatus.AVAILABLE

    @property
    def is_full(self) -> bool:
        return self.current_count >= self.capacity

    @property
    def fill_percentage(self) -> int:
        return round(self.current_count / self.capacity * 100)

    @property
    def fill_label(self) -> str:
        """Dashboard label: maintenance bins read as full."""

        if self.status == BinStatus.MAINTENANCE or self.is_full:
            return "Full"
        if self.fill_percentage >= 50:
            return "Filling"
        return "Available"


class RobotUpdate(BaseModel):
    """Partial robot update; only explicitly set fields are written."""

    battery_level: Optional[int] = Field(None, ge=0, le=100)
    status: Optional[RobotStatus] = None
    current_row: Optional[NonNegativeInt] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class PackageUpdate(BaseModel):
    """Partial package update; ``bot_assigned=None`` clears the assignment."""

    status: Optional[PackageStatus] = None
    bot_assigned: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class BinUpdate(BaseModel):
    """Partial bin update."""

    current_count: Optional[NonNegativeInt] = None
    status: Optional[BinStatus] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


@dataclass(frozen=True)
class PackageFilter:
    """Equality filter over package records.

    ``bot_assigned`` matches a robot name; ``unassigned`` restricts the match
    to packages without a robot.
    """

    status: Optional[PackageStatus] = None
    bot_assigned: Optional[str] = None
    unassigned: bool = False

    def matches(self, package: Package) -> bool:
        if self.status is not None and package.status != self.status:
            return False
        if self.bot_assigned is not None and package.bot_assigned != self.bot_assigned:
            return False
        if self.unassigned and package.bot_assigned is not None:
            return False
        return True


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""

    return datetime.now(timezone.utc)


def new_package_uid() -> str:
    return f"PKG-{uuid.uuid4().hex[:8].upper()}"
