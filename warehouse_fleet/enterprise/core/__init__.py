"""Core domain package for the warehouse fleet."""

from .models import (
    Bin,
    BinStatus,
    BinUpdate,
    Package,
    PackageFilter,
    PackageStatus,
    PackageUpdate,
    Robot,
    RobotStatus,
    RobotUpdate,
    SystemState,
)

__all__ = [
    "Bin",
    "BinStatus",
    "BinUpdate",
    "Package",
    "PackageFilter",
    "PackageStatus",
    "PackageUpdate",
    "Robot",
    "RobotStatus",
    "RobotUpdate",
    "SystemState",
]
