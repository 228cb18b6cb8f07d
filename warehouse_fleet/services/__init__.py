"""Service layer exports for the warehouse fleet controller."""

from .bins import set_bin_maintenance, toggle_bin_maintenance
from .controller import FleetController, RunState
from .generator import PackageGenerator
from .overview import FleetOverview, build_overview
from .periodic import PeriodicTask
from .randomness import RandomSource
from .tick import FleetTickEngine

__all__ = [
	"FleetController",
	"FleetOverview",
	"FleetTickEngine",
	"PackageGenerator",
	"PeriodicTask",
	"RandomSource",
	"RunState",
	"build_overview",
	"set_bin_maintenance",
	"toggle_bin_maintenance",
]
