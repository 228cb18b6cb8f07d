"""API routers exposed by the server package."""

from .v1.bins import router as bins_router
from .v1.fleet import router as fleet_router
from .v1.health import router as health_router
from .v1.observability import router as observability_router
from .v1.packages import router as packages_router
from .v1.robots import router as robots_router

__all__ = [
	"bins_router",
	"fleet_router",
	"health_router",
	"observability_router",
	"packages_router",
	"robots_router",
]
