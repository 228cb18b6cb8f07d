"""Dependency providers for the API layer."""

from __future__ import annotations

from typing import Optional

from warehouse_fleet.enterprise.config.settings import AppSettings, get_settings
from warehouse_fleet.persistence import (
    EntityStore,
    InMemoryEntityStore,
    SqlEntityStore,
    create_schema,
    get_sessionmaker,
    init_engine,
)
from warehouse_fleet.services import FleetController

__all__ = [
    "get_store",
    "reset_store",
    "prepare_store",
    "get_fleet_controller",
    "reset_fleet_controller",
    "shutdown_fleet_controller",
    "get_app_settings",
]


_store: Optional[EntityStore] = None
_controller: Optional[FleetController] = None


def get_app_settings() -> AppSettings:
    return get_settings()


def get_store() -> EntityStore:
    """Return the shared store: SQL when a database is enabled, memory otherwise."""

    global _store
    if _store is None:
        settings = get_settings()
        if settings.database.enabled:
            init_engine(settings)
            _store = SqlEntityStore(get_sessionmaker())
        else:
            _store = InMemoryEntityStore.seeded(settings.fleet)
    return _store


async def prepare_store() -> EntityStore:
    """Create the schema and seed the default fleet when the database is empty."""

    settings = get_settings()
    store = get_store()
    if settings.database.enabled and settings.database.create_schema:
        await create_schema()
    await store.seed(settings.fleet)
    return store


def reset_store() -> None:
    """Drop the cached store (useful for tests)."""

    global _store
    _store = None


def get_fleet_controller() -> FleetController:
    """Return the process-wide :class:`FleetController`."""

    global _controller
    if _controller is None:
        _controller = FleetController(get_store(), get_settings())
    return _controller


async def shutdown_fleet_controller() -> None:
    if _controller is not None:
        await _controller.shutdown()


def reset_fleet_controller() -> None:
    """Forget the cached controller; call :func:`shutdown_fleet_controller` first if it ran."""

    global _controller
    _controller = None
