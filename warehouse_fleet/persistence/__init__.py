"""Persistence layer: entity store interface plus memory and SQL backends."""

from .database import create_schema, dispose_engine, engine_options, get_sessionmaker, init_engine, metadata
from .memory import InMemoryEntityStore
from .repository import SqlEntityStore
from .store import EntityNotFoundError, EntityStore, StoreError

__all__ = [
    "init_engine",
    "engine_options",
    "get_sessionmaker",
    "create_schema",
    "dispose_engine",
    "metadata",
    "EntityStore",
    "EntityNotFoundError",
    "StoreError",
    "InMemoryEntityStore",
    "SqlEntityStore",
]
