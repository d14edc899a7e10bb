"""SQLAlchemy adapter package for accoreg."""

from __future__ import annotations

from .mappings import (
    TABLE_BY_MODEL,
    create_all_tables,
    mapper_registry,
    persisted_collections,
    start_mappers,
)
from .repositories import SqlAlchemyCollectionRepository
from .unit_of_work import (
    SqlAlchemyMergeUnitOfWork,
    StartupError,
    build_engine,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "TABLE_BY_MODEL",
    "SqlAlchemyCollectionRepository",
    "SqlAlchemyMergeUnitOfWork",
    "StartupError",
    "build_engine",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "persisted_collections",
    "shutdown",
    "start_mappers",
    "startup",
]
