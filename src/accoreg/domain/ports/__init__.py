"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import CollectionRepository
from .unit_of_work import (
    MergeRepositories,
    MergeUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CollectionRepository",
    "MergeRepositories",
    "MergeUnitOfWork",
    "RepositoryCollection",
    "UnitOfWork",
]
