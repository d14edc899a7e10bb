"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from accoreg.domain.ports.persistence import CollectionRepository


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...  # the repo list itself should be immutable

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(frozen=True, slots=True)
class MergeRepositories(RepositoryCollection):
    """Collection name -> repository registry used by the merge engine."""

    by_collection: Mapping[str, CollectionRepository]

    def get(self, collection: str) -> CollectionRepository | None:
        return self.by_collection.get(collection)

    def __contains__(self, collection: object) -> bool:
        return collection in self.by_collection


type MergeUnitOfWork = UnitOfWork[MergeRepositories]
