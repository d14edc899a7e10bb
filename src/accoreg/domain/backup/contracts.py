"""Shared contracts of the backup merge engine.

Snapshots, comparison output, merge options and results. Everything here is
plain data; behaviour lives in the stage modules.
"""

# switch off type warnings because of default_factory=list or dict
# pyright: reportUnknownVariableType=false

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from accoreg.domain.model import CollectionDescriptor


type Record = dict[str, object]

SNAPSHOT_VERSION: Final[str] = "1.0"


class ConflictPolicy(StrEnum):
    """How a changed record pair is turned into the record to persist."""

    INCOMING_WINS = "incoming_wins"
    CURRENT_WINS = "current_wins"
    MERGE_FIELDS = "merge_fields"
    MANUAL = "manual"


class ResolutionAction(StrEnum):
    """Caller decision for one manually reviewed record."""

    SKIP = "skip"
    USE_CUSTOM = "use_custom"


@dataclass(slots=True, kw_only=True)
class CollectionSnapshot:
    descriptor: CollectionDescriptor
    records: list[Record] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.descriptor.name


@dataclass(slots=True, kw_only=True)
class SnapshotMetadata:
    exported_at: str
    version: str = SNAPSHOT_VERSION
    record_counts: dict[str, int] = field(default_factory=dict)


@dataclass(slots=True, kw_only=True)
class Snapshot:
    """All tracked collections' records at one point in time."""

    collections: list[CollectionSnapshot]
    metadata: SnapshotMetadata

    def get(self, name: str) -> CollectionSnapshot | None:
        for collection in self.collections:
            if collection.name == name:
                return collection
        return None

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(collection.name for collection in self.collections)

    @property
    def total_records(self) -> int:
        return sum(len(collection.records) for collection in self.collections)


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeOptions:
    conflict_resolution: ConflictPolicy = ConflictPolicy.INCOMING_WINS
    preserve_newer: bool = False
    only_tables: frozenset[str] | None = None
    skip_tables: frozenset[str] = frozenset()
    dry_run: bool = False
    # Treat "" like a missing value when classifying conflicts.
    empty_is_missing: bool = False

    def includes(self, collection: str) -> bool:
        if collection in self.skip_tables:
            return False
        return not self.only_tables or collection in self.only_tables

    def as_dry_run(self) -> MergeOptions:
        return dataclasses.replace(self, dry_run=True)


@dataclass(slots=True, kw_only=True)
class ConflictRecord:
    """A record changed on both sides; left to the caller under the manual policy."""

    collection: str
    record_id: object
    current: Record
    incoming: Record
    conflict_fields: tuple[str, ...] = ()


@dataclass(slots=True, kw_only=True)
class CollectionRecords:
    collection: CollectionDescriptor
    records: list[Record] = field(default_factory=list)


@dataclass(slots=True, kw_only=True)
class Comparison:
    """Differ output; lists keep the incoming snapshot's order."""

    conflicts: list[ConflictRecord] = field(default_factory=list)
    new_records: list[CollectionRecords] = field(default_factory=list)
    updated_records: list[CollectionRecords] = field(default_factory=list)
    unchanged_records: dict[str, int] = field(default_factory=dict)
    skipped_records: dict[str, int] = field(default_factory=dict)
    collections_compared: int = 0

    @property
    def new_count(self) -> int:
        return sum(len(group.records) for group in self.new_records)

    @property
    def updated_count(self) -> int:
        return sum(len(group.records) for group in self.updated_records)

    @property
    def unchanged_count(self) -> int:
        return sum(self.unchanged_records.values())

    @property
    def skipped_count(self) -> int:
        return sum(self.skipped_records.values())


@dataclass(slots=True)
class MergeSummary:
    tables_processed: int = 0
    records_added: int = 0
    records_updated: int = 0
    records_skipped: int = 0
    records_unchanged: int = 0
    conflicts_detected: int = 0


@dataclass(slots=True, kw_only=True)
class MergeResult:
    """Outcome of one merge invocation; the only artifact handed back to callers."""

    success: bool = False
    summary: MergeSummary = field(default_factory=MergeSummary)
    conflicts: list[ConflictRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @classmethod
    def failed(cls, error: str) -> MergeResult:
        return cls(success=False, errors=[error])


@dataclass(slots=True, kw_only=True)
class AnalysisSummary:
    total_records: int
    table_breakdown: dict[str, int]
    new_records: int
    updated_records: int
    conflicts: int
    skipped_records: int = 0
    unchanged_records: int = 0


@dataclass(slots=True, kw_only=True)
class AnalysisResult:
    summary: AnalysisSummary
    conflicts: list[ConflictRecord] = field(default_factory=list)


@dataclass(slots=True, kw_only=True)
class ManualResolution:
    action: ResolutionAction
    custom_data: Record | None = None
