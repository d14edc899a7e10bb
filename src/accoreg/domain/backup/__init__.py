"""Incremental backup merge engine.

Stages: extraction of the live store, comparison against a backup snapshot,
conflict resolution, and the merge executor tying them together.
"""

from __future__ import annotations

from .contracts import (
    SNAPSHOT_VERSION,
    AnalysisResult,
    AnalysisSummary,
    CollectionRecords,
    CollectionSnapshot,
    Comparison,
    ConflictPolicy,
    ConflictRecord,
    ManualResolution,
    MergeOptions,
    MergeResult,
    MergeSummary,
    Record,
    ResolutionAction,
    Snapshot,
    SnapshotMetadata,
)
from .diff import changed_fields, compare
from .errors import (
    BackupMergeError,
    ExtractionError,
    RecordWriteError,
    TransactionError,
    UnsupportedFormatError,
)
from .execute import MergeExecutor
from .extract import extract_current
from .manual import apply_manual_resolutions, resolution_key
from .report import analyze
from .resolve import resolve

__all__ = [
    "SNAPSHOT_VERSION",
    "AnalysisResult",
    "AnalysisSummary",
    "BackupMergeError",
    "CollectionRecords",
    "CollectionSnapshot",
    "Comparison",
    "ConflictPolicy",
    "ConflictRecord",
    "ExtractionError",
    "ManualResolution",
    "MergeExecutor",
    "MergeOptions",
    "MergeResult",
    "MergeSummary",
    "Record",
    "RecordWriteError",
    "ResolutionAction",
    "Snapshot",
    "SnapshotMetadata",
    "TransactionError",
    "UnsupportedFormatError",
    "analyze",
    "apply_manual_resolutions",
    "changed_fields",
    "compare",
    "extract_current",
    "resolution_key",
    "resolve",
]
