"""Preview of what a merge would change."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .contracts import AnalysisResult, AnalysisSummary
from .diff import compare

if TYPE_CHECKING:
    from .contracts import MergeOptions, Snapshot


def analyze(backup: Snapshot, current: Snapshot, options: MergeOptions) -> AnalysisResult:
    """Reshape a dry-run comparison into headline counts and the conflict list."""

    comparison = compare(current, backup, options.as_dry_run())
    return AnalysisResult(
        summary=AnalysisSummary(
            total_records=backup.total_records,
            table_breakdown={
                collection.name: len(collection.records) for collection in backup.collections
            },
            new_records=comparison.new_count,
            updated_records=comparison.updated_count,
            conflicts=len(comparison.conflicts),
            skipped_records=comparison.skipped_count,
            unchanged_records=comparison.unchanged_count,
        ),
        conflicts=comparison.conflicts,
    )
