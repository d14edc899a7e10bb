from __future__ import annotations

from accoreg.domain.backup import ConflictPolicy, MergeOptions, analyze
from tests.helpers.records import make_snapshot, registration_record, role_record


def test_analysis_summarises_backup_contents() -> None:
    backup = make_snapshot(
        {
            "Role": [role_record("r1"), role_record("r2")],
            "Registration": [registration_record("a", branch="B"), registration_record("b")],
        }
    )
    current = make_snapshot(
        {"Role": [role_record("r1")], "Registration": [registration_record("a", branch="A")]}
    )

    result = analyze(backup, current, MergeOptions(conflict_resolution=ConflictPolicy.MANUAL))

    summary = result.summary
    assert summary.total_records == 4
    assert summary.table_breakdown == {"Role": 2, "Registration": 2}
    assert summary.new_records == 2
    assert summary.updated_records == 0
    assert summary.unchanged_records == 1
    assert summary.conflicts == 1
    assert [conflict.record_id for conflict in result.conflicts] == ["a"]


def test_analysis_of_identical_snapshots_reports_no_changes() -> None:
    snapshot = make_snapshot({"Role": [role_record("r1")]})

    summary = analyze(snapshot, snapshot, MergeOptions()).summary

    assert summary.new_records == 0
    assert summary.updated_records == 0
    assert summary.conflicts == 0
    assert summary.unchanged_records == 1
