from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from accoreg.adapters.artifact import read_resolutions_file
from accoreg.app import (
    analyze_backup,
    build_merge_options,
    create_incremental_backup,
    merge_backup,
    save_incremental_backup,
)
from accoreg.config import ConfigurationError, configure_logging, parse_conflict_policy
from accoreg.domain.backup import ConflictPolicy

if TYPE_CHECKING:
    from collections.abc import Sequence

    from accoreg.domain.backup import AnalysisResult, ConflictRecord, MergeOptions, MergeResult

log = logging.getLogger(__name__)


def _policy(value: str) -> ConflictPolicy:
    try:
        return parse_conflict_policy(value)
    except ConfigurationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _add_merge_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "file",
        type=str,
        help="Backup artifact: a path, or a file name inside the backup directory",
    )
    parser.add_argument(
        "--policy",
        type=_policy,
        default=None,
        help=(
            "Conflict resolution policy "
            f"({', '.join(policy.value for policy in ConflictPolicy)}; defaults to config)"
        ),
    )
    parser.add_argument(
        "--preserve-newer",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Keep current records whose timestamp is newer than the backup's",
    )
    parser.add_argument(
        "--only-table",
        action="append",
        dest="only_tables",
        metavar="COLLECTION",
        help="Restrict the merge to this collection (repeatable)",
    )
    parser.add_argument(
        "--skip-table",
        action="append",
        dest="skip_tables",
        default=[],
        metavar="COLLECTION",
        help="Leave this collection untouched (repeatable)",
    )
    parser.add_argument(
        "--empty-is-missing",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Treat empty strings like missing values when detecting conflicts",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyse and merge accoreg backups")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Preview the changes a backup would make")
    _add_merge_options(analyze)

    merge = subparsers.add_parser("merge", help="Merge a backup into the live data")
    _add_merge_options(merge)
    merge.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and report the merge without writing anything",
    )
    merge.add_argument(
        "--resolutions",
        type=Path,
        help="JSON file with manual decisions keyed by '<Collection>_<id>'",
    )

    export = subparsers.add_parser("export", help="Export the live data as a backup artifact")
    export.add_argument(
        "--filename",
        type=str,
        help="File name inside the backup directory (defaults to a timestamped name)",
    )
    export.add_argument(
        "--gzip",
        action="store_true",
        help="Compress the artifact with gzip",
    )

    return parser.parse_args(list(argv))


def _artifact_source(value: str) -> str | Path:
    candidate = Path(value)
    return candidate if candidate.exists() else value


def _options_from_args(args: argparse.Namespace) -> MergeOptions:
    return build_merge_options(
        conflict_resolution=args.policy,
        preserve_newer=args.preserve_newer,
        only_tables=args.only_tables,
        skip_tables=args.skip_tables,
        dry_run=getattr(args, "dry_run", False),
        empty_is_missing=args.empty_is_missing,
    )


def _log_conflicts(conflicts: Sequence[ConflictRecord]) -> None:
    for conflict in conflicts:
        log.warning(
            "Conflict in %s record %s: %s",
            conflict.collection,
            conflict.record_id,
            ", ".join(conflict.conflict_fields) or "current record is newer",
        )


def _report_analysis(result: AnalysisResult) -> None:
    summary = result.summary
    for collection, count in summary.table_breakdown.items():
        log.info("  %s: %s records", collection, count)
    log.info(
        "Backup holds %s records: %s new, %s updated, %s unchanged, %s skipped, %s conflicts",
        summary.total_records,
        summary.new_records,
        summary.updated_records,
        summary.unchanged_records,
        summary.skipped_records,
        summary.conflicts,
    )
    _log_conflicts(result.conflicts)


def _report_merge(result: MergeResult) -> None:
    summary = result.summary
    log.info(
        "Merge %s: tables=%s, added=%s, updated=%s, skipped=%s, unchanged=%s, conflicts=%s",
        "succeeded" if result.success else "failed",
        summary.tables_processed,
        summary.records_added,
        summary.records_updated,
        summary.records_skipped,
        summary.records_unchanged,
        summary.conflicts_detected,
    )
    _log_conflicts(result.conflicts)
    for error in result.errors:
        log.error("%s", error)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        options = None if parsed_args.command == "export" else _options_from_args(parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "analyze":
            _report_analysis(analyze_backup(_artifact_source(parsed_args.file), options))
        elif parsed_args.command == "merge":
            resolutions = (
                read_resolutions_file(parsed_args.resolutions) if parsed_args.resolutions else None
            )
            result = merge_backup(_artifact_source(parsed_args.file), options, resolutions)
            _report_merge(result)
            if not result.success:
                sys.exit(1)
        elif parsed_args.command == "export":
            snapshot = create_incremental_backup()
            path = save_incremental_backup(
                snapshot, parsed_args.filename, compress=parsed_args.gzip
            )
            log.info("Exported %s records to %s", snapshot.total_records, path)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)
