"""Failure taxonomy of the backup merge engine.

Only ``RecordWriteError`` is recovered locally (collected into the merge
result). Every other error aborts the operation it was raised from.
"""

from __future__ import annotations


class BackupMergeError(RuntimeError):
    """Base class for backup merge failures."""


class ExtractionError(BackupMergeError):
    """The live store could not be read, or a tracked collection has no accessor."""


class UnsupportedFormatError(BackupMergeError):
    """The backup artifact matches none of the recognised encodings."""


class RecordWriteError(BackupMergeError):
    """A single insert or update was rejected by the store."""


class TransactionError(BackupMergeError):
    """The surrounding transaction failed; nothing written in it persists."""
