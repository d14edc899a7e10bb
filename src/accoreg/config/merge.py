"""Defaults for backup merge operations."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from accoreg.domain.backup.contracts import ConflictPolicy

from .errors import ConfigurationError

DEFAULT_CONFLICT_POLICY: Final[ConflictPolicy] = ConflictPolicy.INCOMING_WINS

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True, slots=True)
class MergeConfig:
    conflict_resolution: ConflictPolicy = DEFAULT_CONFLICT_POLICY
    preserve_newer: bool = False
    empty_is_missing: bool = False


def _env_flag(name: str, *, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {raw!r}")


def parse_conflict_policy(value: str) -> ConflictPolicy:
    """Parse a policy name, accepting dashes and the legacy ``backup_wins`` spelling."""

    normalized = value.strip().lower().replace("-", "_")
    if normalized == "backup_wins":
        return ConflictPolicy.INCOMING_WINS
    try:
        return ConflictPolicy(normalized)
    except ValueError as exc:
        choices = ", ".join(policy.value for policy in ConflictPolicy)
        raise ConfigurationError(
            f"Unknown conflict resolution {value!r} (expected one of: {choices})"
        ) from exc


def get_merge_config() -> MergeConfig:
    raw_policy = os.getenv("ACCOREG_DEFAULT_POLICY")
    policy = (
        parse_conflict_policy(raw_policy)
        if raw_policy and raw_policy.strip()
        else DEFAULT_CONFLICT_POLICY
    )
    return MergeConfig(
        conflict_resolution=policy,
        preserve_newer=_env_flag("ACCOREG_PRESERVE_NEWER", default=False),
        empty_is_missing=_env_flag("ACCOREG_EMPTY_IS_MISSING", default=False),
    )
