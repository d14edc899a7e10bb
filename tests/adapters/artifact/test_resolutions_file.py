from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from accoreg.adapters.artifact import (
    InvalidResolutionsError,
    parse_resolutions,
    read_resolutions_file,
)
from accoreg.domain.backup import ResolutionAction

if TYPE_CHECKING:
    from pathlib import Path


def test_parse_resolutions() -> None:
    payload = json.dumps(
        {
            "Registration_a": {"action": "use_custom", "customData": {"branch": "C"}},
            "Role_r1": {"action": "skip"},
        }
    )

    resolutions = parse_resolutions(payload)

    assert resolutions["Registration_a"].action is ResolutionAction.USE_CUSTOM
    assert resolutions["Registration_a"].custom_data == {"branch": "C"}
    assert resolutions["Role_r1"].action is ResolutionAction.SKIP
    assert resolutions["Role_r1"].custom_data is None


@pytest.mark.parametrize(
    "payload",
    [
        '{"Role_r1": {"action": "overwrite"}}',
        '{"Role_r1": {}}',
        "[]",
        "not json",
    ],
)
def test_invalid_resolutions_raise(payload: str) -> None:
    with pytest.raises(InvalidResolutionsError):
        parse_resolutions(payload)


def test_read_resolutions_file(tmp_path: Path) -> None:
    path = tmp_path / "resolutions.json"
    path.write_text('{"Role_r1": {"action": "skip"}}', encoding="utf-8")

    assert list(read_resolutions_file(path)) == ["Role_r1"]
