"""Load manual conflict resolutions submitted as JSON."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from accoreg.domain.backup.contracts import ManualResolution

from .schema import ResolutionDocument

if TYPE_CHECKING:
    from pathlib import Path


class InvalidResolutionsError(ValueError):
    """The resolutions document does not have the expected shape."""


def parse_resolutions(payload: bytes | str) -> dict[str, ManualResolution]:
    try:
        document = ResolutionDocument.model_validate_json(payload)
    except ValidationError as exc:
        raise InvalidResolutionsError(f"Invalid conflict resolutions: {exc}") from exc
    return {
        key: ManualResolution(action=entry.action, custom_data=entry.custom_data)
        for key, entry in document.root.items()
    }


def read_resolutions_file(path: Path) -> dict[str, ManualResolution]:
    return parse_resolutions(path.read_bytes())
