"""Pydantic models describing the canonical backup artifact."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel, model_validator

from accoreg.domain.backup.contracts import SNAPSHOT_VERSION, ResolutionAction


class ArtifactBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ArtifactTable(ArtifactBaseModel):
    table_name: str = Field(alias="tableName", min_length=1)
    primary_key: str = Field(default="id", alias="primaryKey", min_length=1)
    records: list[dict[str, Any]] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_primary_keys(self) -> ArtifactTable:
        # Keys are compared the way the merge compares them: as text.
        seen: set[str] = set()
        for position, record in enumerate(self.records):
            if record.get(self.primary_key) is None:
                raise ValueError(
                    f"{self.table_name} record #{position} has no {self.primary_key!r} value"
                )
            key = record[self.primary_key]
            if not isinstance(key, str | int):
                raise ValueError(f"{self.table_name} record #{position} has a non-scalar key")
            if str(key) in seen:
                raise ValueError(f"{self.table_name} contains duplicate key {key!r}")
            seen.add(str(key))
        return self


class ArtifactMetadata(ArtifactBaseModel):
    exported_at: str | None = Field(default=None, alias="exportedAt")
    version: str = SNAPSHOT_VERSION
    record_counts: dict[str, int] = Field(default_factory=dict, alias="recordCounts")


class BackupArtifact(ArtifactBaseModel):
    """Top-level shape: ``{tables: [...], metadata: {...}}``."""

    tables: list[ArtifactTable]
    metadata: ArtifactMetadata = Field(default_factory=ArtifactMetadata)


class ResolutionEntry(ArtifactBaseModel):
    """One caller decision, as submitted alongside a merge request."""

    action: ResolutionAction
    custom_data: dict[str, Any] | None = Field(default=None, alias="customData")


class ResolutionDocument(RootModel[dict[str, ResolutionEntry]]):
    """``{"<Collection>_<id>": {"action": ..., "customData": {...}}}``."""
