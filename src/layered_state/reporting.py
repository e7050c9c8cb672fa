"""Serializable summaries of snapshot contents."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class EntryReport(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["data", "operation"]
    depth: int = Field(default=0, ge=0)
    layers: list[str] = Field(default_factory=list)


class SnapshotReport(BaseModel):
    """Kind of every entry plus the composition chain of each operation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: int = Field(ge=0)
    entries: dict[str, EntryReport]

    def operations(self) -> dict[str, EntryReport]:
        return {key: entry for key, entry in self.entries.items() if entry.kind == "operation"}


__all__ = ["EntryReport", "SnapshotReport"]
