"""Directory configuration models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DirectoryEntry(BaseModel):
    """A working directory users may launch sessions in."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Name shown in the directory picker.")
    path: str = Field(..., description="Absolute path of the repository on this host.")

    @field_validator("label")
    @classmethod
    def _normalize_label(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Directory label must not be empty")
        return normalized

    @field_validator("path")
    @classmethod
    def _require_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"Directory path must be absolute: {value!r}")
        return value


class DirectoryConfig(BaseModel):
    """The set of directories offered by the launcher."""

    model_config = ConfigDict(frozen=True)

    directories: tuple[DirectoryEntry, ...] = Field(default_factory=tuple)

    @field_validator("directories", mode="before")
    @classmethod
    def _ensure_sequence(cls, value: Any):
        if value is None:
            return ()
        if isinstance(value, (list, tuple)):
            return tuple(value)
        raise ValueError("directories must be a list of {label, path} entries")

    def find(self, path: str) -> DirectoryEntry | None:
        """Return the entry whose path equals ``path``."""

        for entry in self.directories:
            if entry.path == path:
                return entry
        return None


__all__ = ["DirectoryConfig", "DirectoryEntry"]
