"""Persisted project records as seen by the import workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import PurePath


@dataclass(frozen=True, slots=True, kw_only=True)
class ProjectFile:
    id: int
    file_name: str
    file_url: str
    file_type: str | None = None
    category: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ProjectRecord:
    """Canonical project owned by the store."""

    id: int
    name: str
    organization: str | None = None
    budget_requested: Decimal | None = None
    budget_approved: Decimal | None = None
    files: tuple[ProjectFile, ...] = field(default_factory=tuple)

    @property
    def has_files(self) -> bool:
        return bool(self.files)


@dataclass(frozen=True, slots=True)
class UploadedFile:
    """Raw bytes of one uploaded document."""

    name: str
    content: bytes
    mime_type: str | None = None

    @property
    def extension(self) -> str:
        return PurePath(self.name).suffix.lower().lstrip(".")

    @property
    def size(self) -> int:
        return len(self.content)
