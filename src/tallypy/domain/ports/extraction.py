"""Port for the external document extraction service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tallypy.domain.model import DraftRecord, SourceKind, UploadedFile


class ExtractionError(RuntimeError):
    """Raised when a file cannot be turned into drafts; the file is skipped."""

    def __init__(self, message: str, *, file_name: str | None = None) -> None:
        super().__init__(message)
        self.file_name = file_name


@runtime_checkable
class DocumentExtractor(Protocol):
    """Turn one uploaded file into zero or more drafts of the given collection."""

    def __call__(self, file: UploadedFile, kind: SourceKind) -> list[DraftRecord]: ...
