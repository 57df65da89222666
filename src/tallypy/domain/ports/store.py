"""Port for the persisted project store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from tallypy.domain.model import ProjectRecord, UploadedFile


class ProjectStoreError(RuntimeError):
    """Raised when the store rejects a read, create, update or upload."""

    def __init__(self, message: str, *, record_id: int | None = None) -> None:
        super().__init__(message)
        self.record_id = record_id


@runtime_checkable
class ProjectStore(Protocol):
    """Insert/update/query operations over canonical project records.

    No transactional guarantee spans several calls.
    """

    def list_all(self) -> Sequence[ProjectRecord]:
        """Return every record, newest first."""
        ...

    def create(self, values: Mapping[str, object]) -> int: ...

    def update(self, record_id: int, values: Mapping[str, object]) -> None: ...

    def upload_file(self, record_id: int, file: UploadedFile, *, category: str) -> int: ...
