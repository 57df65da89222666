"""Reusable fakes and helpers for import reconciliation tests."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import TYPE_CHECKING

from tallypy.domain.model import (
    DraftRecord,
    ProjectFields,
    ProjectFile,
    ProjectRecord,
    SourceKind,
    UploadedFile,
    budget_draft,
    project_draft,
)
from tallypy.domain.ports import DocumentExtractor, ExtractionError, ProjectStore, ProjectStoreError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


def _amount(value: int | str | Decimal | None) -> Decimal | None:
    return None if value is None else Decimal(value)


def make_budget_draft(
    name: str | None,
    *,
    requested: int | str | None = None,
    approved: int | str | None = None,
    organization: str | None = None,
    notes: str | None = None,
    source_file: str = "budget.xlsx",
) -> DraftRecord:
    return budget_draft(
        source_file,
        ProjectFields(
            project_name=name,
            organization=organization,
            budget_requested=_amount(requested),
            budget_approved=_amount(approved),
            notes=notes,
        ),
    )


def make_project_draft(
    name: str | None,
    *,
    requested: int | str | None = None,
    organization: str | None = None,
    rationale: str | None = "Because it matters",
    objectives: tuple[str, ...] | None = ("Engage students",),
    notes: str | None = None,
    source_file: str | None = None,
) -> DraftRecord:
    file_name = source_file or f"{(name or 'proposal').lower().replace(' ', '_')}.pdf"
    return project_draft(
        file_name,
        ProjectFields(
            project_name=name,
            organization=organization,
            budget_requested=_amount(requested),
            responsible_person="Somchai",
            rationale=rationale,
            objectives=objectives,
            notes=notes,
        ),
    )


def make_record(
    record_id: int,
    name: str,
    *,
    organization: str | None = None,
    with_file: bool = False,
) -> ProjectRecord:
    files = (
        (ProjectFile(id=record_id * 10, file_name="old.pdf", file_url="file:///old.pdf"),)
        if with_file
        else ()
    )
    return ProjectRecord(id=record_id, name=name, organization=organization, files=files)


def make_upload(name: str, content: bytes = b"%PDF-1.4 fake") -> UploadedFile:
    return UploadedFile(name=name, content=content)


class FakeProjectStore(ProjectStore):
    """In-memory implementation of the project store port for testing."""

    def __init__(self, records: Iterable[ProjectRecord] = ()) -> None:
        self.records: dict[int, ProjectRecord] = {record.id: record for record in records}
        self.values: dict[int, dict[str, object]] = {
            record.id: {} for record in self.records.values()
        }
        self.created: list[dict[str, object]] = []
        self.updates: list[tuple[int, dict[str, object]]] = []
        self.uploads: list[tuple[int, str, str]] = []
        self.fail_create = False
        self.fail_update_ids: set[int] = set()
        self.fail_uploads = False
        self._next_id = max(self.records, default=0) + 1
        self._next_file_id = 1

    def list_all(self) -> list[ProjectRecord]:
        return sorted(self.records.values(), key=lambda record: record.id, reverse=True)

    def create(self, values: Mapping[str, object]) -> int:
        if self.fail_create:
            raise ProjectStoreError("create rejected")
        record_id = self._next_id
        self._next_id += 1
        self.created.append(dict(values))
        self.values[record_id] = dict(values)
        self.records[record_id] = ProjectRecord(
            id=record_id,
            name=str(values["project_name"]),
            organization=str(values["organization"]),
        )
        return record_id

    def update(self, record_id: int, values: Mapping[str, object]) -> None:
        if record_id in self.fail_update_ids or record_id not in self.records:
            raise ProjectStoreError(f"update of {record_id} rejected", record_id=record_id)
        self.updates.append((record_id, dict(values)))
        self.values[record_id].update(values)

    def upload_file(self, record_id: int, file: UploadedFile, *, category: str) -> int:
        if self.fail_uploads:
            raise ProjectStoreError("upload rejected", record_id=record_id)
        file_id = self._next_file_id
        self._next_file_id += 1
        self.uploads.append((record_id, file.name, category))
        record = self.records[record_id]
        attached = ProjectFile(id=file_id, file_name=file.name, file_url=f"mem://{file.name}")
        self.records[record_id] = replace(record, files=(*record.files, attached))
        return file_id


class FakeExtractor(DocumentExtractor):
    """Returns canned drafts per file name; unknown names fail extraction."""

    def __init__(self, drafts_by_file: Mapping[str, list[DraftRecord]]) -> None:
        self._drafts_by_file = dict(drafts_by_file)
        self.calls: list[tuple[str, SourceKind]] = []

    def __call__(self, file: UploadedFile, kind: SourceKind) -> list[DraftRecord]:
        self.calls.append((file.name, kind))
        if file.name not in self._drafts_by_file:
            raise ExtractionError("service unavailable", file_name=file.name)
        return list(self._drafts_by_file[file.name])
