"""Draft records: extracted but unconfirmed project descriptions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import TYPE_CHECKING

from .enums import DraftStatus, SourceKind

if TYPE_CHECKING:
    from .fields import ProjectFields


@dataclass(frozen=True, slots=True, kw_only=True)
class IntegrityFlag:
    """Requested amounts that disagree between a proposal and a budget sheet."""

    requested_by_project_doc: Decimal
    requested_by_budget_doc: Decimal

    @property
    def difference(self) -> Decimal:
        return abs(self.requested_by_project_doc - self.requested_by_budget_doc)


@dataclass(frozen=True, slots=True, kw_only=True)
class DraftRecord:
    """One extracted project description awaiting review.

    ``proposal_file`` names the proposal document whose bytes should be attached on
    commit; ``absorbed_draft_id`` is set once a project draft was merged into this one.
    """

    source_file: str
    source_kind: SourceKind
    fields: ProjectFields
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    status: DraftStatus = DraftStatus.NEW
    linked_record_id: int | None = None
    integrity_flag: IntegrityFlag | None = None
    note: str | None = None
    proposal_file: str | None = None
    absorbed_draft_id: uuid.UUID | None = None
    manually_linked: bool = False

    @property
    def name(self) -> str | None:
        return self.fields.project_name

    @property
    def is_merged(self) -> bool:
        return self.absorbed_draft_id is not None

    def evolve(self, **changes: object) -> DraftRecord:
        return replace(self, **changes)  # pyright: ignore[reportArgumentType]


def project_draft(source_file: str, fields: ProjectFields) -> DraftRecord:
    """Build a draft extracted from a proposal; the file itself is the proposal."""

    return DraftRecord(
        source_file=source_file,
        source_kind=SourceKind.PROJECT_DOCUMENT,
        fields=fields,
        proposal_file=source_file,
    )


def budget_draft(source_file: str, fields: ProjectFields) -> DraftRecord:
    return DraftRecord(
        source_file=source_file,
        source_kind=SourceKind.BUDGET_DOCUMENT,
        fields=fields,
    )
