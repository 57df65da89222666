"""Sequential create-or-update of reviewed drafts against the project store."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from tallypy.domain.model import (
    BUDGET_SHEET_FIELDS,
    NARRATIVE_FIELDS,
    DraftStatus,
    SourceKind,
)
from tallypy.domain.ports import ProjectStoreError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from uuid import UUID

    from tallypy.domain.model import DraftRecord, ProjectFields, UploadedFile
    from tallypy.domain.ports import ProjectStore

log = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME: Final[str] = "Untitled Project"
DEFAULT_ORGANIZATION: Final[str] = "Unassigned"

MERGED_UPDATE_FIELDS: Final[frozenset[str]] = BUDGET_SHEET_FIELDS | NARRATIVE_FIELDS
BUDGET_UPDATE_FIELDS: Final[frozenset[str]] = BUDGET_SHEET_FIELDS
PROJECT_UPDATE_FIELDS: Final[frozenset[str]] = NARRATIVE_FIELDS | {"budget_requested"}


class CommitAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"


class CommitStage(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    UPLOAD = "upload"


@dataclass(frozen=True, slots=True, kw_only=True)
class CreationDefaults:
    """Values written when a new record is created from sparse fields."""

    fiscal_year: int
    project_name: str = DEFAULT_PROJECT_NAME
    organization: str = DEFAULT_ORGANIZATION
    is_published: bool = True


@dataclass(frozen=True, slots=True, kw_only=True)
class CommitOutcome:
    draft_id: UUID
    project_name: str | None
    action: CommitAction | None = None
    record_id: int | None = None
    file_id: int | None = None
    error: str | None = None
    failed_stage: CommitStage | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True, kw_only=True)
class CommitReport:
    """Per-draft outcomes of one commit run."""

    outcomes: list[CommitOutcome] = field(default_factory=list)

    @property
    def created(self) -> int:
        return sum(1 for item in self.outcomes if item.ok and item.action is CommitAction.CREATED)

    @property
    def updated(self) -> int:
        return sum(1 for item in self.outcomes if item.ok and item.action is CommitAction.UPDATED)

    @property
    def failed(self) -> list[CommitOutcome]:
        return [item for item in self.outcomes if not item.ok]

    @property
    def session_ended(self) -> bool:
        """True when every draft was written; callers should refetch persisted records."""

        return not self.failed


def creation_values(fields: ProjectFields, defaults: CreationDefaults) -> dict[str, object]:
    values = fields.as_payload()
    values["project_name"] = fields.project_name or defaults.project_name
    values["organization"] = fields.organization or defaults.organization
    values.setdefault("fiscal_year", defaults.fiscal_year)
    for name in ("budget_requested", "budget_approved", "budget_average"):
        values.setdefault(name, Decimal(0))
    values["is_published"] = defaults.is_published
    return values


def update_scope(draft: DraftRecord) -> frozenset[str]:
    """Fields an update may write, by merge state and source collection.

    A standalone proposal never writes the approved amount.
    """

    if draft.is_merged:
        return MERGED_UPDATE_FIELDS
    if draft.source_kind is SourceKind.BUDGET_DOCUMENT:
        return BUDGET_UPDATE_FIELDS
    return PROJECT_UPDATE_FIELDS


def update_values(draft: DraftRecord) -> dict[str, object]:
    return draft.fields.as_payload(update_scope(draft))


def commit_drafts(
    drafts: Iterable[DraftRecord],
    store: ProjectStore,
    *,
    files: Mapping[str, UploadedFile],
    defaults: CreationDefaults,
    attachment_category: str,
) -> CommitReport:
    """Write every draft in order; a failing draft never stops the loop."""

    report = CommitReport()
    for draft in drafts:
        if draft.status is DraftStatus.SUPERSEDED:
            continue
        outcome = _commit_one(
            draft,
            store,
            files=files,
            defaults=defaults,
            attachment_category=attachment_category,
        )
        report.outcomes.append(outcome)

    log.info(
        "Commit finished: created=%s, updated=%s, failed=%s",
        report.created,
        report.updated,
        len(report.failed),
    )
    return report


def _commit_one(
    draft: DraftRecord,
    store: ProjectStore,
    *,
    files: Mapping[str, UploadedFile],
    defaults: CreationDefaults,
    attachment_category: str,
) -> CommitOutcome:
    record_id = draft.linked_record_id
    action: CommitAction | None = None
    stage = CommitStage.CREATE if record_id is None else CommitStage.UPDATE
    try:
        if record_id is None:
            record_id = store.create(creation_values(draft.fields, defaults))
            action = CommitAction.CREATED
        else:
            values = update_values(draft)
            if values:
                store.update(record_id, values)
            action = CommitAction.UPDATED

        stage = CommitStage.UPLOAD
        file_id = _attach_proposal(
            draft, store, record_id=record_id, files=files, category=attachment_category
        )
    except ProjectStoreError as exc:
        log.exception("Commit of %r failed during %s", draft.name, stage)
        return CommitOutcome(
            draft_id=draft.id,
            project_name=draft.name,
            action=action,
            record_id=record_id,
            error=str(exc),
            failed_stage=stage,
        )

    log.info("Record %s %s from %s", record_id, action, draft.source_file)
    return CommitOutcome(
        draft_id=draft.id,
        project_name=draft.name,
        action=action,
        record_id=record_id,
        file_id=file_id,
    )


def _attach_proposal(
    draft: DraftRecord,
    store: ProjectStore,
    *,
    record_id: int,
    files: Mapping[str, UploadedFile],
    category: str,
) -> int | None:
    if draft.proposal_file is None:
        return None
    upload = files.get(draft.proposal_file)
    if upload is None:
        log.warning("Proposal file %s is no longer available; not attached", draft.proposal_file)
        return None
    return store.upload_file(record_id, upload, category=category)
