"""Cross-source linking of budget-sheet drafts with proposal drafts.

``reconcile`` is a pure function of the raw draft set:
- budget drafts are visited in input order, each claiming the first unclaimed
  proposal draft whose name matches
- a claimed proposal is merged into the budget draft and reported as superseded
- everything unclaimed survives standalone

Nothing here reads or writes review overrides; those are applied afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Final

from tallypy.domain.model import DraftRecord, DraftStatus, IntegrityFlag, SourceKind

from .match import first_match

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

log = logging.getLogger(__name__)

MISMATCH_THRESHOLD: Final[Decimal] = Decimal(100)

NOTE_LINKED: Final[str] = "linked with proposal document"
NOTE_MISMATCH: Final[str] = "budget mismatch"
NOTE_NO_PROPOSAL: Final[str] = "no proposal document found"
NOTE_NO_BUDGET: Final[str] = "no budget document found"


@dataclass(slots=True, frozen=True, kw_only=True)
class ReconciliationResult:
    """Final view (budget-derived drafts first) plus the absorbed proposal drafts."""

    drafts: tuple[DraftRecord, ...] = field(default_factory=tuple)
    superseded: tuple[DraftRecord, ...] = field(default_factory=tuple)

    @property
    def linked_count(self) -> int:
        return sum(1 for draft in self.drafts if draft.status is DraftStatus.LINKED)


def integrity_verdict(
    *, budget_requested: Decimal | None, project_requested: Decimal | None
) -> IntegrityFlag | None:
    """Flag requested amounts that differ by more than ``MISMATCH_THRESHOLD``.

    Only compared when both documents state a positive amount.
    """

    if budget_requested is None or project_requested is None:
        return None
    if budget_requested <= 0 or project_requested <= 0:
        return None
    if abs(project_requested - budget_requested) <= MISMATCH_THRESHOLD:
        return None
    return IntegrityFlag(
        requested_by_project_doc=project_requested,
        requested_by_budget_doc=budget_requested,
    )


def merge_pair(budget: DraftRecord, project: DraftRecord) -> DraftRecord:
    """Merge ``project`` into ``budget``; the budget draft keeps its identity.

    Approved and average amounts always come from the budget sheet.
    """

    budget_fields = budget.fields
    fields = budget_fields.overlay(project.fields).with_values(
        budget_approved=budget_fields.budget_approved,
        budget_average=budget_fields.budget_average,
        notes=budget_fields.notes or project.fields.notes,
    )
    flag = integrity_verdict(
        budget_requested=budget_fields.budget_requested,
        project_requested=project.fields.budget_requested,
    )
    if flag is not None:
        log.info(
            "Requested amount mismatch for %r: proposal=%s budget=%s",
            budget.name,
            flag.requested_by_project_doc,
            flag.requested_by_budget_doc,
        )
    linked_record_id = (
        budget.linked_record_id
        if budget.linked_record_id is not None
        else project.linked_record_id
    )
    return budget.evolve(
        source_file=f"{budget.source_file} + {project.source_file}",
        fields=fields,
        status=DraftStatus.LINKED,
        linked_record_id=linked_record_id,
        integrity_flag=flag,
        note=NOTE_MISMATCH if flag is not None else NOTE_LINKED,
        proposal_file=project.proposal_file,
        absorbed_draft_id=project.id,
    )


def _standalone(draft: DraftRecord, reason: str) -> DraftRecord:
    status = DraftStatus.UPDATE if draft.linked_record_id is not None else DraftStatus.NEW
    note = f"{draft.note}; {reason}" if draft.note else reason
    return draft.evolve(status=status, note=note)


def reconcile(raw_drafts: Sequence[DraftRecord]) -> ReconciliationResult:
    """Derive the final draft view from the raw drafts of both collections."""

    budget_drafts = [
        draft for draft in raw_drafts if draft.source_kind is SourceKind.BUDGET_DOCUMENT
    ]
    project_drafts = [
        draft for draft in raw_drafts if draft.source_kind is SourceKind.PROJECT_DOCUMENT
    ]

    consumed: set[UUID] = set()
    final: list[DraftRecord] = []
    superseded: list[DraftRecord] = []

    for budget in budget_drafts:
        partner = first_match(
            budget.name,
            (draft for draft in project_drafts if draft.id not in consumed),
            name_of=lambda draft: draft.name,
        )
        if partner is None:
            final.append(_standalone(budget, NOTE_NO_PROPOSAL))
            continue
        consumed.add(partner.id)
        superseded.append(partner.evolve(status=DraftStatus.SUPERSEDED))
        final.append(merge_pair(budget, partner))

    final.extend(
        _standalone(draft, NOTE_NO_BUDGET) for draft in project_drafts if draft.id not in consumed
    )

    log.debug(
        "Reconciled %d raw drafts into %d (%d linked)",
        len(raw_drafts),
        len(final),
        len(superseded),
    )
    return ReconciliationResult(drafts=tuple(final), superseded=tuple(superseded))
