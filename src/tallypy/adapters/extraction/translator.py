"""Translate extraction payloads into domain drafts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from tallypy.domain.model import BudgetLineItem, ProjectFields, budget_draft, project_draft
from tallypy.domain.reconciliation import normalize

if TYPE_CHECKING:
    from tallypy.domain.model import DraftRecord

    from .schema import BudgetBreakdownPayload, BudgetRowPayload, ProjectPayload

SUMMARY_ROW_NAMES: Final[frozenset[str]] = frozenset(
    {"total", "grandtotal", "subtotal", "sum", "รวม", "รวมทั้งหมด", "รวมทั้งสิ้น", "รวมเงิน"}
)


def _line_item(payload: BudgetBreakdownPayload) -> BudgetLineItem | None:
    if payload.item is None and payload.total is None and payload.amount is None:
        return None
    return BudgetLineItem(
        item=payload.item or "",
        amount=payload.amount,
        unit=payload.unit,
        cost_per_unit=payload.cost_per_unit,
        total=payload.total,
    )


def _tuple_or_none[T](values: list[T]) -> tuple[T, ...] | None:
    return tuple(values) if values else None


def parse_project_document(payload: ProjectPayload, *, source_file: str) -> DraftRecord:
    items = [item for item in map(_line_item, payload.budget_breakdown) if item is not None]
    fields = ProjectFields(
        project_name=payload.project_name,
        organization=payload.organization,
        budget_requested=payload.budget_requested,
        responsible_person=payload.responsible_person,
        advisor=payload.advisor,
        activity_type=payload.activity_type,
        rationale=payload.rationale,
        objectives=_tuple_or_none(payload.objectives),
        targets=payload.targets,
        sdg_goals=_tuple_or_none(payload.sdg_goals),
        budget_breakdown=_tuple_or_none(items),
        notes=payload.notes,
    )
    return project_draft(source_file, fields)


def is_summary_row(payload: BudgetRowPayload) -> bool:
    return normalize(payload.project_name) in SUMMARY_ROW_NAMES


def is_empty_row(payload: BudgetRowPayload) -> bool:
    return (
        payload.project_name is None
        and payload.budget_requested is None
        and payload.budget_approved is None
    )


def parse_budget_row(
    payload: BudgetRowPayload, *, source_file: str, fiscal_year: int | None = None
) -> DraftRecord:
    fields = ProjectFields(
        project_name=payload.project_name,
        organization=payload.organization,
        fiscal_year=payload.fiscal_year or fiscal_year,
        budget_requested=payload.budget_requested,
        budget_approved=payload.budget_approved,
        budget_average=payload.budget_average,
        notes=payload.notes,
    )
    return budget_draft(source_file, fields)
