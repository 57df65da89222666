"""Canonical project attributes carried by drafts."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from decimal import Decimal
from typing import Final

type Amount = Decimal


@dataclass(frozen=True, slots=True, kw_only=True)
class BudgetLineItem:
    """One row of a proposal's budget breakdown."""

    item: str
    amount: Decimal | None = None
    unit: str | None = None
    cost_per_unit: Decimal | None = None
    total: Decimal | None = None

    def as_payload(self) -> dict[str, object]:
        return {
            "item": self.item,
            "amount": self.amount,
            "unit": self.unit,
            "cost_per_unit": self.cost_per_unit,
            "total": self.total,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class ProjectFields:
    """Project attributes; every attribute is optional and ``None`` means absent."""

    project_name: str | None = None
    organization: str | None = None
    fiscal_year: int | None = None
    budget_requested: Amount | None = None
    budget_approved: Amount | None = None
    budget_average: Amount | None = None
    notes: str | None = None
    responsible_person: str | None = None
    advisor: str | None = None
    activity_type: str | None = None
    rationale: str | None = None
    objectives: tuple[str, ...] | None = None
    targets: str | None = None
    sdg_goals: tuple[str, ...] | None = None
    budget_breakdown: tuple[BudgetLineItem, ...] | None = None

    def overlay(self, other: ProjectFields) -> ProjectFields:
        """Return a copy where every attribute present on ``other`` wins."""

        present = other.as_payload()
        return replace(self, **present) if present else self

    def with_values(self, **changes: object) -> ProjectFields:
        unknown = sorted(set(changes) - FIELD_NAMES)
        if unknown:
            raise ValueError(f"Unknown project field(s): {', '.join(unknown)}")
        return replace(self, **changes)  # pyright: ignore[reportArgumentType]

    def as_payload(self, names: frozenset[str] | None = None) -> dict[str, object]:
        """Return the present attributes, optionally restricted to ``names``."""

        payload: dict[str, object] = {}
        for name in _ORDERED_FIELD_NAMES:
            if names is not None and name not in names:
                continue
            value = getattr(self, name)
            if value is not None:
                payload[name] = value
        return payload


_ORDERED_FIELD_NAMES: Final[tuple[str, ...]] = tuple(f.name for f in fields(ProjectFields))
FIELD_NAMES: Final[frozenset[str]] = frozenset(_ORDERED_FIELD_NAMES)

NARRATIVE_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "responsible_person",
        "advisor",
        "activity_type",
        "rationale",
        "objectives",
        "targets",
        "sdg_goals",
        "budget_breakdown",
    }
)
BUDGET_SHEET_FIELDS: Final[frozenset[str]] = frozenset(
    {"budget_requested", "budget_approved", "budget_average", "notes"}
)
