"""Pydantic models for the extraction service payloads.

The service answers free-form JSON; these models pin the fields the import
workflow relies on and coerce the usual deviations (blank strings, amounts with
separators or currency text, a string where a list was asked for).
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

EXTRACTION_SCHEMA_VERSION: Final[str] = "1"

_NON_NUMERIC = re.compile(r"[^\d.\-]")
_LIST_SPLIT = re.compile(r"\s*[\n;]\s*")


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _finite(value: Decimal) -> Decimal | None:
    return value if value.is_finite() else None


def _coerce_amount(value: object) -> object:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return _finite(value)
    if isinstance(value, int | float):
        return _finite(Decimal(str(value)))
    if isinstance(value, str):
        cleaned = _NON_NUMERIC.sub("", value)
        if cleaned in {"", "-", ".", "-."}:
            return None
        try:
            return Decimal(cleaned)
        except InvalidOperation:
            return None
    return None


def _coerce_text_list(value: object) -> object:
    if value is None:
        return []
    if isinstance(value, str):
        return [part for part in _LIST_SPLIT.split(value.strip()) if part]
    if isinstance(value, int | float):
        return [str(value)]
    if isinstance(value, list):
        items: list[str] = []
        for item in value:  # pyright: ignore[reportUnknownVariableType]
            if item is None:
                continue
            text = str(item).strip()  # pyright: ignore[reportUnknownArgumentType]
            if text:
                items.append(text)
        return items
    return value


def _coerce_object_list(value: object) -> object:
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        return [
            {"item": item} if isinstance(item, str) else item
            for item in value  # pyright: ignore[reportUnknownVariableType]
        ]
    return value


class ExtractionBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


class BudgetBreakdownPayload(ExtractionBaseModel):
    item: str | None = None
    amount: Decimal | None = None
    unit: str | None = None
    cost_per_unit: Decimal | None = None
    total: Decimal | None = None

    _normalize_text = field_validator("item", "unit", mode="before")(_blank_to_none)
    _normalize_amounts = field_validator("amount", "cost_per_unit", "total", mode="before")(
        _coerce_amount
    )


class ProjectPayload(ExtractionBaseModel):
    """One proposal document."""

    project_name: str | None = None
    organization: str | None = None
    budget_requested: Decimal | None = None
    responsible_person: str | None = None
    advisor: str | None = None
    activity_type: str | None = None
    rationale: str | None = None
    objectives: list[str] = Field(default_factory=list)
    targets: str | None = None
    sdg_goals: list[str] = Field(default_factory=list)
    budget_breakdown: list[BudgetBreakdownPayload] = Field(default_factory=list)
    notes: str | None = None

    _normalize_text = field_validator(
        "project_name",
        "organization",
        "responsible_person",
        "advisor",
        "activity_type",
        "rationale",
        "targets",
        "notes",
        mode="before",
    )(_blank_to_none)
    _normalize_amount = field_validator("budget_requested", mode="before")(_coerce_amount)
    _normalize_lists = field_validator("objectives", "sdg_goals", mode="before")(
        _coerce_text_list
    )
    _normalize_breakdown = field_validator("budget_breakdown", mode="before")(
        _coerce_object_list
    )


class BudgetRowPayload(ExtractionBaseModel):
    """One row of a budget approval sheet."""

    organization: str | None = None
    project_name: str | None = None
    fiscal_year: int | None = None
    budget_requested: Decimal | None = None
    budget_approved: Decimal | None = None
    budget_average: Decimal | None = None
    notes: str | None = None

    _normalize_text = field_validator("organization", "project_name", "notes", mode="before")(
        _blank_to_none
    )
    _normalize_amounts = field_validator(
        "budget_requested", "budget_approved", "budget_average", mode="before"
    )(_coerce_amount)

    @field_validator("fiscal_year", mode="before")
    @classmethod
    def _parse_year(cls, value: object) -> object:
        amount = _coerce_amount(value)
        if amount is None:
            return None
        return int(amount)  # pyright: ignore[reportArgumentType]


# generateContent envelope ------------------------------------------------------


class Part(ExtractionBaseModel):
    text: str | None = None


class Content(ExtractionBaseModel):
    parts: list[Part] = Field(default_factory=list)
    role: str | None = None


class Candidate(ExtractionBaseModel):
    content: Content | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")


class PromptFeedback(ExtractionBaseModel):
    block_reason: str | None = Field(default=None, alias="blockReason")


class GenerateContentResponse(ExtractionBaseModel):
    candidates: list[Candidate] = Field(default_factory=list)
    prompt_feedback: PromptFeedback | None = Field(default=None, alias="promptFeedback")

    @property
    def text(self) -> str:
        """Concatenated text of the first candidate."""

        if not self.candidates or self.candidates[0].content is None:
            return ""
        return "".join(part.text or "" for part in self.candidates[0].content.parts)


class ErrorDetail(ExtractionBaseModel):
    code: int | None = None
    message: str = ""
    status: str | None = None


class ErrorResponse(ExtractionBaseModel):
    error: ErrorDetail
