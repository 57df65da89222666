"""Instructions sent to the extraction service, one per upload collection."""

from __future__ import annotations

from typing import Final

from tallypy.domain.model import SourceKind

BUDGET_SHEET_PROMPT: Final[str] = """\
You are reading a budget approval sheet for student and campus projects.
Return ONLY a JSON array. Each element describes one project row:
{
  "organization": string | null,
  "project_name": string | null,
  "budget_requested": number | null,
  "budget_approved": number | null,
  "budget_average": number | null,
  "notes": string | null
}
Skip header rows and total or summary rows. Use null for anything not present.
Amounts are plain numbers without separators or currency symbols."""

PROJECT_DOCUMENT_PROMPT: Final[str] = """\
You are reading a project proposal document.
Return ONLY one JSON object with these keys:
{
  "project_name": string | null,
  "organization": string | null,
  "budget_requested": number | null,
  "responsible_person": string | null,
  "advisor": string | null,
  "activity_type": string | null,
  "rationale": string | null,
  "objectives": [string],
  "targets": string | null,
  "sdg_goals": [string],
  "budget_breakdown": [
    {"item": string, "amount": number | null, "unit": string | null,
     "cost_per_unit": number | null, "total": number | null}
  ]
}
Use null or an empty list for anything the document does not state.
Amounts are plain numbers without separators or currency symbols."""


def prompt_for(kind: SourceKind) -> str:
    if kind is SourceKind.BUDGET_DOCUMENT:
        return BUDGET_SHEET_PROMPT
    return PROJECT_DOCUMENT_PROMPT
