"""Domain model for the import workflow."""

from __future__ import annotations

from .draft import DraftRecord, IntegrityFlag, budget_draft, project_draft
from .enums import DraftStatus, SourceKind
from .fields import (
    BUDGET_SHEET_FIELDS,
    FIELD_NAMES,
    NARRATIVE_FIELDS,
    Amount,
    BudgetLineItem,
    ProjectFields,
)
from .records import ProjectFile, ProjectRecord, UploadedFile

__all__ = [
    "BUDGET_SHEET_FIELDS",
    "FIELD_NAMES",
    "NARRATIVE_FIELDS",
    "Amount",
    "BudgetLineItem",
    "DraftRecord",
    "DraftStatus",
    "IntegrityFlag",
    "ProjectFields",
    "ProjectFile",
    "ProjectRecord",
    "SourceKind",
    "UploadedFile",
    "budget_draft",
    "project_draft",
]
