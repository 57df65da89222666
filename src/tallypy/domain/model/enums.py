"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class SourceKind(StrEnum):
    """Upload collection a draft was extracted from."""

    PROJECT_DOCUMENT = "project_document"
    BUDGET_DOCUMENT = "budget_document"


class DraftStatus(StrEnum):
    NEW = "new"
    UPDATE = "update"
    LINKED = "linked"
    SUPERSEDED = "superseded"
