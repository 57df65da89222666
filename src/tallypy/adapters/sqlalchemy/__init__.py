"""SQLAlchemy adapter package for tallypy."""

from __future__ import annotations

from .mappings import (
    BudgetBreakdownType,
    TextListType,
    metadata,
    project_file_table,
    project_table,
)
from .repositories import SqlAlchemyProjectFileRepository, SqlAlchemyProjectRepository

__all__ = [
    "BudgetBreakdownType",
    "SqlAlchemyProjectFileRepository",
    "SqlAlchemyProjectRepository",
    "TextListType",
    "metadata",
    "project_file_table",
    "project_table",
]
