"""Domain port definitions for adapters."""

from __future__ import annotations

from .extraction import DocumentExtractor, ExtractionError
from .persistence import ProjectFileRepository, ProjectRepository
from .store import ProjectStore, ProjectStoreError
from .unit_of_work import (
    ProjectRepositories,
    ProjectUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "DocumentExtractor",
    "ExtractionError",
    "ProjectFileRepository",
    "ProjectRepositories",
    "ProjectRepository",
    "ProjectStore",
    "ProjectStoreError",
    "ProjectUnitOfWork",
    "RepositoryCollection",
    "UnitOfWork",
]
