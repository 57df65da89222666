"""Repository ports used by the bundled project store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tallypy.domain.model import ProjectRecord


class ProjectRepository(Protocol):
    def list_all(self) -> list[ProjectRecord]: ...

    def get(self, record_id: int) -> ProjectRecord | None: ...

    def exists(self, record_id: int) -> bool: ...

    def add(self, values: Mapping[str, object]) -> int: ...

    def update(self, record_id: int, values: Mapping[str, object]) -> None: ...


class ProjectFileRepository(Protocol):
    def add(
        self,
        *,
        project_id: int,
        file_name: str,
        file_url: str,
        file_type: str | None,
        category: str | None,
    ) -> int: ...
