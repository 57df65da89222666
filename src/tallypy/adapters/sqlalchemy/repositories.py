"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from sqlalchemy import insert, select, update

from tallypy.adapters.sqlalchemy.mappings import (
    WRITABLE_PROJECT_COLUMNS,
    project_file_table,
    project_table,
)
from tallypy.domain.model import ProjectFile, ProjectRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from sqlalchemy import Row
    from sqlalchemy.orm import Session


def _project_values(values: Mapping[str, object]) -> dict[str, object]:
    unknown = sorted(set(values) - WRITABLE_PROJECT_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown project column(s): {', '.join(unknown)}")
    return dict(values)


def _to_file(row: Row[tuple[object, ...]]) -> ProjectFile:
    mapping = row._mapping  # noqa: SLF001
    return ProjectFile(
        id=mapping["id"],
        file_name=mapping["file_name"],
        file_url=mapping["file_url"],
        file_type=mapping["file_type"],
        category=mapping["category"],
    )


def _to_record(row: Row[tuple[object, ...]], files: Iterable[ProjectFile]) -> ProjectRecord:
    mapping = row._mapping  # noqa: SLF001
    return ProjectRecord(
        id=mapping["id"],
        name=mapping["project_name"],
        organization=mapping["organization"],
        budget_requested=mapping["budget_requested"],
        budget_approved=mapping["budget_approved"],
        files=tuple(files),
    )


class SqlAlchemyProjectRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self) -> list[ProjectRecord]:
        """Return every project, newest first, with its attachments."""

        rows = self.session.execute(select(project_table).order_by(project_table.c.id.desc()))
        files_by_project = self._files_by_project()
        return [_to_record(row, files_by_project.get(row.id, ())) for row in rows]

    def get(self, record_id: int) -> ProjectRecord | None:
        row = self.session.execute(
            select(project_table).where(project_table.c.id == record_id)
        ).one_or_none()
        if row is None:
            return None
        return _to_record(row, self._files_by_project(record_id).get(record_id, ()))

    def exists(self, record_id: int) -> bool:
        stmt = select(project_table.c.id).where(project_table.c.id == record_id)
        return self.session.execute(stmt).scalar_one_or_none() is not None

    def add(self, values: Mapping[str, object]) -> int:
        result = self.session.execute(insert(project_table).values(**_project_values(values)))
        return int(result.inserted_primary_key[0])

    def update(self, record_id: int, values: Mapping[str, object]) -> None:
        if not values:
            return
        self.session.execute(
            update(project_table)
            .where(project_table.c.id == record_id)
            .values(**_project_values(values))
        )

    def _files_by_project(self, record_id: int | None = None) -> dict[int, list[ProjectFile]]:
        stmt = select(project_file_table).order_by(project_file_table.c.id)
        if record_id is not None:
            stmt = stmt.where(project_file_table.c.project_id == record_id)
        grouped: dict[int, list[ProjectFile]] = defaultdict(list)
        for row in self.session.execute(stmt):
            grouped[row.project_id].append(_to_file(row))
        return grouped


class SqlAlchemyProjectFileRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(
        self,
        *,
        project_id: int,
        file_name: str,
        file_url: str,
        file_type: str | None,
        category: str | None,
    ) -> int:
        result = self.session.execute(
            insert(project_file_table)
            .values(
                project_id=project_id,
                file_name=file_name,
                file_url=file_url,
                file_type=file_type,
                category=category,
            )
        )
        return int(result.inserted_primary_key[0])
