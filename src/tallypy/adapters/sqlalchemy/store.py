"""Project store backed by SQLAlchemy rows and a local blob directory."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from datetime import UTC, datetime
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from tallypy.domain.ports import ProjectStore, ProjectStoreError

from .unit_of_work import SqlAlchemyProjectUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from tallypy.domain.model import ProjectRecord, UploadedFile
    from tallypy.domain.ports import ProjectUnitOfWork

log = getLogger(__name__)

type UnitOfWorkFactory = Callable[[], ProjectUnitOfWork]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SqlAlchemyProjectStore:
    """``ProjectStore`` writing rows through a unit of work and blobs under ``files_dir``.

    Blobs land at ``<files_dir>/<record id>/<epoch ms>_<token>.<ext>``.
    """

    def __init__(
        self,
        *,
        files_dir: Path,
        unit_of_work_factory: UnitOfWorkFactory = SqlAlchemyProjectUnitOfWork,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.files_dir = files_dir
        self._unit_of_work_factory = unit_of_work_factory
        self._clock = clock

    def list_all(self) -> Sequence[ProjectRecord]:
        try:
            with self._unit_of_work_factory() as uow:
                return uow.repositories.projects.list_all()
        except SQLAlchemyError as exc:
            raise ProjectStoreError(f"Could not list projects: {exc}") from exc

    def create(self, values: Mapping[str, object]) -> int:
        try:
            with self._unit_of_work_factory() as uow:
                record_id = uow.repositories.projects.add(values)
                uow.commit()
        except SQLAlchemyError as exc:
            raise ProjectStoreError(f"Could not create project: {exc}") from exc
        log.debug("Created project %s", record_id)
        return record_id

    def update(self, record_id: int, values: Mapping[str, object]) -> None:
        try:
            with self._unit_of_work_factory() as uow:
                projects = uow.repositories.projects
                if not projects.exists(record_id):
                    raise ProjectStoreError(
                        f"Project {record_id} does not exist", record_id=record_id
                    )
                projects.update(record_id, values)
                uow.commit()
        except SQLAlchemyError as exc:
            raise ProjectStoreError(
                f"Could not update project {record_id}: {exc}", record_id=record_id
            ) from exc

    def upload_file(self, record_id: int, file: UploadedFile, *, category: str) -> int:
        path = self._blob_path(record_id, file)
        try:
            with self._unit_of_work_factory() as uow:
                if not uow.repositories.projects.exists(record_id):
                    raise ProjectStoreError(
                        f"Project {record_id} does not exist", record_id=record_id
                    )
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(file.content)
                file_id = uow.repositories.files.add(
                    project_id=record_id,
                    file_name=file.name,
                    file_url=path.resolve().as_uri(),
                    file_type=file.mime_type,
                    category=category,
                )
                uow.commit()
        except (SQLAlchemyError, OSError) as exc:
            path.unlink(missing_ok=True)
            raise ProjectStoreError(
                f"Could not attach {file.name} to project {record_id}: {exc}",
                record_id=record_id,
            ) from exc
        log.info("Attached %s to project %s as file %s", file.name, record_id, file_id)
        return file_id

    def _blob_path(self, record_id: int, file: UploadedFile) -> Path:
        stamp = int(self._clock().timestamp() * 1000)
        suffix = f".{file.extension}" if file.extension else ""
        return self.files_dir / str(record_id) / f"{stamp}_{secrets.token_hex(4)}{suffix}"


if TYPE_CHECKING:
    _store_check: ProjectStore = SqlAlchemyProjectStore(files_dir=Path())
