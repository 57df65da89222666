"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from tallypy.adapters.extraction import build_gemini_extractor, load_uploads
from tallypy.adapters.sqlalchemy.store import SqlAlchemyProjectStore
from tallypy.adapters.sqlalchemy.unit_of_work import is_started, startup
from tallypy.config import get_import_config, get_storage_config
from tallypy.domain.import_session import ImportSession
from tallypy.domain.model import SourceKind
from tallypy.domain.reconciliation import CreationDefaults

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path

    from tallypy.config import ImportConfig
    from tallypy.domain.import_session import UploadReport
    from tallypy.domain.model import DraftRecord, ProjectRecord
    from tallypy.domain.ports import DocumentExtractor, ProjectStore
    from tallypy.domain.reconciliation import CommitReport

log = getLogger(__name__)


@dataclass(slots=True)
class ImportRunResult:
    """What one non-interactive import run did."""

    uploads: list[UploadReport] = field(default_factory=list)
    drafts: list[DraftRecord] = field(default_factory=list)
    created_records: list[int] = field(default_factory=list)
    commit: CommitReport | None = None


def build_project_store() -> SqlAlchemyProjectStore:
    if not is_started():
        startup()
    return SqlAlchemyProjectStore(files_dir=get_storage_config().files_dir())


def build_import_session(
    *,
    extractor: DocumentExtractor | None = None,
    store: ProjectStore | None = None,
    import_config: ImportConfig | None = None,
) -> ImportSession:
    config = import_config or get_import_config()
    return ImportSession(
        extractor=extractor or build_gemini_extractor(fiscal_year=config.fiscal_year),
        store=store or build_project_store(),
        defaults=CreationDefaults(fiscal_year=config.fiscal_year),
        attachment_category=config.attachment_category,
    )


def import_documents(
    *,
    project_paths: Sequence[Path] = (),
    budget_paths: Sequence[Path] = (),
    skip: Sequence[int] = (),
    links: Mapping[int, int] | None = None,
    promote: Sequence[int] = (),
    commit: bool = False,
    session: ImportSession | None = None,
) -> ImportRunResult:
    """Upload both collections, apply review actions by 1-based position, optionally commit.

    Positions refer to the review list produced after both uploads.
    """

    effective_session = session or build_import_session()
    result = ImportRunResult()

    if project_paths:
        result.uploads.append(
            effective_session.upload(SourceKind.PROJECT_DOCUMENT, load_uploads(project_paths))
        )
    if budget_paths:
        result.uploads.append(
            effective_session.upload(SourceKind.BUDGET_DOCUMENT, load_uploads(budget_paths))
        )

    drafts = effective_session.review()
    by_position = {index: draft.id for index, draft in enumerate(drafts, start=1)}
    referenced = [*skip, *(links or {}), *promote]
    unknown = sorted({position for position in referenced if position not in by_position})
    if unknown:
        raise ValueError(
            f"Unknown draft position(s): {', '.join(map(str, unknown))} "
            f"(review list has {len(drafts)} draft(s))"
        )

    for position, record_id in (links or {}).items():
        effective_session.link_manually(by_position[position], record_id)
    for position in promote:
        result.created_records.append(effective_session.promote_to_new(by_position[position]))
    for position in dict.fromkeys(skip):
        effective_session.delete(by_position[position])

    result.drafts = effective_session.review()
    log.info(
        "Review queue holds %d draft(s) from %d uploaded file(s)",
        len(result.drafts),
        sum(len(report.files) for report in result.uploads),
    )

    if commit:
        result.commit = effective_session.commit()
    return result


def list_projects(
    *, missing_files_only: bool = False, store: ProjectStore | None = None
) -> list[ProjectRecord]:
    records = list((store or build_project_store()).list_all())
    if missing_files_only:
        return [record for record in records if not record.has_files]
    return records
