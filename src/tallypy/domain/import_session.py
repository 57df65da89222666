"""Application service driving one import review session."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tallypy.domain.ports import ExtractionError
from tallypy.domain.reconciliation import (
    CommitAction,
    CommitReport,
    ReviewQueue,
    commit_drafts,
    match_all,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from tallypy.domain.model import DraftRecord, ProjectRecord, SourceKind, UploadedFile
    from tallypy.domain.ports import DocumentExtractor, ProjectStore
    from tallypy.domain.reconciliation import CreationDefaults

log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True, kw_only=True)
class FileReport:
    file_name: str
    kind: SourceKind
    drafts: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class UploadReport:
    """Per-file outcome of one upload batch."""

    files: list[FileReport] = field(default_factory=list)

    @property
    def drafts_added(self) -> int:
        return sum(item.drafts for item in self.files)

    @property
    def failed(self) -> list[FileReport]:
        return [item for item in self.files if not item.ok]


class ImportSession:
    """Upload, review and commit drafts against one snapshot of persisted records.

    The snapshot is fetched on first use and dropped after a commit that wrote
    everything, so the next upload matches against fresh records.
    """

    def __init__(
        self,
        *,
        extractor: DocumentExtractor,
        store: ProjectStore,
        defaults: CreationDefaults,
        attachment_category: str,
        queue: ReviewQueue | None = None,
    ) -> None:
        self._extractor = extractor
        self._store = store
        self.defaults = defaults
        self.attachment_category = attachment_category
        self.queue = queue or ReviewQueue()
        self._records: tuple[ProjectRecord, ...] | None = None

    @property
    def records(self) -> tuple[ProjectRecord, ...]:
        if self._records is None:
            self._records = tuple(self._store.list_all())
            log.info("Loaded %d persisted records", len(self._records))
        return self._records

    def refresh_records(self) -> tuple[ProjectRecord, ...]:
        self._records = None
        return self.records

    def upload(self, kind: SourceKind, files: Iterable[UploadedFile]) -> UploadReport:
        """Extract each file in turn; a failed file is logged and skipped."""

        report = UploadReport()
        for file in files:
            log.info("Extracting %s as %s", file.name, kind)
            try:
                drafts = self._extractor(file, kind)
            except ExtractionError as exc:
                log.error("Skipping %s: %s", file.name, exc)  # noqa: TRY400
                report.files.append(FileReport(file_name=file.name, kind=kind, error=str(exc)))
                continue

            self.queue.add(match_all(drafts, self.records))
            self.queue.add_file(file)
            log.info("Extracted %d draft(s) from %s", len(drafts), file.name)
            report.files.append(FileReport(file_name=file.name, kind=kind, drafts=len(drafts)))
        return report

    def review(self) -> list[DraftRecord]:
        return self.queue.drafts()

    def edit(self, draft_id: UUID, **changes: object) -> DraftRecord:
        return self.queue.edit(draft_id, **changes)

    def delete(self, draft_id: UUID) -> None:
        self.queue.delete(draft_id)

    def link_manually(self, draft_id: UUID, record_id: int) -> DraftRecord:
        return self.queue.link_manually(draft_id, record_id)

    def promote_to_new(self, draft_id: UUID, **overrides: object) -> int:
        record_id = self.queue.promote_to_new(
            draft_id, self._store, defaults=self.defaults, **overrides
        )
        self._records = None
        return record_id

    def clear_overrides(self, draft_id: UUID) -> DraftRecord:
        return self.queue.clear_overrides(draft_id)

    def link_candidates(self) -> list[ProjectRecord]:
        return self.queue.link_candidates(self.records)

    def commit(self, draft_ids: Sequence[UUID] | None = None) -> CommitReport:
        """Commit the current view (or the given drafts) and drop what was written.

        A draft whose record was created but whose attachment failed is linked to
        that record so a re-run updates instead of creating a duplicate.
        """

        drafts = self.queue.drafts()
        if draft_ids is not None:
            wanted = set(draft_ids)
            drafts = [draft for draft in drafts if draft.id in wanted]

        report = commit_drafts(
            drafts,
            self._store,
            files=self.queue.files,
            defaults=self.defaults,
            attachment_category=self.attachment_category,
        )

        self.queue.discard(outcome.draft_id for outcome in report.outcomes if outcome.ok)
        for outcome in report.failed:
            if outcome.action is CommitAction.CREATED and outcome.record_id is not None:
                self.queue.link_manually(outcome.draft_id, outcome.record_id)

        if report.session_ended:
            self._records = None
        return report
