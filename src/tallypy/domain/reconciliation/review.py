"""Review queue: raw drafts plus an override overlay keyed by draft id.

The final view is always ``reconcile(raw)`` followed by the overlay. Overrides
therefore survive any later upload or recomputation, and a deleted draft is gone
from the raw set so no other pairing can bring it back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from tallypy.domain.model import FIELD_NAMES, DraftStatus

from .commit import creation_values
from .link import ReconciliationResult, reconcile

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from uuid import UUID

    from tallypy.domain.model import DraftRecord, ProjectRecord, UploadedFile
    from tallypy.domain.ports import ProjectStore

    from .commit import CreationDefaults

log = logging.getLogger(__name__)

NOTE_MANUAL_LINK: Final[str] = "linked manually"


class UnknownDraftError(KeyError):
    """Raised when a review action names a draft that is not in the current view."""

    def __init__(self, draft_id: UUID) -> None:
        super().__init__(draft_id)
        self.draft_id = draft_id


@dataclass(slots=True)
class ReviewQueue:
    _raw: list[DraftRecord] = field(default_factory=list)
    _files: dict[str, UploadedFile] = field(default_factory=dict)
    _edits: dict[UUID, dict[str, object]] = field(default_factory=dict)
    _links: dict[UUID, int] = field(default_factory=dict)

    # raw input -----------------------------------------------------------------

    def add(self, drafts: Iterable[DraftRecord]) -> None:
        self._raw.extend(drafts)

    def add_file(self, file: UploadedFile) -> None:
        """Keep the bytes of ``file`` only if a draft will attach it as its proposal."""

        if any(draft.proposal_file == file.name for draft in self._raw):
            self._files[file.name] = file
        else:
            log.debug("Not keeping %s; no draft attaches it", file.name)

    @property
    def raw_drafts(self) -> tuple[DraftRecord, ...]:
        return tuple(self._raw)

    @property
    def files(self) -> Mapping[str, UploadedFile]:
        return dict(self._files)

    def __len__(self) -> int:
        return len(self.drafts())

    # views ---------------------------------------------------------------------

    def reconcile(self) -> ReconciliationResult:
        return reconcile(self._raw)

    def drafts(self) -> list[DraftRecord]:
        """Return the final view with every override applied."""

        return [self._apply_overrides(draft) for draft in self.reconcile().drafts]

    def get(self, draft_id: UUID) -> DraftRecord:
        for draft in self.drafts():
            if draft.id == draft_id:
                return draft
        raise UnknownDraftError(draft_id)

    def link_candidates(self, records: Sequence[ProjectRecord]) -> list[ProjectRecord]:
        """Persisted records that have no attachment yet."""

        return [record for record in records if not record.has_files]

    # actions -------------------------------------------------------------------

    def edit(self, draft_id: UUID, **changes: object) -> DraftRecord:
        """Replace a subset of fields; matching and linking are not re-run."""

        unknown = sorted(set(changes) - FIELD_NAMES)
        if unknown:
            raise ValueError(f"Unknown project field(s): {', '.join(unknown)}")
        self.get(draft_id)
        self._edits.setdefault(draft_id, {}).update(changes)
        return self.get(draft_id)

    def delete(self, draft_id: UUID) -> None:
        """Remove a draft, and any proposal absorbed into it, from the raw set."""

        draft = self.get(draft_id)
        removed = {draft.id}
        if draft.absorbed_draft_id is not None:
            removed.add(draft.absorbed_draft_id)
        self._raw = [item for item in self._raw if item.id not in removed]
        for item_id in removed:
            self._edits.pop(item_id, None)
            self._links.pop(item_id, None)
        log.info("Deleted draft %r (%s)", draft.name, draft.source_file)

    def link_manually(self, draft_id: UUID, record_id: int) -> DraftRecord:
        self.get(draft_id)
        self._links[draft_id] = record_id
        log.info("Draft %s linked manually to record %s", draft_id, record_id)
        return self.get(draft_id)

    def promote_to_new(
        self,
        draft_id: UUID,
        store: ProjectStore,
        *,
        defaults: CreationDefaults,
        **overrides: object,
    ) -> int:
        """Create a record from the draft's fields and link the draft to it."""

        draft = self.get(draft_id)
        fields = draft.fields.with_values(**overrides) if overrides else draft.fields
        record_id = store.create(creation_values(fields, defaults))
        log.info("Created record %s for draft %r", record_id, fields.project_name)
        self.link_manually(draft_id, record_id)
        return record_id

    def clear_overrides(self, draft_id: UUID) -> DraftRecord:
        self._edits.pop(draft_id, None)
        self._links.pop(draft_id, None)
        return self.get(draft_id)

    def discard(self, draft_ids: Iterable[UUID]) -> None:
        """Drop committed drafts together with what they absorbed."""

        by_id = {draft.id: draft for draft in self.drafts()}
        removed: set[UUID] = set()
        for draft_id in draft_ids:
            removed.add(draft_id)
            draft = by_id.get(draft_id)
            if draft is not None and draft.absorbed_draft_id is not None:
                removed.add(draft.absorbed_draft_id)
        self._raw = [item for item in self._raw if item.id not in removed]
        for item_id in removed:
            self._edits.pop(item_id, None)
            self._links.pop(item_id, None)
        files_in_use = {draft.proposal_file for draft in self._raw}
        self._files = {name: file for name, file in self._files.items() if name in files_in_use}

    # overlay -------------------------------------------------------------------

    def _apply_overrides(self, draft: DraftRecord) -> DraftRecord:
        changes: dict[str, object] = {}
        if draft.absorbed_draft_id is not None:
            changes.update(self._edits.get(draft.absorbed_draft_id, {}))
        changes.update(self._edits.get(draft.id, {}))
        if changes:
            draft = draft.evolve(fields=draft.fields.with_values(**changes))

        record_id = self._links.get(draft.id)
        if record_id is None and draft.absorbed_draft_id is not None:
            record_id = self._links.get(draft.absorbed_draft_id)
        if record_id is not None:
            draft = draft.evolve(
                linked_record_id=record_id,
                status=DraftStatus.UPDATE,
                note=NOTE_MANUAL_LINK,
                manually_linked=True,
            )
        return draft
