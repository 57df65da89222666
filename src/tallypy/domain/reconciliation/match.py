"""First-match-wins name matching against ordered candidates."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tallypy.domain.model import DraftStatus

from .normalize import is_matchable, keys_match, normalize

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from tallypy.domain.model import DraftRecord, ProjectRecord

log = logging.getLogger(__name__)


def first_match[T](
    name: str | None,
    candidates: Iterable[T],
    *,
    name_of: Callable[[T], str | None],
) -> T | None:
    """Return the first candidate whose name matches ``name``.

    Order of ``candidates`` is the tie-break; nothing is scored or ranked.
    """

    key = normalize(name)
    if not is_matchable(key):
        return None
    for candidate in candidates:
        if keys_match(key, normalize(name_of(candidate))):
            return candidate
    return None


def matched_record_note(record: ProjectRecord) -> str:
    return f'matches existing record "{record.name}"'


def match_existing(draft: DraftRecord, records: Sequence[ProjectRecord]) -> DraftRecord:
    """Flag ``draft`` as an update candidate when it names a persisted record."""

    record = first_match(draft.name, records, name_of=lambda item: item.name)
    if record is None:
        return draft.evolve(status=DraftStatus.NEW, linked_record_id=None)
    log.debug("Draft %r matches record %s (%r)", draft.name, record.id, record.name)
    return draft.evolve(
        status=DraftStatus.UPDATE,
        linked_record_id=record.id,
        note=matched_record_note(record),
    )


def match_all(
    drafts: Iterable[DraftRecord], records: Sequence[ProjectRecord]
) -> list[DraftRecord]:
    return [match_existing(draft, records) for draft in drafts]
