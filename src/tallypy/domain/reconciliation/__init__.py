"""Import reconciliation: normalize, match, link, review and commit drafts."""

from __future__ import annotations

from .commit import (
    CommitAction,
    CommitOutcome,
    CommitReport,
    CommitStage,
    CreationDefaults,
    commit_drafts,
    creation_values,
    update_scope,
    update_values,
)
from .link import (
    MISMATCH_THRESHOLD,
    NOTE_LINKED,
    NOTE_MISMATCH,
    NOTE_NO_BUDGET,
    NOTE_NO_PROPOSAL,
    ReconciliationResult,
    integrity_verdict,
    merge_pair,
    reconcile,
)
from .match import first_match, match_all, match_existing
from .normalize import MIN_MATCH_KEY_LENGTH, keys_match, normalize
from .review import NOTE_MANUAL_LINK, ReviewQueue, UnknownDraftError

__all__ = [
    "MIN_MATCH_KEY_LENGTH",
    "MISMATCH_THRESHOLD",
    "NOTE_LINKED",
    "NOTE_MANUAL_LINK",
    "NOTE_MISMATCH",
    "NOTE_NO_BUDGET",
    "NOTE_NO_PROPOSAL",
    "CommitAction",
    "CommitOutcome",
    "CommitReport",
    "CommitStage",
    "CreationDefaults",
    "ReconciliationResult",
    "ReviewQueue",
    "UnknownDraftError",
    "commit_drafts",
    "creation_values",
    "first_match",
    "integrity_verdict",
    "keys_match",
    "match_all",
    "match_existing",
    "merge_pair",
    "normalize",
    "reconcile",
    "update_scope",
    "update_values",
]
