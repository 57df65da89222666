"""Comparison keys for project names.

Keys are only used for comparison; display names are never replaced by them.
"""

from __future__ import annotations

import re
from typing import Final

MIN_MATCH_KEY_LENGTH: Final[int] = 5

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = str.maketrans("", "", "-_.")


def normalize(name: str | None) -> str:
    """Lower-case ``name`` and drop whitespace, ``-``, ``_`` and ``.``.

    Total: ``None`` and blank names yield an empty key.
    """

    if not name:
        return ""
    return _WHITESPACE.sub("", name.lower()).translate(_PUNCTUATION)


def is_matchable(key: str) -> bool:
    """Whether a key is long enough to be matched at all."""

    return len(key) > MIN_MATCH_KEY_LENGTH


def keys_match(key: str, candidate_key: str) -> bool:
    """Containment either way, with the length floor applied to ``key``."""

    if not is_matchable(key) or not candidate_key:
        return False
    return candidate_key in key or key in candidate_key
