"""Settings for the import workflow."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Final

from .env import optional_env_int

BUDDHIST_ERA_OFFSET: Final[int] = 543
DEFAULT_ATTACHMENT_CATEGORY: Final[str] = "Project proposal (auto-import)"


def current_fiscal_year(today: date | None = None) -> int:
    """Return the current Buddhist-era year used as the default fiscal year."""

    return (today or date.today()).year + BUDDHIST_ERA_OFFSET


@dataclass(frozen=True, slots=True)
class ImportConfig:
    fiscal_year: int
    attachment_category: str = DEFAULT_ATTACHMENT_CATEGORY


def get_import_config(*, today: date | None = None) -> ImportConfig:
    fiscal_year = optional_env_int("TALLYPY_FISCAL_YEAR")
    return ImportConfig(fiscal_year=fiscal_year or current_fiscal_year(today))
