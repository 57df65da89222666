"""Extraction service adapter package."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .client import GeminiExtractor, parse_json_text, strip_code_fences
from .schema import (
    EXTRACTION_SCHEMA_VERSION,
    BudgetBreakdownPayload,
    BudgetRowPayload,
    GenerateContentResponse,
    ProjectPayload,
)
from .spreadsheet import UnsupportedSpreadsheetError, render_spreadsheet
from .uploads import SUPPORTED_EXTENSIONS, expand_archives, load_uploads

if TYPE_CHECKING:
    from tallypy.config import ExtractionConfig


def build_gemini_extractor(
    *, config: ExtractionConfig | None = None, fiscal_year: int | None = None
) -> GeminiExtractor:
    if config is None:
        return GeminiExtractor(fiscal_year=fiscal_year)
    return GeminiExtractor(config=config, fiscal_year=fiscal_year)


__all__ = [
    "EXTRACTION_SCHEMA_VERSION",
    "SUPPORTED_EXTENSIONS",
    "BudgetBreakdownPayload",
    "BudgetRowPayload",
    "GeminiExtractor",
    "GenerateContentResponse",
    "ProjectPayload",
    "UnsupportedSpreadsheetError",
    "build_gemini_extractor",
    "expand_archives",
    "load_uploads",
    "parse_json_text",
    "render_spreadsheet",
    "strip_code_fences",
]
