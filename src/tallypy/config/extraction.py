"""Document extraction service configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/"
GEMINI_DEFAULT_MODEL = "gemini-2.5-flash-lite"
GEMINI_TIMEOUT_SECONDS = 120.0
SPREADSHEET_MAX_LINES = 100


@dataclass(frozen=True)
class ExtractionConfig:
    """Holds extraction API configuration values."""

    api_key: str
    model: str
    resilience: ResilienceConfig
    thinking_budget: int = 0
    spreadsheet_max_lines: int = SPREADSHEET_MAX_LINES


def get_extraction_config(*, resilience: ResilienceConfig | None = None) -> ExtractionConfig:
    values = require_env_vars(("GEMINI_API_KEY",))
    model = os.getenv("GEMINI_MODEL", "").strip() or GEMINI_DEFAULT_MODEL
    base_url = os.getenv("GEMINI_BASE_URL", "").strip() or GEMINI_BASE_URL
    return ExtractionConfig(
        api_key=values["GEMINI_API_KEY"],
        model=model,
        resilience=resilience
        or ResilienceConfig(
            name="gemini",
            base_url=base_url,
            timeout_seconds=GEMINI_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=60.0),
        ),
    )
