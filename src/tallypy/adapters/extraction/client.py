"""HTTP client for a Gemini-style ``generateContent`` extraction API."""

from __future__ import annotations

import asyncio
import base64
import json
import mimetypes
import re
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, cast

import httpx
from pydantic import ValidationError

from tallypy.adapters.http_resilience import ResilienceConfig, ResilientClient, build_limiter
from tallypy.config.extraction import ExtractionConfig, get_extraction_config
from tallypy.domain.model import SourceKind
from tallypy.domain.ports import DocumentExtractor, ExtractionError

from .prompts import prompt_for
from .schema import (
    EXTRACTION_SCHEMA_VERSION,
    BudgetRowPayload,
    ErrorResponse,
    GenerateContentResponse,
    ProjectPayload,
)
from .spreadsheet import is_spreadsheet, render_spreadsheet
from .translator import is_empty_row, is_summary_row, parse_budget_row, parse_project_document

if TYPE_CHECKING:
    from collections.abc import Callable

    from aiolimiter import AsyncLimiter

    from tallypy.domain.model import DraftRecord, UploadedFile

log = getLogger(__name__)

_FENCE = re.compile(r"^\s*```(?:json|JSON)?\s*\n?(?P<body>.*?)\n?\s*```\s*$", re.DOTALL)
_DEFAULT_MIME_TYPE = "application/pdf"


def _default_client_factory(
    config: ResilienceConfig, limiter: AsyncLimiter | None
) -> ResilientClient:
    return ResilientClient(config, limiter=limiter)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""

    match = _FENCE.match(text)
    if match is None:
        return text.strip()
    return match.group("body").strip()


def parse_json_text(text: str, *, file_name: str | None = None) -> object:
    cleaned = strip_code_fences(text)
    if not cleaned:
        raise ExtractionError("Extraction service returned no text", file_name=file_name)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ExtractionError(
            f"Extraction response is not valid JSON: {exc.msg}", file_name=file_name
        ) from exc


def mime_type_of(file: UploadedFile) -> str:
    if file.mime_type:
        return file.mime_type
    guessed, _ = mimetypes.guess_type(file.name)
    return guessed or _DEFAULT_MIME_TYPE


@dataclass(slots=True)
class GeminiExtractor:
    """Turn uploaded files into drafts through the extraction API.

    One request per file; calls are never issued in parallel. Each call runs in
    its own event loop with a fresh client, so the rate limit lives on the
    extractor and is shared by every client it builds.
    """

    config: ExtractionConfig = field(default_factory=get_extraction_config)
    client_factory: Callable[[ResilienceConfig, AsyncLimiter | None], ResilientClient] = field(
        default=_default_client_factory
    )
    fiscal_year: int | None = None
    limiter: AsyncLimiter | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        self.limiter = build_limiter(self.config.resilience.ratelimit)

    def __call__(self, file: UploadedFile, kind: SourceKind) -> list[DraftRecord]:
        if kind is SourceKind.BUDGET_DOCUMENT:
            rows = self.extract_budget_rows(file)
            kept = [row for row in rows if not is_summary_row(row) and not is_empty_row(row)]
            if len(kept) != len(rows):
                log.info(
                    "Dropped %d summary/empty row(s) from %s", len(rows) - len(kept), file.name
                )
            return [
                parse_budget_row(row, source_file=file.name, fiscal_year=self.fiscal_year)
                for row in kept
            ]
        return [parse_project_document(self.extract_project(file), source_file=file.name)]

    def extract_budget_rows(self, file: UploadedFile) -> list[BudgetRowPayload]:
        payload = asyncio.run(self._extract_async(file, SourceKind.BUDGET_DOCUMENT))
        if isinstance(payload, dict):
            payload = [payload]
        if not isinstance(payload, list):
            raise ExtractionError(
                "Expected a JSON array of budget rows", file_name=file.name
            )
        try:
            return [
                BudgetRowPayload.model_validate(item)
                for item in cast(list[object], payload)
            ]
        except ValidationError as exc:
            raise ExtractionError(
                f"Budget rows do not match the expected schema: {exc.error_count()} error(s)",
                file_name=file.name,
            ) from exc

    def extract_project(self, file: UploadedFile) -> ProjectPayload:
        payload = asyncio.run(self._extract_async(file, SourceKind.PROJECT_DOCUMENT))
        if isinstance(payload, list):
            items = cast(list[object], payload)
            if not items:
                raise ExtractionError("Extraction returned an empty list", file_name=file.name)
            payload = items[0]
        try:
            return ProjectPayload.model_validate(payload)
        except ValidationError as exc:
            raise ExtractionError(
                f"Project document does not match the expected schema: "
                f"{exc.error_count()} error(s)",
                file_name=file.name,
            ) from exc

    def build_request(self, file: UploadedFile, kind: SourceKind) -> dict[str, object]:
        prompt = prompt_for(kind)
        if is_spreadsheet(file):
            table = render_spreadsheet(file, max_lines=self.config.spreadsheet_max_lines)
            parts: list[dict[str, object]] = [{"text": f"{prompt}\n\nCSV data:\n{table}"}]
        else:
            parts = [
                {"text": prompt},
                {
                    "inline_data": {
                        "mime_type": mime_type_of(file),
                        "data": base64.b64encode(file.content).decode("ascii"),
                    }
                },
            ]
        generation_config: dict[str, object] = {
            "responseMimeType": "application/json",
            "temperature": 0,
            "thinkingConfig": {"thinkingBudget": self.config.thinking_budget},
        }
        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": generation_config,
        }

    async def _extract_async(self, file: UploadedFile, kind: SourceKind) -> object:
        body = self.build_request(file, kind)
        log.debug(
            "Requesting %s extraction of %s (schema v%s)",
            kind,
            file.name,
            EXTRACTION_SCHEMA_VERSION,
        )
        async with self.client_factory(self.config.resilience, self.limiter) as client:
            response = await self._perform_request(client=client, body=body, file=file)
        return parse_json_text(response.text, file_name=file.name)

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        body: dict[str, object],
        file: UploadedFile,
    ) -> GenerateContentResponse:
        url = f"models/{self.config.model}:generateContent"
        try:
            response = await client.post(
                url, json=body, headers={"x-goog-api-key": self.config.api_key}
            )
        except httpx.HTTPError as exc:
            raise ExtractionError(
                f"Extraction request failed: {exc}", file_name=file.name
            ) from exc

        if response.is_error:
            message = _error_message(response)
            log.error(
                "Extraction API error %s for %s: %s", response.status_code, file.name, message
            )
            raise ExtractionError(
                f"Extraction service returned {response.status_code}: {message}",
                file_name=file.name,
            )

        try:
            result = GenerateContentResponse.model_validate(response.json())
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ExtractionError(
                "Unexpected extraction response payload", file_name=file.name
            ) from exc

        if result.prompt_feedback is not None and result.prompt_feedback.block_reason:
            raise ExtractionError(
                f"Extraction blocked: {result.prompt_feedback.block_reason}", file_name=file.name
            )
        return result


def _error_message(response: httpx.Response) -> str:
    try:
        return ErrorResponse.model_validate(response.json()).error.message or response.reason_phrase
    except (json.JSONDecodeError, ValidationError):
        return response.reason_phrase


if TYPE_CHECKING:
    _extractor_check: DocumentExtractor = GeminiExtractor()
