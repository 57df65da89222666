"""Shared fixtures for extraction adapter tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from tallypy.adapters.extraction import GeminiExtractor
from tallypy.adapters.http_resilience import ResilienceConfig, ResilientClient, RetryPolicy
from tallypy.config import ExtractionConfig

if TYPE_CHECKING:
    from collections.abc import Callable

    type Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def extraction_config() -> ExtractionConfig:
    return ExtractionConfig(
        api_key="test-key",
        model="test-model",
        resilience=ResilienceConfig(
            name="gemini-test",
            base_url="https://extraction.test/v1beta/",
            retry=RetryPolicy(total=0),
        ),
    )


@pytest.fixture
def make_extractor(
    extraction_config: ExtractionConfig,
) -> Callable[[Handler], GeminiExtractor]:
    def factory(handler: Handler) -> GeminiExtractor:
        transport = httpx.MockTransport(handler)
        return GeminiExtractor(
            config=extraction_config,
            client_factory=lambda config, limiter: ResilientClient(
                config, transport=transport, limiter=limiter
            ),
            fiscal_year=2568,
        )

    return factory
