from __future__ import annotations

from datetime import date

import pytest

from tallypy.config import (
    ConfigurationError,
    MissingConfigurationError,
    current_fiscal_year,
    get_extraction_config,
    get_import_config,
    optional_env_int,
    require_env_vars,
)
from tallypy.config.extraction import GEMINI_BASE_URL, GEMINI_DEFAULT_MODEL


def test_require_env_vars_returns_stripped_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  value ")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_optional_env_int(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SOME_YEAR", raising=False)
    assert optional_env_int("SOME_YEAR") is None

    monkeypatch.setenv("SOME_YEAR", " 2567 ")
    assert optional_env_int("SOME_YEAR") == 2567

    monkeypatch.setenv("SOME_YEAR", "next year")
    with pytest.raises(ConfigurationError, match="SOME_YEAR"):
        optional_env_int("SOME_YEAR")


def test_fiscal_year_defaults_to_buddhist_era(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TALLYPY_FISCAL_YEAR", raising=False)

    assert current_fiscal_year(date(2025, 6, 1)) == 2568
    config = get_import_config(today=date(2025, 6, 1))
    assert config.fiscal_year == 2568
    assert config.attachment_category == "Project proposal (auto-import)"


def test_fiscal_year_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TALLYPY_FISCAL_YEAR", "2570")

    assert get_import_config(today=date(2025, 6, 1)).fiscal_year == 2570


def test_extraction_config_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    with pytest.raises(MissingConfigurationError, match="GEMINI_API_KEY"):
        get_extraction_config()


def test_extraction_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "secret")
    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    monkeypatch.delenv("GEMINI_BASE_URL", raising=False)

    config = get_extraction_config()

    assert config.api_key == "secret"
    assert config.model == GEMINI_DEFAULT_MODEL
    assert config.resilience.base_url == GEMINI_BASE_URL
    assert config.resilience.ratelimit is not None
    assert config.spreadsheet_max_lines == 100


def test_extraction_config_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "secret")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-pro")
    monkeypatch.setenv("GEMINI_BASE_URL", "https://proxy.example/v1beta/")

    config = get_extraction_config()

    assert config.model == "gemini-2.5-pro"
    assert config.resilience.base_url == "https://proxy.example/v1beta/"
