"""Tests for settings and options loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from uxa.config import load_options, load_settings
from uxa.errors import MissingConfiguration
from uxa.schemas.config import REQUIRED_ENV_VARS, AuditOptions

FULL_ENV = {
    "AZURE_OPENAI_ENDPOINT": "https://example-resource.openai.azure.com",
    "AZURE_OPENAI_API_KEY": "secret",
    "AZURE_OPENAI_DEPLOYMENT": "gpt-4o",
    "AZURE_OPENAI_API_VERSION": "2024-08-01-preview",
}


class TestLoadSettings:
    def test_all_present(self) -> None:
        settings = load_settings(FULL_ENV)
        assert settings.endpoint == FULL_ENV["AZURE_OPENAI_ENDPOINT"]
        assert settings.deployment == "gpt-4o"
        assert settings.api_version == "2024-08-01-preview"
        assert "secret" not in repr(settings)

    @pytest.mark.parametrize("name", list(REQUIRED_ENV_VARS))
    def test_each_variable_is_required(self, name: str) -> None:
        env = {k: v for k, v in FULL_ENV.items() if k != name}
        with pytest.raises(MissingConfiguration) as info:
            load_settings(env)
        assert info.value.missing == [name]
        assert name in str(info.value)

    def test_blank_counts_as_missing(self) -> None:
        env = dict(FULL_ENV, AZURE_OPENAI_API_KEY="   ")
        with pytest.raises(MissingConfiguration) as info:
            load_settings(env)
        assert info.value.missing == ["AZURE_OPENAI_API_KEY"]

    def test_lists_every_missing_variable(self) -> None:
        with pytest.raises(MissingConfiguration) as info:
            load_settings({})
        assert info.value.missing == list(REQUIRED_ENV_VARS)

    def test_reads_process_environment(self, env_settings) -> None:
        settings = load_settings()
        assert settings.api_key == "test-key"


class TestLoadOptions:
    def test_defaults_without_file(self) -> None:
        opts = load_options(None)
        assert opts == AuditOptions()
        assert opts.navigation_timeout_ms == 30_000

    def test_load_valid_file(self, tmp_path: Path) -> None:
        cfg = tmp_path / "audit.yml"
        cfg.write_text(
            f"""\
output_directory: "{tmp_path / 'runs'}"
capture_timeout: 45
evaluate_timeout: 90.5
"""
        )
        opts = load_options(cfg)
        assert opts.output_directory == str(tmp_path / "runs")
        assert opts.capture_timeout == 45
        assert opts.evaluate_timeout == 90.5
        assert opts.inspect_timeout == AuditOptions().inspect_timeout

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        cfg = tmp_path / "empty.yml"
        cfg.write_text("")
        assert load_options(cfg) == AuditOptions()

    def test_file_not_found(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_options("/nonexistent/audit.yml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yml"
        bad.write_text("just a string")
        with pytest.raises(ValueError, match="YAML mapping"):
            load_options(bad)

    def test_rejects_non_positive_timeout(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yml"
        bad.write_text("capture_timeout: 0\n")
        with pytest.raises(ValidationError, match="capture_timeout"):
            load_options(bad)
