"""Tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from colocated.config import Settings, get_settings, load_settings
from colocated.errors import ConfigError, ErrorCode


class TestSettings:
    """Tests for Settings defaults and validation."""

    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.production is False
        assert settings.dedupe_fragments is True
        assert settings.visibility_policy == "refcount"
        assert settings.types_dir is None
        assert settings.timeout == 30.0
        assert settings.log_level == "INFO"

    def test_log_level_is_normalised(self) -> None:
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_rejects_unknown_policy(self) -> None:
        with pytest.raises(ValueError):
            Settings(visibility_policy="sometimes")  # type: ignore[arg-type]

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(ValueError):
            Settings(timeout=0)

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COLOCATED_PRODUCTION", "1")
        monkeypatch.setenv("COLOCATED_VISIBILITY_POLICY", "unconditional")
        settings = Settings()
        assert settings.production is True
        assert settings.visibility_policy == "unconditional"


class TestLoadSettings:
    """Tests for load_settings."""

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "colocated.yaml"
        path.write_text("production: true\ndedupe_fragments: false\ntypes_dir: out\n")

        settings = load_settings(path)

        assert settings.production is True
        assert settings.dedupe_fragments is False
        assert settings.types_dir == Path("out")

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "absent.yaml")
        assert settings.production is False

    def test_environment_beats_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "colocated.yaml"
        path.write_text("timeout: 5\n")
        monkeypatch.setenv("COLOCATED_TIMEOUT", "12")

        assert load_settings(path).timeout == 12.0

    def test_overrides_beat_everything(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "colocated.yaml"
        path.write_text("timeout: 5\n")
        monkeypatch.setenv("COLOCATED_TIMEOUT", "12")

        assert load_settings(path, timeout=1.5).timeout == 1.5

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "colocated.yaml"
        path.write_text("production: [unclosed\n")
        with pytest.raises(ConfigError) as exc_info:
            load_settings(path)
        assert exc_info.value.error_code is ErrorCode.INVALID_CONFIG

    def test_non_mapping_file(self, tmp_path: Path) -> None:
        path = tmp_path / "colocated.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "colocated.yaml"
        path.write_text("log_level: loud\n")
        with pytest.raises(ConfigError):
            load_settings(path)


def test_get_settings_is_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_settings().production is False
    monkeypatch.setenv("COLOCATED_PRODUCTION", "true")
    assert get_settings().production is False

    get_settings.cache_clear()
    assert get_settings().production is True
