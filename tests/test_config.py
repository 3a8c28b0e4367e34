"""Tests for specmodel.config -- XDG paths, atomic writes, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from specmodel.config import (
    _atomic_write,
    get_config_dir,
    load_global_config,
    load_project_config,
    resolve_config,
    save_global_config,
)
from specmodel.exceptions import ConfigError
from specmodel.models import GlobalConfig, ValidationConfig, ValidationProblemSeverity


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestConfigDir:
    def test_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specmodel.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "specmodel"
        assert result.is_dir()

    def test_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("specmodel.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        assert get_config_dir() == custom / "specmodel"

    def test_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specmodel.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".specmodel"
        assert result.is_dir()


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "test.txt"
        _atomic_write(target, "hello world")
        assert target.read_text(encoding="utf-8") == "hello world"

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        target.write_text("old content", encoding="utf-8")
        _atomic_write(target, "new content")
        assert target.read_text(encoding="utf-8") == "new content"
        assert list(tmp_path.iterdir()) == [target]

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        with patch("specmodel.config.os.fsync", side_effect=OSError("disk error")):
            with pytest.raises(OSError, match="disk error"):
                _atomic_write(target, "will fail")
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Global and project config files
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config == GlobalConfig()
        assert config.validation.isolate_rule_failures is True
        assert config.output.format == "auto"

    def test_save_and_load(self, isolated_config: Path) -> None:
        config = GlobalConfig(
            validation=ValidationConfig(
                disabled_rules=["INF-003"],
                severity_overrides={"R-003": ValidationProblemSeverity.LOW},
            )
        )
        save_global_config(config)
        assert (isolated_config / "config" / "specmodel" / "config.json").is_file()
        assert load_global_config() == config

    def test_unknown_keys_are_preserved(self, isolated_config: Path) -> None:
        _write_json(
            isolated_config / "config" / "specmodel" / "config.json",
            {"output": {"format": "plain"}, "future_setting": 1},
        )
        config = load_global_config()
        assert config.output.format == "plain"
        assert config.model_extra == {"future_setting": 1}

    def test_invalid_json_raises(self, isolated_config: Path) -> None:
        path = isolated_config / "config" / "specmodel" / "config.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_severity_raises(self, isolated_config: Path) -> None:
        _write_json(
            isolated_config / "config" / "specmodel" / "config.json",
            {"validation": {"severity_overrides": {"R-003": "catastrophic"}}},
        )
        with pytest.raises(ConfigError):
            load_global_config()


class TestProjectConfig:
    def test_missing_returns_none(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_loads_object(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specmodel.json", {"validation": {"disabled_rules": ["ID-001"]}})
        assert load_project_config() == {"validation": {"disabled_rules": ["ID-001"]}}

    def test_non_object_raises(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specmodel.json", ["ID-001"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        assert resolve_config() == GlobalConfig()

    def test_project_layers_over_global(self, isolated_config: Path) -> None:
        save_global_config(
            GlobalConfig.model_validate(
                {"validation": {"remote_timeout": 3.0, "disabled_rules": ["INF-003"]}}
            )
        )
        _write_json(isolated_config / "specmodel.json", {"validation": {"disabled_rules": ["ID-001"]}})

        config = resolve_config()
        assert config.validation.remote_timeout == 3.0
        assert config.validation.disabled_rules == ["ID-001"]

    def test_invalid_project_values_raise(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specmodel.json", {"validation": {"remote_timeout": "soon"}})
        with pytest.raises(ConfigError, match="Invalid project config"):
            resolve_config()

    def test_environment_adds_disabled_rules(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_config / "specmodel.json", {"validation": {"disabled_rules": ["ID-001"]}})
        monkeypatch.setenv("SPECMODEL_DISABLED_RULES", "R-003, INF-003,")
        assert resolve_config().validation.disabled_rules == ["ID-001", "R-003", "INF-003"]

    def test_environment_format(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(isolated_config / "specmodel.json", {"output": {"format": "plain"}})
        monkeypatch.setenv("SPECMODEL_OUTPUT_FORMAT", "json")
        assert resolve_config().output.format == "json"

    def test_cli_wins(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECMODEL_OUTPUT_FORMAT", "json")
        monkeypatch.setenv("SPECMODEL_DISABLED_RULES", "R-003")
        config = resolve_config(
            cli_format="rich",
            cli_disabled_rules=["SCH-001"],
            cli_severity_overrides={"INF-001": "high"},
        )
        assert config.output.format == "rich"
        assert config.validation.disabled_rules == ["R-003", "SCH-001"]
        assert config.validation.severity_overrides == {"INF-001": ValidationProblemSeverity.HIGH}

    def test_unknown_cli_severity_raises(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="Unknown severity 'fatal'"):
            resolve_config(cli_severity_overrides={"R-003": "fatal"})
