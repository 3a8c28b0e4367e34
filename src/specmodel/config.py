"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for specmodel:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specmodel/`` on macOS and Windows. See :func:`get_config_dir`.
* **Global config** -- A single :class:`~specmodel.models.GlobalConfig`
  JSON file storing validation and output defaults. It is written by
  :func:`save_global_config`, which backs the ``specmodel config`` commands.
* **Project config** -- An optional ``./specmodel.json`` whose keys are
  layered over the global config (same shape, any subset).
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specmodel.exceptions import ConfigError
from specmodel.models import GlobalConfig, ValidationProblemSeverity

_APP_NAME = "specmodel"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specmodel.json"

ENV_DISABLED_RULES = "SPECMODEL_DISABLED_RULES"
ENV_OUTPUT_FORMAT = "SPECMODEL_OUTPUT_FORMAT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specmodel/`` (default ``~/.config/specmodel/``).
    On macOS/Windows: ``~/.specmodel/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~specmodel.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    _atomic_write(_global_config_path(), config.model_dump_json(indent=2))


# --- Project config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specmodel.json``.

    Project-local config sits between global config and environment variables
    in the precedence chain. It typically pins the rule severities a
    repository's API documents are held to.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Recursively layer *overlay* on top of *base* (mappings merge, other values replace)."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_format: Optional[str] = None,
    cli_disabled_rules: Optional[list[str]] = None,
    cli_severity_overrides: Optional[dict[str, str]] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_format``, ``cli_disabled_rules``, ``cli_severity_overrides``)
        2. Environment variables (``SPECMODEL_OUTPUT_FORMAT``, ``SPECMODEL_DISABLED_RULES``)
        3. Project config (``./specmodel.json``)
        4. User config (``~/.config/specmodel/config.json``)
        5. Defaults

    Disabled rules from the environment and CLI flags are added to those
    of the config files; every other setting is replaced by the
    higher-precedence layer.

    Returns:
        The effective :class:`~specmodel.models.GlobalConfig`.

    Raises:
        ConfigError: If any layer is malformed or names an unknown severity.
    """
    # 5 + 4. Load base global config (fills in defaults automatically)
    global_cfg = load_global_config()

    # 3. Layer in project-local config
    project = load_project_config()
    if project is not None:
        try:
            global_cfg = GlobalConfig.model_validate(
                _merge(global_cfg.model_dump(mode="json"), project)
            )
        except ValidationError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    validation = global_cfg.validation

    # 2. Environment variables
    env_disabled = os.environ.get(ENV_DISABLED_RULES)
    if env_disabled:
        validation.disabled_rules.extend(
            code.strip() for code in env_disabled.split(",") if code.strip()
        )
    env_format = os.environ.get(ENV_OUTPUT_FORMAT)
    if env_format:
        global_cfg.output.format = env_format

    # 1. CLI flags (highest precedence)
    if cli_disabled_rules:
        validation.disabled_rules.extend(cli_disabled_rules)
    if cli_severity_overrides:
        for code, severity in cli_severity_overrides.items():
            try:
                validation.severity_overrides[code] = ValidationProblemSeverity(severity)
            except ValueError:
                raise ConfigError(
                    f"Unknown severity '{severity}' for rule {code}. "
                    f"Expected one of: {', '.join(s.value for s in ValidationProblemSeverity)}"
                ) from None
    if cli_format is not None:
        global_cfg.output.format = cli_format

    return global_cfg
