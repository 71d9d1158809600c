"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for apidex:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.apidex/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~apidex.models.GlobalConfig`
  JSON file storing defaults (spec source, search limit, output format).
* **Project config** -- an optional ``./apidex.json`` whose keys override
  the global config for one working directory.
* **Precedence resolution** -- :func:`resolve_config` merges project and
  global config; :func:`resolve_spec_source` picks the API description to
  load from CLI flag, environment variable, project config, and global
  config.

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

from apidex.exceptions import ConfigError
from apidex.models import GlobalConfig

_APP_NAME = "apidex"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "apidex.json"

SPEC_ENV_VAR = "APIDEX_SPEC"
"""Environment variable naming the spec source (file path, URL, or ``-``)."""


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/apidex/`` (default ``~/.config/apidex/``).
    On macOS/Windows: ``~/.apidex/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/apidex/`` (default ``~/.local/share/apidex/``).
    On macOS/Windows: ``~/.apidex/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up.
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
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        # Includes KeyboardInterrupt.
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~apidex.models.GlobalConfig`, or a default
        instance if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./apidex.json``.

    A repository typically pins ``default_spec`` there so that every
    contributor browses the same API description.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(cli_format: Optional[str] = None) -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (``cli_format``)
        2. Project config (``./apidex.json``)
        3. User config (``~/.config/apidex/config.json``)
        4. Defaults

    Raises:
        ConfigError: If either config file is invalid or the merged values
            fail validation.
    """
    global_cfg = load_global_config()

    project = load_project_config()
    if project:
        merged = global_cfg.model_dump()
        for key, value in project.items():
            if key == "output" and isinstance(value, dict):
                merged["output"].update(value)
            else:
                merged[key] = value
        try:
            global_cfg = GlobalConfig.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    if cli_format is not None:
        global_cfg.output.format = cli_format

    return global_cfg


def resolve_spec_source(
    cli_spec: Optional[str] = None,
    config: Optional[GlobalConfig] = None,
) -> str:
    """Pick the API description to load.

    Precedence (high to low):
        1. ``--spec`` CLI flag
        2. ``APIDEX_SPEC`` environment variable
        3. ``default_spec`` from project config, then global config (both
           already merged into *config* by :func:`resolve_config`)

    Args:
        cli_spec: Value of the ``--spec`` flag, if given.
        config: The resolved configuration; resolved here when omitted.

    Returns:
        A file path, URL, or ``-`` for stdin.

    Raises:
        ConfigError: If no source is configured anywhere.
    """
    if cli_spec:
        return cli_spec

    env_spec = os.environ.get(SPEC_ENV_VAR)
    if env_spec:
        return env_spec

    if config is None:
        config = resolve_config()
    if config.default_spec:
        return config.default_spec

    raise ConfigError(
        "No API description configured. Pass --spec <file-or-url>, set "
        f"{SPEC_ENV_VAR}, or run: apidex config set default_spec <file-or-url>"
    )
