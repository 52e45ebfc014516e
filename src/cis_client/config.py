"""Settings loading with XDG paths, JSON/YAML files, and environment overrides.

This module handles all persistent configuration for cis_client:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.cis-client/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Settings files** -- a single :class:`~cis_client.models.CisSettings`
  document in JSON or YAML, loaded by :func:`load_settings`.
* **Environment overrides** -- ``CIS_*`` variables replace individual
  fields (:func:`apply_env_overrides`), so secrets never need to live in
  the file.
* **Precedence resolution** -- :func:`resolve_settings` picks the settings
  file from the CLI flag, ``CIS_CLIENT_CONFIG``, the working directory,
  or the user config directory.
* **Credential resolution** -- :func:`resolve_credential` expands
  ``env:VAR`` and ``file:/path`` indirections for the client secret.
"""

from __future__ import annotations

import copy
import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from cis_client.exceptions import ConfigError
from cis_client.models import CisSettings

_APP_NAME = "cis-client"
_SETTINGS_STEM = "settings"
_PROJECT_SETTINGS_STEM = "cis-client"
_SETTINGS_SUFFIXES = (".json", ".yaml", ".yml")

CONFIG_ENV_VAR = "CIS_CLIENT_CONFIG"
"""Environment variable naming the settings file to load."""

ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "CIS_CLIENT_ID": ("client_config", "client_id"),
    "CIS_CLIENT_SECRET": ("client_config", "client_secret"),
    "CIS_AUDIENCE": ("client_config", "audience"),
    "CIS_TOKEN_ENDPOINT": ("client_config", "token_endpoint"),
    "CIS_SCOPES": ("client_config", "scopes"),
    "CIS_PERSON_API_USER_ENDPOINT": ("person_api_user_endpoint",),
    "CIS_CHANGE_API_USER_ENDPOINT": ("change_api_user_endpoint",),
}
"""Environment variables that override individual settings fields."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory layout (Linux/BSD)."""
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

    On Linux/BSD: ``$XDG_CONFIG_HOME/cis-client/`` (default ``~/.config/cis-client/``).
    On macOS/Windows: ``~/.cis-client/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory, creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/cis-client/`` (default ``~/.local/share/cis-client/``).
    On macOS/Windows: ``~/.cis-client/``, shared with the config directory.
    Crash logs go to its ``logs/`` subdirectory.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Parsing ---


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse settings content as JSON or YAML.

    Tries JSON first (unless hinted as YAML), then YAML.

    Raises:
        ConfigError: If the content is neither, or is not a mapping.
    """
    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise ConfigError(f"Invalid JSON: {exc}") from exc
        else:
            if not isinstance(result, dict):
                raise ConfigError(
                    f"Settings must be a JSON/YAML object (got {type(result).__name__})"
                )
            return result

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse settings as JSON or YAML: {exc}") from exc
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise ConfigError(f"Settings must be a JSON/YAML object (got {kind})")
    return result


def apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of raw settings *data* with ``CIS_*`` environment overrides applied.

    Args:
        data: Raw settings mapping as read from disk (may be empty).

    Returns:
        A new mapping; *data* is left untouched.
    """
    merged = copy.deepcopy(data)
    for var, keys in ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if value is None:
            continue
        target = merged
        for key in keys[:-1]:
            if not isinstance(target.get(key), dict):
                target[key] = {}
            target = target[key]
        target[keys[-1]] = value
    return merged


def resolve_credential(value: str) -> str:
    """Expand a credential indirection.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - anything else -- returned verbatim

    Raises:
        ConfigError: If the referenced variable or file does not exist.
    """
    if value.startswith("env:"):
        var_name = value[4:]
        resolved = os.environ.get(var_name)
        if resolved is None:
            raise ConfigError(f"Environment variable '{var_name}' is not set (source: {value})")
        return resolved

    if value.startswith("file:"):
        path = Path(value[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {value})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    return value


def settings_from_dict(data: dict[str, Any], source: str = "settings") -> CisSettings:
    """Validate raw settings, applying env overrides and resolving the client secret.

    Raises:
        ConfigError: If required fields are missing or invalid.
    """
    merged = apply_env_overrides(data)
    try:
        settings = CisSettings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in {source}: {exc}") from exc

    client_config = settings.client_config
    secret = resolve_credential(client_config.client_secret)
    if secret != client_config.client_secret:
        settings = settings.model_copy(
            update={"client_config": client_config.model_copy(update={"client_secret": secret})}
        )
    return settings


def load_settings(path: str | Path) -> CisSettings:
    """Load and validate settings from a JSON or YAML file.

    Args:
        path: Settings file.  ``.json``, ``.yaml`` and ``.yml`` select the
            parser; other extensions are sniffed.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ConfigError(f"Settings file not found: {file_path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read settings file {file_path}: {exc}") from exc

    suffix = file_path.suffix.lower()
    hint = "json" if suffix == ".json" else "yaml" if suffix in (".yaml", ".yml") else ""
    try:
        data = _parse_content(content, hint=hint)
    except ConfigError as exc:
        raise ConfigError(f"Invalid settings file {file_path}: {exc}") from exc
    return settings_from_dict(data, source=str(file_path))


def _first_existing(directory: Path, stem: str) -> Optional[Path]:
    for suffix in _SETTINGS_SUFFIXES:
        candidate = directory / f"{stem}{suffix}"
        if candidate.is_file():
            return candidate
    return None


def find_settings_file(cli_path: Optional[str] = None) -> Optional[Path]:
    """Locate the settings file following the precedence chain.

    Precedence (high to low):
        1. ``cli_path`` (``--config`` flag)
        2. ``CIS_CLIENT_CONFIG`` environment variable
        3. ``./cis-client.{json,yaml,yml}`` in the working directory
        4. ``<config_dir>/settings.{json,yaml,yml}``

    Returns:
        The path to load, or ``None`` when no candidate exists.  Explicit
        paths from 1 and 2 are returned even if missing so that
        :func:`load_settings` reports them.
    """
    if cli_path:
        return Path(cli_path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    project = _first_existing(Path.cwd(), _PROJECT_SETTINGS_STEM)
    if project is not None:
        return project
    return _first_existing(get_config_dir(), _SETTINGS_STEM)


def resolve_settings(cli_path: Optional[str] = None) -> CisSettings:
    """Find and load the effective settings.

    When no settings file exists, settings are built from ``CIS_*``
    environment variables alone.

    Raises:
        ConfigError: If the chosen file is invalid, or no file exists and the
            environment does not supply every required field.
    """
    path = find_settings_file(cli_path)
    if path is not None:
        return load_settings(path)
    return settings_from_dict({}, source="environment")
