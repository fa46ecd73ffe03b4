"""Configuration resolution with precedence and credential sources.

This module turns the scattered places a deployment may configure a
client into a single :class:`~apiwire.models.ClientConfig`:

* **Precedence resolution** -- :func:`resolve_config` merges explicit
  arguments, environment variables, an optional JSON config file (or the
  project-local ``./apiwire.json``), and model defaults.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from environment variables or files so tokens never need to be
  hard-coded.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from apiwire.exceptions import ConfigError
from apiwire.models import ClientConfig

_PROJECT_CONFIG_FILENAME = "apiwire.json"

_ENV_BASE_URL = "APIWIRE_BASE_URL"
_ENV_TIMEOUT = "APIWIRE_TIMEOUT"
_ENV_VERIFY_SSL = "APIWIRE_VERIFY_SSL"
_ENV_MAX_AUTH_REFRESHES = "APIWIRE_MAX_AUTH_REFRESHES"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


# --- Config files ---


def load_config_file(path: Union[str, Path]) -> dict[str, Any]:
    """Load a JSON config file into a plain dict.

    Args:
        path: Path to the JSON file.

    Returns:
        The parsed JSON object.

    Raises:
        ConfigError: If the file is missing, unreadable, not valid JSON,
            or does not contain a JSON object.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid config file at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file at {path} must contain a JSON object")
    return data


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./apiwire.json``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a valid JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return load_config_file(path)


# --- Environment ---


def _env_overrides() -> dict[str, Any]:
    """Collect config values from ``APIWIRE_*`` environment variables."""
    data: dict[str, Any] = {}
    request: dict[str, Any] = {}

    base_url = os.environ.get(_ENV_BASE_URL)
    if base_url:
        data["base_url"] = base_url

    timeout = os.environ.get(_ENV_TIMEOUT)
    if timeout:
        try:
            request["timeout"] = float(timeout)
        except ValueError as exc:
            raise ConfigError(f"{_ENV_TIMEOUT} must be a number, got '{timeout}'") from exc

    verify = os.environ.get(_ENV_VERIFY_SSL)
    if verify:
        lowered = verify.lower()
        if lowered in _TRUE_VALUES:
            request["verify_ssl"] = True
        elif lowered in _FALSE_VALUES:
            request["verify_ssl"] = False
        else:
            raise ConfigError(f"{_ENV_VERIFY_SSL} must be a boolean, got '{verify}'")

    refreshes = os.environ.get(_ENV_MAX_AUTH_REFRESHES)
    if refreshes:
        if refreshes.lower() == "none":
            data["max_auth_refreshes"] = None
        else:
            try:
                data["max_auth_refreshes"] = int(refreshes)
            except ValueError as exc:
                raise ConfigError(
                    f"{_ENV_MAX_AUTH_REFRESHES} must be an integer or 'none', got '{refreshes}'"
                ) from exc

    if request:
        data["request"] = request
    return data


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge *overlay* into a copy of *base*, descending into nested dicts."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    base_url: Optional[str] = None,
    config_file: Optional[Union[str, Path]] = None,
    **overrides: Any,
) -> ClientConfig:
    """Resolve a :class:`ClientConfig` through the full precedence chain.

    Precedence (high to low):
        1. Explicit arguments (``base_url`` and keyword ``overrides`` such
           as ``headers=...`` or ``request={"timeout": 5}``)
        2. Environment variables (``APIWIRE_BASE_URL``, ``APIWIRE_TIMEOUT``,
           ``APIWIRE_VERIFY_SSL``, ``APIWIRE_MAX_AUTH_REFRESHES``)
        3. ``config_file`` if given, otherwise project config (``./apiwire.json``)
        4. Defaults

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If any layer is malformed or no base URL is found.
    """
    # 3. File layer
    if config_file is not None:
        data = load_config_file(config_file)
    else:
        data = load_project_config() or {}

    # 2. Environment
    data = _merge(data, _env_overrides())

    # 1. Explicit arguments
    explicit = {key: value for key, value in overrides.items() if value is not None}
    if "max_auth_refreshes" in overrides:
        explicit["max_auth_refreshes"] = overrides["max_auth_refreshes"]
    if base_url is not None:
        explicit["base_url"] = base_url
    data = _merge(data, explicit)

    if not data.get("base_url"):
        raise ConfigError(
            f"No base URL configured. Pass base_url, set {_ENV_BASE_URL}, "
            f"or add 'base_url' to {_PROJECT_CONFIG_FILENAME}"
        )

    try:
        return ClientConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid client configuration: {exc}") from exc


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace

    Args:
        source: The source descriptor string.

    Returns:
        The resolved credential string.

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        file_path = source[5:]
        path = Path(file_path).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    raise ConfigError(
        f"Unknown credential source '{source}'. Expected 'env:VAR' or 'file:/path'"
    )
