"""Client configuration with file, environment and keyword precedence.

This module handles all configuration for mangoclient:

* **ClientConfig** -- the pydantic model consumed by
  :class:`~mangoclient.api.Api` (credentials, base URL, API version,
  timeouts, debug logger and error handler).
* **Config files** -- JSON or YAML documents holding any subset of the
  ``ClientConfig`` fields. See :func:`load_config_file`.
* **Precedence resolution** -- :func:`resolve_config` merges keyword
  overrides, environment variables, the config file and the defaults into
  the final effective configuration.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars or files so that API keys never need to live in a config
  file.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mangoclient.exceptions import ConfigError

logger = logging.getLogger(__name__)

_PROJECT_CONFIG_FILENAME = "mangoclient.json"

DEFAULT_BASE_URL = "https://api.sandbox.mangopay.com"
DEFAULT_API_VERSION = "v2.01"

# Environment variable -> ClientConfig field
_ENV_VARS: dict[str, str] = {
    "MANGOPAY_CLIENT_ID": "client_id",
    "MANGOPAY_CLIENT_API_KEY": "client_api_key",
    "MANGOPAY_BASE_URL": "base_url",
    "MANGOPAY_API_VERSION": "api_version",
    "MANGOPAY_CONNECTION_TIMEOUT": "connection_timeout",
    "MANGOPAY_RESPONSE_TIMEOUT": "response_timeout",
    "MANGOPAY_DEBUG": "debug_mode",
}

_CREDENTIAL_FIELDS = ("client_id", "client_api_key")


def default_error_handler(message: str, data: Any) -> None:
    """Log an API error message; the dispatcher raises afterwards."""
    logger.error("Mangopay API error: %s", message or data)


def default_log_class(method: str, options: Any) -> None:
    """Write one line per outgoing call to stderr (``debug_mode`` only)."""
    from mangoclient.output import info

    info(f"[mangoclient] {method} {options!r}")


class ClientConfig(BaseModel):
    """Settings consumed by :class:`~mangoclient.api.Api`.

    Every field can be overridden at construction time. Timeouts are in
    seconds: ``connection_timeout`` bounds connection establishment and
    ``response_timeout`` bounds waiting for the response.

    Example::

        ClientConfig(client_id="sdk-unit-tests", client_api_key="secret")
    """

    model_config = ConfigDict(validate_assignment=True)

    client_id: str = ""
    client_api_key: str = Field(default="", repr=False)
    base_url: str = DEFAULT_BASE_URL
    api_version: str = DEFAULT_API_VERSION
    connection_timeout: float = Field(default=30.0, gt=0)
    response_timeout: float = Field(default=80.0, gt=0)
    debug_mode: bool = False
    log_class: Callable[[str, Any], None] = Field(
        default=default_log_class, exclude=True
    )
    error_handler: Callable[[str, Any], None] = Field(
        default=default_error_handler, exclude=True
    )


# --- Config files ---


def load_config_file(path: Path) -> dict[str, Any]:
    """Load a JSON or YAML config file into a plain dict.

    The format is chosen from the extension (``.yaml``/``.yml`` -> YAML,
    anything else -> JSON).

    Args:
        path: Path to the config file.

    Returns:
        The parsed mapping.

    Raises:
        ConfigError: If the file is missing, unreadable, malformed or does
            not contain a mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid config file at {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _default_config_path() -> Optional[Path]:
    """Return the config file selected by ``MANGOPAY_CONFIG`` or ``./mangoclient.json``."""
    env_path = os.environ.get("MANGOPAY_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    local = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if local.is_file():
        return local
    return None


def _env_overrides() -> dict[str, Any]:
    values: dict[str, Any] = {}
    for var, field_name in _ENV_VARS.items():
        value = os.environ.get(var)
        if value:
            values[field_name] = value
    return values


# --- Precedence resolution ---


def resolve_config(
    config_path: Optional[str | Path] = None,
    **overrides: Any,
) -> ClientConfig:
    """Resolve the client config with the full precedence chain.

    Precedence (high to low):
        1. Keyword ``overrides`` (values of ``None`` are ignored)
        2. Environment variables (``MANGOPAY_CLIENT_ID``, ...)
        3. Config file (``config_path``, ``$MANGOPAY_CONFIG`` or
           ``./mangoclient.json``)
        4. Defaults

    Credential fields may hold a source descriptor (``env:VAR`` or
    ``file:/path``) which is resolved via :func:`resolve_credential`.

    Returns:
        The validated :class:`ClientConfig`.

    Raises:
        ConfigError: If the file is invalid, a credential source cannot be
            resolved, or the merged values fail validation.
    """
    merged: dict[str, Any] = {}

    path = Path(config_path).expanduser() if config_path else _default_config_path()
    if path is not None:
        merged.update(load_config_file(path))

    merged.update(_env_overrides())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    for field_name in _CREDENTIAL_FIELDS:
        value = merged.get(field_name)
        if isinstance(value, str) and value.startswith(("env:", "file:")):
            merged[field_name] = resolve_credential(value)

    try:
        return ClientConfig.model_validate(merged)
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
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    raise ConfigError(f"Unknown credential source format: {source}")
