"""Application configuration — qBittorrent credentials and server settings.

Values come from an optional YAML file and are overridden by environment
variables::

    qbit:
      base_url: http://localhost:8080
      username: admin
      password: ${QBIT_PASSWORD}
    server:
      port: 8000
      json_body_limit: 5mb
      environment: production
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, PositiveInt, ValidationError, field_validator

from qbit_mcp.errors import ConfigError

_SIZE_UNITS = {"b": 1, "kb": 1024, "mb": 1024**2, "gb": 1024**3}
_SIZE_PATTERN = re.compile(r"\s*(\d+)\s*([kmg]?b)?\s*")

# Environment variable -> (section, field)
_ENV_VARS: dict[str, tuple[str, str]] = {
    "QBIT_BASE_URL": ("qbit", "base_url"),
    "QBIT_USERNAME": ("qbit", "username"),
    "QBIT_PASSWORD": ("qbit", "password"),
    "QBIT_TIMEOUT": ("qbit", "timeout_ms"),
    "HOST": ("server", "host"),
    "PORT": ("server", "port"),
    "JSON_BODY_LIMIT": ("server", "json_body_limit"),
    "QBIT_MCP_ENV": ("server", "environment"),
}


class QBitSettings(BaseModel):
    """Connection settings for the qBittorrent WebUI."""

    base_url: str
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1)
    timeout_ms: PositiveInt = 10_000

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            msg = "base_url must start with http:// or https:// (e.g. http://localhost:8080)"
            raise ValueError(msg)
        return value.rstrip("/")

    @property
    def timeout(self) -> float:
        """Request timeout in seconds."""
        return self.timeout_ms / 1000


class ServerSettings(BaseModel):
    """HTTP server settings."""

    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0, lt=65536)
    json_body_limit: int = Field(default=5 * 1024**2, gt=0)
    environment: str = "development"

    @field_validator("json_body_limit", mode="before")
    @classmethod
    def _parse_size(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        match = _SIZE_PATTERN.fullmatch(value.lower())
        if match is None:
            msg = f"invalid size {value!r}, expected e.g. '5mb', '512kb' or a byte count"
            raise ValueError(msg)
        return int(match.group(1)) * _SIZE_UNITS[match.group(2) or "b"]

    @property
    def expose_errors(self) -> bool:
        """Whether error responses may carry internal diagnostic detail."""
        return self.environment.lower() != "production"


class AppConfig(BaseModel):
    """Top-level configuration."""

    qbit: QBitSettings
    server: ServerSettings = Field(default_factory=ServerSettings)


def load_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Build an :class:`AppConfig` from *path* (optional) and the environment.

    Raises:
        ConfigError: If the file cannot be read or parsed, or the merged
            values fail validation.
    """
    env = os.environ if environ is None else environ
    data = _read_yaml(path) if path is not None else {}

    for var, (section, key) in _ENV_VARS.items():
        value = env.get(var)
        if value:
            section_data = data.setdefault(section, {})
            if not isinstance(section_data, dict):
                raise ConfigError(f"Config section '{section}' must be a mapping")
            section_data[key] = value

    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Missing or invalid qBittorrent configuration:\n{exc}") from exc


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc

    try:
        data: Any = yaml.safe_load(os.path.expandvars(raw))
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parse error: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config YAML must be a mapping")
    return data
