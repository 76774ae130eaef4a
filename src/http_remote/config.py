"""Configuration management for http-remote.

Implements multi-level configuration with precedence:
1. Environment variables (HTTP_REMOTE_* prefix, ``__`` for nesting)
2. Explicit config file (``--config``)
3. Project config (./.http-remote.yaml)
4. Global config (~/.http-remote/config.yaml)
5. Built-in defaults (lowest priority)
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

GLOBAL_CONFIG_PATH = Path.home() / ".http-remote" / "config.yaml"
PROJECT_CONFIG_NAME = ".http-remote.yaml"

_ENV_REFERENCE = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)\}")


class RemoteConfig(BaseModel):
    """Remote endpoint configuration."""

    base_url: str = Field(default="http://localhost:8001")
    endpoint: str = Field(default="/api")
    timeout: int = Field(default=30, ge=1, le=300)
    verify_ssl: bool = True
    serial: bool = True
    csrf_token: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate and normalize base URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not v:
            raise ValueError("endpoint cannot be empty")
        return v


class OutputConfig(BaseModel):
    """Output formatting configuration."""

    format: Literal["json", "table"] = "table"
    color: bool = True


class Config(BaseSettings):
    """Complete http-remote configuration.

    Environment variables:
    - HTTP_REMOTE_REMOTE__BASE_URL: Server base URL
    - HTTP_REMOTE_REMOTE__ENDPOINT: Remote endpoint path
    - HTTP_REMOTE_REMOTE__TIMEOUT: Request timeout in seconds
    - HTTP_REMOTE_REMOTE__CSRF_TOKEN: CSRF token header value
    - HTTP_REMOTE_OUTPUT__FORMAT: Output format (json/table)

    Example:
        >>> config = Config.load(skip_global=True, skip_project=True)
        >>> print(config.remote.base_url)
        'http://localhost:8001'
    """

    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    model_config = SettingsConfigDict(
        env_prefix="HTTP_REMOTE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # File values arrive as init kwargs; environment must win over them.
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        skip_global: bool = False,
        skip_project: bool = False,
    ) -> Config:
        """Load configuration with precedence: env > file > project > global > defaults.

        An explicit ``config_path`` replaces the project file; it does not
        layer on top of it.

        Raises:
            ValueError: If a config file is missing or invalid
        """
        if config_path is not None and not config_path.exists():
            raise ValueError(f"Config file not found: {config_path}")

        layers: list[Path] = []
        if not skip_global:
            layers.append(GLOBAL_CONFIG_PATH)
        if config_path is not None:
            layers.append(config_path)
        elif not skip_project:
            layers.append(Path.cwd() / PROJECT_CONFIG_NAME)

        merged: dict[str, Any] = {}
        for layer in layers:
            if layer.exists():
                merged = _merge(merged, _read_yaml(layer))

        try:
            return cls(**_expand_env(merged))
        except Exception as e:
            raise ValueError(f"Invalid configuration: {e}") from e

    @property
    def remote_url(self) -> str:
        """Absolute URL of the remote endpoint."""
        endpoint = self.remote.endpoint
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.remote.base_url}/{endpoint.lstrip('/')}"

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()

    def to_yaml(self) -> str:
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    @classmethod
    def get_template(cls) -> str:
        """Get configuration file template.

        Returns:
            YAML template with comments
        """
        return """# http-remote configuration

# Remote endpoint
remote:
  base_url: http://localhost:8001
  endpoint: /api
  timeout: 30
  verify_ssl: true
  serial: true  # callers should queue requests to this remote
  # csrf_token: ${HTTP_REMOTE_CSRF_TOKEN}
  headers: {}

# Output preferences
output:
  format: table  # json | table
  color: true
"""

    def validate_config(self) -> list[str]:
        """Validate configuration and return any warnings.

        Returns:
            List of validation warnings (empty if valid)
        """
        warnings: list[str] = []

        if not self.remote.verify_ssl and self.remote.base_url.startswith("https://"):
            warnings.append(
                "SSL verification is disabled for HTTPS URL. "
                "This is insecure and not recommended for production."
            )

        if self.remote.csrf_token and self.remote.csrf_token.startswith("${"):
            warnings.append(
                f"CSRF token references an unset environment variable "
                f"({self.remote.csrf_token})."
            )

        if self.remote.timeout < 5:
            warnings.append(
                f"Remote timeout is very low ({self.remote.timeout}s). "
                "This may cause frequent timeouts."
            )

        if not self.remote.serial:
            warnings.append(
                "Remote is not serial: callers may dispatch concurrent requests."
            )

        return warnings


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read one YAML layer; non-mapping documents count as empty."""
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Failed to read {path}: {e}") from e
    return data if isinstance(data, dict) else {}


def _expand_env(value: Any) -> Any:
    """Replace ${VAR} references in strings; unset variables stay as written."""
    if isinstance(value, dict):
        return {key: _expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, str):
        return _ENV_REFERENCE.sub(lambda m: os.getenv(m.group(1), m.group(0)), value)
    return value


def _merge(lower: dict[str, Any], upper: dict[str, Any]) -> dict[str, Any]:
    merged = dict(lower)
    for key, value in upper.items():
        below = merged.get(key)
        if isinstance(below, dict) and isinstance(value, dict):
            value = _merge(below, value)
        merged[key] = value
    return merged
