"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .enums import DispatchMode, LogFormat, RegistrationPolicy


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class DispatchConfig(BaseModel):
    mode: DispatchMode = DispatchMode.SEQUENTIAL
    continue_on_error: bool = False  # Sequential mode only
    recipient_timeout_seconds: float | None = None  # Parallel mode only
    allow_duplicates: bool = True  # Store registrations may repeat a recipient


class RegistrationConfig(BaseModel):
    policy: RegistrationPolicy = RegistrationPolicy.MANY


class FactoryConfig(BaseModel):
    discriminator_field: str = "type"


class DemoConfig(BaseModel):
    alarm_threshold_celsius: float = 30.0
    sirens: list[str] = Field(default_factory=lambda: ["hallway", "office"])
    broken_sirens: list[str] = Field(default_factory=list)  # Always fail
    report_failures: bool = True


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: LogFormat = LogFormat.CONSOLE


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level composition settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    registration: RegistrationConfig = Field(default_factory=RegistrationConfig)
    factory: FactoryConfig = Field(default_factory=FactoryConfig)
    demo: DemoConfig = Field(default_factory=DemoConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "COMPOSITION_", "env_nested_delimiter": "__"}

    def validate_dispatch(self) -> None:
        """Reject dispatch settings that cannot be honoured."""
        from .errors import ConfigError

        timeout = self.dispatch.recipient_timeout_seconds
        if timeout is not None and timeout <= 0:
            raise ConfigError(
                f"recipient_timeout_seconds must be positive, got {timeout}"
            )
        if not self.factory.discriminator_field:
            raise ConfigError("factory.discriminator_field must not be empty")


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    if overrides:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value

    return Settings(**data)
