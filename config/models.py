"""Pydantic configuration models for the steady runner."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from exceptions import ConfigFileNotFoundError, ConfigurationError


# Load .env file if present
load_dotenv()


def _env_defaults(data: Any, env_mapping: dict[str, str]) -> Any:
    """Fill unset fields from environment variables."""
    if not isinstance(data, dict):
        return data
    for field_name, env_var in env_mapping.items():
        if field_name not in data or data[field_name] is None:
            env_value = os.getenv(env_var)
            if env_value:
                data[field_name] = env_value
    return data


class WaitConfig(BaseModel):
    """Element wait and polling configuration."""

    wait_in_seconds: float = Field(
        default=30,
        ge=0,
        description="Default timeout for every wait operation",
    )
    poll_interval: float = Field(
        default=0.25,
        gt=0.0,
        le=5.0,
        description="Seconds between two probes of the same condition",
    )
    not_moving_interval: float = Field(
        default=0.2,
        gt=0.0,
        le=5.0,
        description="Seconds between the two position samples of a not-moving check",
    )

    @model_validator(mode="before")
    @classmethod
    def load_from_env(cls, data: Any) -> Any:
        """Load values from environment variables if not explicitly set."""
        return _env_defaults(data, {"wait_in_seconds": "STEADY_WAIT_IN_SECONDS"})


class ExecutionConfig(BaseModel):
    """Suite execution configuration."""

    parallel_workers: int = Field(
        default=1,
        ge=1,
        le=16,
        description="Number of parallel test workers",
    )
    retry_budget: int = Field(
        default=0,
        ge=0,
        le=10,
        description="Extra attempts granted to a failing test",
    )
    unique_id: Optional[str] = Field(
        default=None,
        description="10-digit run id; generated when not set",
    )

    @field_validator("unique_id")
    @classmethod
    def validate_unique_id(cls, v: Optional[str]) -> Optional[str]:
        """Ensure a configured run id has exactly 10 digits."""
        if v is None:
            return v
        v = str(v).strip()
        if len(v) != 10 or not v.isdigit():
            raise ValueError(f"unique_id must be 10 digits, got {v!r}")
        return v

    @model_validator(mode="before")
    @classmethod
    def load_from_env(cls, data: Any) -> Any:
        """Load values from environment variables if not explicitly set."""
        return _env_defaults(
            data,
            {
                "parallel_workers": "STEADY_PARALLEL",
                "retry_budget": "STEADY_RETRIES",
                "unique_id": "STEADY_UNIQUE_ID",
            },
        )


class ReportingConfig(BaseModel):
    """Reporting and output configuration."""

    reports_folder: Path = Field(
        default=Path("./reports"),
        description="Directory for saving reports",
    )
    output_format: Literal["json", "junit", "all", "none"] = Field(
        default="junit",
        description="Suite report output format",
    )

    @field_validator("reports_folder", mode="before")
    @classmethod
    def convert_to_path(cls, v: Any) -> Path:
        """Convert string to Path."""
        if isinstance(v, str):
            return Path(v)
        return v


class SteadyConfig(BaseModel):
    """Root configuration model combining all config sections."""

    wait: WaitConfig = Field(default_factory=WaitConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)

    verbose: bool = Field(
        default=False,
        description="Enable verbose logging",
    )

    @classmethod
    def from_flat_dict(cls, data: dict[str, Any]) -> "SteadyConfig":
        """Create config from a flat, properties-style dictionary."""
        wait_keys = {"wait_in_seconds", "poll_interval", "not_moving_interval"}
        execution_keys = {"parallel_workers", "retry_budget", "unique_id"}
        reporting_keys = {"reports_folder", "output_format"}
        aliases = {
            "parallel": "parallel_workers",
            "retries": "retry_budget",
            "wait_seconds": "wait_in_seconds",
        }

        nested: dict[str, Any] = {
            "wait": {},
            "execution": {},
            "reporting": {},
        }

        for key, value in data.items():
            key = aliases.get(key, key)
            if key in wait_keys:
                nested["wait"][key] = value
            elif key in execution_keys:
                nested["execution"][key] = value
            elif key in reporting_keys:
                nested["reporting"][key] = value
            elif key == "verbose":
                nested["verbose"] = value

        return cls.model_validate(nested)


_FLAT_MARKERS = {"wait_in_seconds", "wait_seconds", "parallel", "parallel_workers", "retries", "retry_budget", "unique_id"}


def load_config(
    config_path: Optional[Path] = None,
    cli_overrides: Optional[dict[str, Any]] = None,
) -> SteadyConfig:
    """
    Load configuration from file with CLI overrides.

    Priority (highest to lowest):
    1. CLI arguments
    2. Config file
    3. Environment variables
    4. Defaults

    An explicitly given config path must exist; the default
    ``steady.json`` is optional.
    """
    config_data: dict[str, Any] = {}

    if config_path is None:
        config_path = Path("steady.json")
    elif not config_path.exists():
        raise ConfigFileNotFoundError(str(config_path))

    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                if config_path.suffix in {".yaml", ".yml"}:
                    config_data = yaml.safe_load(f) or {}
                else:
                    config_data = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Failed to read config file: {exc}", {"file_path": str(config_path)}) from exc

    if not isinstance(config_data, dict):
        raise ConfigurationError("Config file must contain a mapping", {"file_path": str(config_path)})

    is_flat = any(key in config_data for key in _FLAT_MARKERS)

    if is_flat:
        config = SteadyConfig.from_flat_dict(config_data)
    else:
        config = SteadyConfig.model_validate(config_data)

    if cli_overrides:
        config_dict = config.model_dump()
        _apply_overrides(config_dict, cli_overrides)
        config = SteadyConfig.model_validate(config_dict)

    return config


def _apply_overrides(config_dict: dict[str, Any], overrides: dict[str, Any]) -> None:
    """Apply CLI overrides to config dictionary."""
    override_mapping = {
        "wait_seconds": ("wait", "wait_in_seconds"),
        "parallel": ("execution", "parallel_workers"),
        "retries": ("execution", "retry_budget"),
        "unique_id": ("execution", "unique_id"),
        "reports_dir": ("reporting", "reports_folder"),
        "output_format": ("reporting", "output_format"),
        "verbose": ("verbose", None),
    }

    for key, value in overrides.items():
        if value is None:
            continue

        mapping = override_mapping.get(key)
        if mapping:
            section, field = mapping
            if field is None:
                config_dict[section] = value
            else:
                config_dict[section][field] = value
