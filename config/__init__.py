"""Configuration module for the steady runner."""
from config.models import (
    ExecutionConfig,
    ReportingConfig,
    SteadyConfig,
    WaitConfig,
    load_config,
)

__all__ = [
    "ExecutionConfig",
    "ReportingConfig",
    "SteadyConfig",
    "WaitConfig",
    "load_config",
]
