"""Core harness building blocks."""

from __future__ import annotations

from dbsmoke.core.config import ConfigLoader, HarnessConfig
from dbsmoke.core.env_file import EnvFile
from dbsmoke.core.models import Credentials, Lifecycle, Scenario, ScenarioContext
from dbsmoke.core.waiter import Waiter

__all__ = [
    "ConfigLoader",
    "Credentials",
    "EnvFile",
    "HarnessConfig",
    "Lifecycle",
    "Scenario",
    "ScenarioContext",
    "Waiter",
]
