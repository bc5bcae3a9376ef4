"""Harness settings: YAML file, DBSMOKE_* overrides and validation."""

import copy
import logging
import os
import tempfile
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml
from omegaconf import OmegaConf
from omegaconf.errors import InterpolationResolutionError

from dbsmoke.constants import (
    CONTAINER_PORT,
    DEFAULT_CONTAINER_NAME,
    DEFAULT_ENV_FILE,
    DEFAULT_HOST,
    DEFAULT_HOST_PORT,
    DEFAULT_IMAGE,
    DEFAULT_MYSQL_BINARY,
    QUERY_TIMEOUT_SECONDS,
    READY_INTERVAL_SECONDS,
    READY_MAX_ATTEMPTS,
    SETTLE_SECONDS,
)

logger = logging.getLogger(__name__)

ENV_OVERRIDES = {
    "DBSMOKE_IMAGE": "image",
    "DBSMOKE_CONTAINER_NAME": "container_name",
    "DBSMOKE_HOST": "host",
    "DBSMOKE_HOST_PORT": "host_port",
    "DBSMOKE_ENV_FILE": "env_file",
    "DBSMOKE_VOLUME_ROOT": "volume_root",
    "DBSMOKE_MYSQL_BINARY": "mysql_binary",
}


@dataclass(frozen=True)
class HarnessConfig:
    """Resolved harness settings shared by every scenario.

    Attributes
    ----------
    image : str
        Container image under test
    container_name : str
        Logical name of the single owned container
    host : str
        Address the database client connects to
    host_port : int
        Host port published for the database
    container_port : int
        Database port inside the container
    env_file : str
        Path of the configuration sink
    volume_root : str
        Directory in which persistent volume directories are created
    ready_attempts : int
        Readiness checks before timing out
    ready_interval : float
        Seconds between readiness checks
    settle_seconds : float
        Pause after the daemon start marker for the denied-host check
    query_timeout : int
        Seconds allowed for a single client invocation
    mysql_binary : str
        Database client executable
    """

    image: str = DEFAULT_IMAGE
    container_name: str = DEFAULT_CONTAINER_NAME
    host: str = DEFAULT_HOST
    host_port: int = DEFAULT_HOST_PORT
    container_port: int = CONTAINER_PORT
    env_file: str = DEFAULT_ENV_FILE
    volume_root: str = tempfile.gettempdir()
    ready_attempts: int = READY_MAX_ATTEMPTS
    ready_interval: float = READY_INTERVAL_SECONDS
    settle_seconds: float = SETTLE_SECONDS
    query_timeout: int = QUERY_TIMEOUT_SECONDS
    mysql_binary: str = DEFAULT_MYSQL_BINARY


class ConfigLoader:
    """Load harness configuration from YAML, defaults and environment."""

    def __init__(self) -> None:
        self.BUILT_IN_DEFAULTS = {
            field.name: field.default for field in fields(HarnessConfig)
        }

    def load_config(self, config_path: str | None = None) -> dict[str, Any]:
        """Load configuration from YAML file.

        Parameters
        ----------
        config_path : str | None
            Path to YAML config file. If None, checks DBSMOKE_CONFIG env var,
            then falls back to dbsmoke.yaml

        Returns
        -------
        dict[str, Any]
            Parsed ``harness`` section with interpolations resolved, or an
            empty dict when no file exists

        Raises
        ------
        ValueError
            If the file is not valid YAML or variables fail to resolve
        """
        if config_path is None:
            config_path = os.environ.get("DBSMOKE_CONFIG", "dbsmoke.yaml")

        config_file = Path(config_path)

        if not config_file.exists():
            logger.debug("No config file at %s, using defaults", config_file)
            return {}

        try:
            cfg = OmegaConf.load(config_file)
        except yaml.YAMLError as e:
            logger.error("Failed to parse YAML config file %s: %s", config_file, e)
            raise ValueError(f"Invalid YAML in {config_file}: {e}") from e
        except OSError as e:
            logger.error("Failed to read config file %s: %s", config_file, e)
            raise RuntimeError(f"Failed to read config file {config_file}: {e}") from e

        if cfg is None:
            return {}

        if "vars" in cfg:
            vars_dict = OmegaConf.to_container(cfg.vars, resolve=False)
            for key, value in vars_dict.items():
                if key not in cfg:
                    cfg[key] = value

        try:
            config = OmegaConf.to_container(cfg, resolve=True, throw_on_missing=True)
        except InterpolationResolutionError as e:
            logger.error("Failed to resolve configuration variables: %s", e)
            raise ValueError(f"Configuration variable resolution error: {e}") from e

        harness = config.get("harness") or {}
        if not isinstance(harness, dict):
            raise ValueError("harness section must be a mapping")

        return harness

    def merge(self, overrides: dict[str, Any]) -> dict[str, Any]:
        """Merge file settings and DBSMOKE_* environment over built-in defaults.

        Parameters
        ----------
        overrides : dict[str, Any]
            Settings loaded from the config file

        Returns
        -------
        dict[str, Any]
            Merged settings, environment taking precedence over the file
        """
        merged = copy.deepcopy(self.BUILT_IN_DEFAULTS)

        for key, value in overrides.items():
            if key not in merged:
                raise ValueError(
                    f"Unknown harness setting: {key}. Available settings: {sorted(merged)}"
                )
            merged[key] = value

        for env_var, key in ENV_OVERRIDES.items():
            value = os.environ.get(env_var)
            if value:
                logger.debug("Overriding %s from %s", key, env_var)
                merged[key] = value

        return merged

    def validate_config(self, config: dict[str, Any]) -> dict[str, Any]:
        """Coerce and validate merged settings.

        Parameters
        ----------
        config : dict[str, Any]
            Merged settings

        Returns
        -------
        dict[str, Any]
            Settings with numeric values coerced to their declared types

        Raises
        ------
        ValueError
            If a value has the wrong type or is out of range
        """
        validated = dict(config)

        for key in ("host_port", "container_port", "ready_attempts", "query_timeout"):
            validated[key] = _coerce(key, config[key], int)

        for key in ("ready_interval", "settle_seconds"):
            validated[key] = _coerce(key, config[key], float)

        for key in ("host_port", "container_port"):
            if not 1 <= validated[key] <= 65535:
                raise ValueError(f"{key} must be between 1 and 65535")

        if validated["ready_attempts"] < 1:
            raise ValueError("ready_attempts must be at least 1")

        for key in ("ready_interval", "settle_seconds"):
            if validated[key] < 0:
                raise ValueError(f"{key} must not be negative")

        if validated["query_timeout"] < 1:
            raise ValueError("query_timeout must be at least 1")

        for key in ("image", "container_name", "host", "env_file", "mysql_binary"):
            if not isinstance(validated[key], str) or not validated[key].strip():
                raise ValueError(f"{key} must be a non-empty string")

        return validated

    def build(self, config_path: str | None = None) -> HarnessConfig:
        """Load, merge and validate configuration into a HarnessConfig."""
        merged = self.merge(self.load_config(config_path))
        return HarnessConfig(**self.validate_config(merged))


def _coerce(key: str, value: Any, expected_type: type) -> Any:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be a number")

    try:
        return expected_type(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{key} must be a number, got: {value!r}") from e
