#!/usr/bin/env python3
"""dbsmoke - smoke tests for database container images."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Callable

from dbsmoke.cli.main import main
from dbsmoke.cli.parsing import parse_scenario_names
from dbsmoke.core.config import ConfigLoader, HarnessConfig
from dbsmoke.core.models import Scenario
from dbsmoke.core.runner import ScenarioRunner
from dbsmoke.scenarios import default_scenarios, select_scenarios
from dbsmoke.services.docker_runtime import DockerRuntime
from dbsmoke.services.mysql_client import MysqlClient
from dbsmoke.templates import CONFIG_TEMPLATE

logger = logging.getLogger(__name__)


class DbSmoke:
    """Main CLI interface for dbsmoke."""

    def __init__(
        self,
        runtime_factory: Callable[[], DockerRuntime] | None = None,
        client_factory: Callable[[HarnessConfig], MysqlClient] | None = None,
        scenario_factory: Callable[[], list[Scenario]] | None = None,
    ) -> None:
        """Initialize DbSmoke with optional dependency injection."""
        self._config_loader = ConfigLoader()
        self._runtime_factory = runtime_factory or DockerRuntime
        self._client_factory = client_factory or self._create_client
        self._scenario_factory = scenario_factory or default_scenarios

    def _create_client(self, config: HarnessConfig) -> MysqlClient:
        return MysqlClient(
            host=config.host,
            port=config.host_port,
            binary=config.mysql_binary,
            timeout=config.query_timeout,
        )

    def run(
        self,
        only: str | list | tuple | None = None,
        config: str | None = None,
        verbose: bool = False,
    ) -> None:
        """Run the scenarios against the image, stopping at the first failure.

        Parameters
        ----------
        only : str | list | tuple | None
            Comma-separated scenario names to run instead of all of them
        config : str | None
            YAML config path, defaults to DBSMOKE_CONFIG or dbsmoke.yaml
        verbose : bool
            Enable debug logging
        """
        if verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        harness_config = self._config_loader.build(config)
        scenarios = select_scenarios(self._scenario_factory(), parse_scenario_names(only))

        runner = ScenarioRunner(
            harness_config,
            self._runtime_factory(),
            self._client_factory(harness_config),
        )

        logger.info(
            f"Running {len(scenarios)} scenario(s) against {harness_config.image}"
        )
        passed = runner.run_all(scenarios)
        logger.info(f"All {len(passed)} scenario(s) passed")

    def list(self) -> None:
        """List available scenarios."""
        for scenario in self._scenario_factory():
            print(f"{scenario.name:<22} {scenario.description}")

    def init(self, force: bool = False) -> None:
        """Create a default dbsmoke.yaml configuration file."""
        config_path = os.environ.get("DBSMOKE_CONFIG", "dbsmoke.yaml")
        config_file = Path(config_path)

        if config_file.exists() and not force:
            logger.error(
                "%s already exists. Use --force to overwrite.",
                config_path,
            )
            sys.exit(1)

        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, "w") as f:
            f.write(CONFIG_TEMPLATE)

        print(f"Created {config_path} configuration file.")


if __name__ == "__main__":
    main()
