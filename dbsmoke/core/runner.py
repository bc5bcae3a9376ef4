"""Sequential scenario execution against a single named container."""

import logging
import re
import shutil
import tempfile
import time
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator

from dbsmoke.constants import (
    GENERATED_PASSWORD_PATTERN,
    LIVE_STATUSES,
    ROOT_PASSWORD_ENV,
    VOLUME_PREFIX,
    PollResult,
)
from dbsmoke.core.config import HarnessConfig
from dbsmoke.core.env_file import EnvFile
from dbsmoke.core.models import Credentials, Lifecycle, Scenario, ScenarioContext
from dbsmoke.core.waiter import Waiter
from dbsmoke.exceptions import (
    ContainerCrashedError,
    ExtractionError,
    HarnessError,
    ReadinessTimeoutError,
)
from dbsmoke.services.docker_runtime import DockerRuntime
from dbsmoke.services.mysql_client import MysqlClient

logger = logging.getLogger(__name__)

_GENERATED_PASSWORD_RE = re.compile(GENERATED_PASSWORD_PATTERN)


def find_log_line(text: str, pattern: re.Pattern) -> str | None:
    """Return the first line of ``text`` matching ``pattern``."""
    for line in text.splitlines():
        if pattern.search(line):
            return line
    return None


def extract_generated_password(text: str) -> str | None:
    """Extract the generated root password from container output.

    Only the first ``GENERATED ROOT PASSWORD:`` line is considered. The
    password is everything after the third space-separated field.

    Parameters
    ----------
    text : str
        Container log output

    Returns
    -------
    str | None
        The password, or None if the line is missing or carries no value
    """
    line = find_log_line(text, _GENERATED_PASSWORD_RE)
    if line is None:
        return None

    fields = line.split(" ", 3)
    if len(fields) < 4 or not fields[3]:
        return None
    return fields[3]


class ScenarioRunner:
    """Drives scenarios one at a time, failing fast.

    Each lifecycle writes its settings to the env file, replaces any
    container with the configured name, runs its check and removes the
    container again, whether the check passed or not.

    Parameters
    ----------
    config : HarnessConfig
        Harness settings
    runtime : DockerRuntime
        Container runtime
    client : MysqlClient
        Database client
    env_file : EnvFile | None
        Configuration sink, built from ``config.env_file`` when None
    waiter : Waiter | None
        Polling primitive, built from the readiness settings when None
    sleep : Callable[[float], None]
        Used for the settle delay in checks
    """

    def __init__(
        self,
        config: HarnessConfig,
        runtime: DockerRuntime,
        client: MysqlClient,
        env_file: EnvFile | None = None,
        waiter: Waiter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.runtime = runtime
        self.client = client
        self.env_file = env_file or EnvFile(config.env_file)
        self.waiter = waiter or Waiter(config.ready_attempts, config.ready_interval)
        self.sleep = sleep
        self.cleanup_steps: list[tuple[str, Callable[[], None]]] = []
        self.passed: list[str] = []

    def defer(self, label: str, step: Callable[[], None]) -> None:
        """Schedule ``step`` to run when the run is cleaned up."""
        self.cleanup_steps.append((label, step))
        logger.debug(f"Deferred cleanup of {label}")

    def cleanup(self) -> None:
        """Run deferred steps, newest first.

        A failing step is logged and the remaining steps still run.
        """
        while self.cleanup_steps:
            label, step = self.cleanup_steps.pop()
            try:
                step()
            except Exception as e:
                logger.warning(f"Cleanup failed for {label}: {e}")
            else:
                logger.debug(f"Cleaned up {label}")

    @property
    def container_name(self) -> str:
        return self.config.container_name

    def is_container_running(self) -> bool:
        return self.runtime.inspect_status(self.container_name) in LIVE_STATUSES

    def read_log_text(self) -> str:
        return self.runtime.read_logs(self.container_name).decode(
            "utf-8", errors="replace"
        )

    def poll_until_ready(
        self, predicate: Callable[[], bool], description: str = "service"
    ) -> None:
        """Wait for ``predicate`` while the container keeps running.

        Raises
        ------
        ContainerCrashedError
            If the container stops running during the wait
        ReadinessTimeoutError
            If the predicate never holds within the poll budget
        """
        result = self.waiter.poll(description, predicate, alive=self.is_container_running)

        if result is PollResult.CRASHED:
            raise ContainerCrashedError("Container failed to start")
        if result is PollResult.TIMED_OUT:
            raise ReadinessTimeoutError(f"Timed out waiting for {description}")

    def wait_until_ready(self, credentials: Credentials) -> None:
        self.poll_until_ready(
            lambda: self.client.is_alive(credentials), "database to accept queries"
        )

    def _scrape(
        self,
        description: str,
        extract: Callable[[str], str | None],
        error_cls: type[HarnessError],
        error_message: str,
    ) -> str:
        found: list[str] = []

        def condition() -> bool:
            value = extract(self.read_log_text())
            if value is None:
                return False
            found.append(value)
            return True

        result = self.waiter.poll(description, condition, alive=self.is_container_running)

        if result is PollResult.CRASHED:
            raise ContainerCrashedError("Container failed to start")
        if result is PollResult.TIMED_OUT:
            raise error_cls(error_message)

        return found[0]

    def wait_for_log_line(
        self,
        pattern: str,
        error_cls: type[HarnessError] = ExtractionError,
    ) -> str:
        """Wait for a container log line matching ``pattern`` and return it."""
        regex = re.compile(pattern)
        return self._scrape(
            f"log line matching {pattern!r}",
            lambda text: find_log_line(text, regex),
            error_cls,
            f"No log line matching {pattern!r} appeared",
        )

    def scrape_generated_password(self) -> str:
        """Wait for the server to print its generated root password."""
        return self._scrape(
            "generated root password",
            extract_generated_password,
            ExtractionError,
            "Failed to get random root password",
        )

    def create_volume(self) -> str:
        """Create a host directory for the data volume, removed at the end of the run."""
        path = tempfile.mkdtemp(prefix=VOLUME_PREFIX, dir=self.config.volume_root)
        self.defer(f"volume {path}", lambda: self.remove_volume(path))
        return path

    def remove_volume(self, path: str) -> None:
        # Database files belong to the container user; empty the directory
        # from inside a container before deleting it from the host.
        self.runtime.purge_volume(path, self.config.image)
        shutil.rmtree(path)

    @contextmanager
    def container(self, lifecycle: Lifecycle, volume: str | None = None) -> Iterator[None]:
        """Run one container for the duration of the block.

        Any previous container with the same name is removed first, and the
        container is removed again on every exit path.
        """
        self.env_file.write(lifecycle.resolve_env(self.runtime))
        self.runtime.remove_existing(self.container_name)

        try:
            self.runtime.start(
                self.container_name,
                self.config.image,
                (self.config.host_port, self.config.container_port),
                self.env_file,
                extra_env={ROOT_PASSWORD_ENV: lifecycle.root_password or ""},
                volume=volume if lifecycle.use_volume else None,
            )
            yield
        finally:
            self.runtime.remove_existing(self.container_name)

    def run_lifecycle(
        self, scenario: Scenario, lifecycle: Lifecycle, volume: str | None = None
    ) -> None:
        extra = {"scenario": scenario.name}
        logger.info(f"Test {lifecycle.label}", extra=extra)

        with self.container(lifecycle, volume):
            if lifecycle.root_password is None:
                root_password = self.scrape_generated_password()
                logger.debug("Scraped generated root password", extra=extra)
            else:
                root_password = lifecycle.root_password

            credentials = Credentials(
                root_password=root_password,
                user=lifecycle.user,
                password=lifecycle.password,
            )
            lifecycle.check(ScenarioContext(self, scenario.name, credentials))

        logger.info("Test successful", extra=extra)

    def run_scenario(self, scenario: Scenario) -> None:
        """Run every lifecycle of ``scenario``.

        Raises
        ------
        HarnessError
            On the first failing lifecycle. The container has already been
            removed when this propagates.
        """
        volume = self.create_volume() if scenario.uses_volume else None

        try:
            for lifecycle in scenario.lifecycles:
                self.run_lifecycle(scenario, lifecycle, volume)
        except HarnessError as e:
            logger.error(f"Test failed: {e}", extra={"scenario": scenario.name})
            raise

        self.passed.append(scenario.name)

    def run_all(self, scenarios: Iterable[Scenario]) -> list[str]:
        """Run scenarios in order, stopping at the first failure.

        The env file and any volume directories are removed afterwards, on
        success and failure alike.

        Returns
        -------
        list[str]
            Names of the scenarios that passed
        """
        self.defer(f"env file {self.env_file.path}", self.env_file.remove)
        self.runtime.remove_existing(self.container_name)

        try:
            for scenario in scenarios:
                self.run_scenario(scenario)
        finally:
            logger.debug("Cleaning up temporary files")
            self.cleanup()

        return list(self.passed)
