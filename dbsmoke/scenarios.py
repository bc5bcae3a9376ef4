"""Scenario catalogue for the database image.

Each scenario configures the image through its environment variables and
checks the externally visible result.
"""

import logging
from typing import Iterable

from dbsmoke.constants import DAEMON_STARTED_PATTERN
from dbsmoke.core.assertions import assert_equals, assert_not_equals
from dbsmoke.core.models import Check, Lifecycle, Scenario, ScenarioContext
from dbsmoke.exceptions import QueryError, ReadinessTimeoutError, ScenarioAssertionError
from dbsmoke.services.docker_runtime import DockerRuntime

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "mypassword"

TIMEZONE_COUNT_QUERY = "SELECT COUNT(*) FROM mysql.time_zone"


def check_ready(ctx: ScenarioContext) -> None:
    """The database accepts a trivial query with the scenario credentials."""
    ctx.runner.wait_until_ready(ctx.credentials)


def check_connection_refused(ctx: ScenarioContext) -> None:
    """Root must not be able to log in from this host.

    There is no query to wait on, so the check waits for the daemon start
    marker in the log and then gives the server a moment to open its port.
    """
    ctx.runner.wait_for_log_line(DAEMON_STARTED_PATTERN, error_cls=ReadinessTimeoutError)
    ctx.runner.sleep(ctx.runner.config.settle_seconds)

    try:
        result = ctx.runner.client.execute("SELECT 1", ctx.credentials)
    except QueryError as e:
        logger.debug(f"Connection rejected as expected: {e}", extra={"scenario": ctx.scenario})
        return

    assert_not_equals(result, "1", "Should not be allowed to connect")


def check_database_exists(database: str) -> Check:
    def check(ctx: ScenarioContext) -> None:
        ctx.runner.wait_until_ready(ctx.credentials)
        try:
            ctx.runner.client.execute(f"SHOW CREATE DATABASE `{database}`;", ctx.credentials)
        except QueryError as e:
            raise ScenarioAssertionError(f"Database {database} not exist") from e

    return check


def _timezone_count(ctx: ScenarioContext) -> str:
    ctx.runner.wait_until_ready(ctx.credentials)
    try:
        return ctx.runner.client.execute(TIMEZONE_COUNT_QUERY, ctx.credentials)
    except QueryError as e:
        raise ScenarioAssertionError(f"Could not count timezone records: {e}") from e


def check_timezones_loaded(ctx: ScenarioContext) -> None:
    assert_not_equals(_timezone_count(ctx), "0", "No timezone records inserted")


def check_timezones_skipped(ctx: ScenarioContext) -> None:
    assert_equals(_timezone_count(ctx), "0", "Timezone records inserted")


def bridge_host_env(runtime: DockerRuntime) -> dict[str, str]:
    return {"MYSQL_ROOT_HOST": runtime.bridge_gateway()}


def default_scenarios() -> list[Scenario]:
    """Return every scenario in run order."""
    return [
        Scenario(
            name="root_password",
            description="MYSQL_ROOT_PASSWORD, plain and with special characters",
            lifecycles=(
                Lifecycle(
                    label="MYSQL_ROOT_PASSWORD='root'",
                    check=check_ready,
                    root_password="root",
                ),
                Lifecycle(
                    label="MYSQL_ROOT_PASSWORD='a#F a$b~-'",
                    check=check_ready,
                    root_password="a#F a$b~-",
                ),
            ),
        ),
        Scenario(
            name="empty_root_password",
            description="MYSQL_ALLOW_EMPTY_PASSWORD=yes",
            lifecycles=(
                Lifecycle(
                    label="MYSQL_ALLOW_EMPTY_PASSWORD=yes",
                    check=check_ready,
                    env={"MYSQL_ALLOW_EMPTY_PASSWORD": "yes"},
                ),
            ),
        ),
        Scenario(
            name="random_root_password",
            description="MYSQL_RANDOM_ROOT_PASSWORD=yes, password read from the log",
            lifecycles=(
                Lifecycle(
                    label="MYSQL_RANDOM_ROOT_PASSWORD=yes",
                    check=check_ready,
                    env={"MYSQL_RANDOM_ROOT_PASSWORD": "yes"},
                    root_password=None,
                ),
            ),
        ),
        Scenario(
            name="root_host_allowed",
            description="MYSQL_ROOT_HOST set to the Docker bridge gateway",
            lifecycles=(
                Lifecycle(
                    label="MYSQL_ROOT_HOST=<bridge gateway>",
                    check=check_ready,
                    env=bridge_host_env,
                    root_password=DEFAULT_PASSWORD,
                ),
            ),
        ),
        Scenario(
            name="root_host_denied",
            description="MYSQL_ROOT_HOST set to a host this machine does not own",
            lifecycles=(
                Lifecycle(
                    label="MYSQL_ROOT_HOST=example.com",
                    check=check_connection_refused,
                    env={"MYSQL_ROOT_HOST": "example.com"},
                    root_password=DEFAULT_PASSWORD,
                ),
            ),
        ),
        Scenario(
            name="database",
            description="MYSQL_DATABASE creates the database",
            lifecycles=(
                Lifecycle(
                    label="MYSQL_DATABASE=blog",
                    check=check_database_exists("blog"),
                    env={"MYSQL_DATABASE": "blog"},
                    root_password=DEFAULT_PASSWORD,
                ),
            ),
        ),
        Scenario(
            name="user",
            description="MYSQL_USER and MYSQL_PASSWORD create a working login",
            lifecycles=(
                Lifecycle(
                    label="MYSQL_USER=alice, MYSQL_PASSWORD=alice_password",
                    check=check_ready,
                    env={"MYSQL_USER": "alice", "MYSQL_PASSWORD": "alice_password"},
                    root_password=DEFAULT_PASSWORD,
                    user="alice",
                    password="alice_password",
                ),
            ),
        ),
        Scenario(
            name="tzinfo_loaded",
            description="Timezone tables are populated by default",
            lifecycles=(
                Lifecycle(
                    label="MYSQL_INITDB_SKIP_TZINFO=",
                    check=check_timezones_loaded,
                    env={"MYSQL_INITDB_SKIP_TZINFO": ""},
                    root_password=DEFAULT_PASSWORD,
                ),
            ),
        ),
        Scenario(
            name="tzinfo_skipped",
            description="MYSQL_INITDB_SKIP_TZINFO=yes leaves timezone tables empty",
            lifecycles=(
                Lifecycle(
                    label="MYSQL_INITDB_SKIP_TZINFO=yes",
                    check=check_timezones_skipped,
                    env={"MYSQL_INITDB_SKIP_TZINFO": "yes"},
                    root_password=DEFAULT_PASSWORD,
                ),
            ),
        ),
        Scenario(
            name="volume",
            description="Data directory on a host volume survives a restart",
            lifecycles=(
                Lifecycle(
                    label="volume",
                    check=check_ready,
                    root_password=DEFAULT_PASSWORD,
                    use_volume=True,
                ),
                Lifecycle(
                    label="volume (already initialized)",
                    check=check_ready,
                    root_password=DEFAULT_PASSWORD,
                    use_volume=True,
                ),
            ),
        ),
    ]


def select_scenarios(
    scenarios: Iterable[Scenario], names: Iterable[str] | None = None
) -> list[Scenario]:
    """Filter scenarios by name, keeping catalogue order.

    Raises
    ------
    ValueError
        If a requested name is not in the catalogue
    """
    scenarios = list(scenarios)
    if not names:
        return scenarios

    wanted = [name.strip() for name in names if name.strip()]
    available = [scenario.name for scenario in scenarios]
    unknown = [name for name in wanted if name not in available]
    if unknown:
        raise ValueError(
            f"Unknown scenario(s): {', '.join(unknown)}. Available scenarios: {available}"
        )

    return [scenario for scenario in scenarios if scenario.name in wanted]
