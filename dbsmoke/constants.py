"""Global constants for dbsmoke.

Defaults mirror the behaviour of the image under test: a MariaDB server
listening on 3306 inside the container, published on a fixed host port.
"""

from enum import Enum

DEFAULT_IMAGE = "mariadb-alpine:latest"

DEFAULT_CONTAINER_NAME = "mariadb_alpine_test"
"""Logical name of the single container the harness owns at any time."""

DEFAULT_HOST = "127.0.0.1"

DEFAULT_HOST_PORT = 33060

CONTAINER_PORT = 3306

DATA_DIR = "/var/lib/mysql"
"""Mount point of the persistent volume inside the container."""

DEFAULT_ENV_FILE = "/tmp/mariadb_alpine_test_env"

VOLUME_PREFIX = "mariadb_alpine_test_volume."

READY_MAX_ATTEMPTS = 31
"""Number of readiness checks before giving up.

At one check per second this gives the server about thirty seconds to
finish initialisation.
"""

READY_INTERVAL_SECONDS = 1.0

SETTLE_SECONDS = 3.0
"""Pause after the daemon start marker before probing a denied host."""

QUERY_TIMEOUT_SECONDS = 10

DEFAULT_MYSQL_BINARY = "mysql"

ROOT_PASSWORD_ENV = "MYSQL_ROOT_PASSWORD"

GENERATED_PASSWORD_PATTERN = r"^GENERATED ROOT PASSWORD:"

DAEMON_STARTED_PATTERN = r"mysqld_safe Starting mysqld daemon"

REMOVE_RETRIES = 2

REMOVE_RETRY_DELAY_SECONDS = 0.1

STOP_TIMEOUT_SECONDS = 10


class ContainerStatus(str, Enum):
    """Container states reported by the runtime, plus ``absent``."""

    CREATED = "created"
    RUNNING = "running"
    PAUSED = "paused"
    RESTARTING = "restarting"
    REMOVING = "removing"
    EXITED = "exited"
    DEAD = "dead"
    ABSENT = "absent"


LIVE_STATUSES = frozenset({ContainerStatus.CREATED, ContainerStatus.RUNNING})
"""Statuses treated as "still starting or running" during a poll."""


class PollResult(str, Enum):
    """Outcome of a bounded wait."""

    READY = "ready"
    CRASHED = "crashed"
    TIMED_OUT = "timed_out"
