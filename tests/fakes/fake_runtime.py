"""Fake container runtime for testing the runner without Docker."""

import logging
from pathlib import Path
from typing import Callable

from dbsmoke.constants import ContainerStatus
from dbsmoke.core.env_file import EnvFile
from dbsmoke.exceptions import ContainerStartError

logger = logging.getLogger(__name__)


class FakeRuntime:
    """In-memory stand-in for DockerRuntime.

    Parameters
    ----------
    statuses : list[ContainerStatus] | None
        Statuses returned by successive ``inspect_status`` calls while a
        container exists. RUNNING once exhausted.
    logs : bytes | Callable[[int], bytes]
        Log output, or a function of the number of reads so far
    gateway : str
        Address returned by ``bridge_gateway``
    start_error : Exception | None
        Raised by ``start`` when set
    """

    def __init__(
        self,
        statuses: list[ContainerStatus] | None = None,
        logs: bytes | Callable[[int], bytes] = b"",
        gateway: str = "172.17.0.1",
        start_error: Exception | None = None,
    ) -> None:
        self.statuses = list(statuses or [])
        self.logs = logs
        self.gateway = gateway
        self.start_error = start_error
        self.containers: dict[str, dict] = {}
        self.started: list[dict] = []
        self.calls: list[tuple[str, str]] = []
        self.log_reads = 0
        self.purged: list[tuple[str, str, bool]] = []

    def start(
        self,
        name: str,
        image: str,
        port_mapping: tuple[int, int],
        env_file: EnvFile,
        extra_env: dict[str, str] | None = None,
        volume: str | None = None,
    ) -> None:
        self.calls.append(("start", name))
        if name in self.containers:
            raise ContainerStartError(f"Conflict: container {name} already exists")
        if self.start_error is not None:
            raise self.start_error

        environment = env_file.read()
        environment.update(extra_env or {})
        record = {
            "name": name,
            "image": image,
            "port_mapping": port_mapping,
            "environment": environment,
            "volume": volume,
        }
        self.started.append(record)
        self.containers[name] = record
        logger.debug("Fake start of %s", name)

    def stop(self, name: str) -> None:
        self.calls.append(("stop", name))

    def remove(self, name: str) -> None:
        self.calls.append(("remove", name))
        self.containers.pop(name, None)

    def remove_existing(self, name: str) -> None:
        self.calls.append(("remove_existing", name))
        self.containers.pop(name, None)

    def inspect_status(self, name: str) -> ContainerStatus:
        if name not in self.containers:
            return ContainerStatus.ABSENT
        if self.statuses:
            return self.statuses.pop(0)
        return ContainerStatus.RUNNING

    def read_logs(self, name: str) -> bytes:
        if name not in self.containers:
            return b""
        reads = self.log_reads
        self.log_reads += 1
        if callable(self.logs):
            return self.logs(reads)
        return self.logs

    def purge_volume(self, path: str, image: str) -> None:
        self.calls.append(("purge_volume", path))
        self.purged.append((path, image, Path(path).exists()))

    def bridge_gateway(self) -> str:
        return self.gateway
