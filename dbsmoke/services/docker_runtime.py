"""Container runtime backed by the Docker Engine API."""

import logging
import os
import time
from typing import Callable

import docker
from docker.models.containers import Container

from dbsmoke.constants import (
    DATA_DIR,
    REMOVE_RETRIES,
    REMOVE_RETRY_DELAY_SECONDS,
    STOP_TIMEOUT_SECONDS,
    ContainerStatus,
)
from dbsmoke.core.env_file import EnvFile
from dbsmoke.exceptions import ContainerStartError

logger = logging.getLogger(__name__)


class DockerRuntime:
    """Start, inspect and remove the database container.

    Containers are addressed by name only; the runtime keeps no handles.

    Parameters
    ----------
    client_factory : Callable[[], docker.DockerClient] | None
        Factory for the Docker client, ``docker.from_env`` by default. The
        client is created on first use.
    """

    def __init__(
        self, client_factory: Callable[[], docker.DockerClient] | None = None
    ) -> None:
        self._client_factory = client_factory or docker.from_env
        self._client: docker.DockerClient | None = None

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    def _get(self, name: str) -> Container | None:
        try:
            return self.client.containers.get(name)
        except docker.errors.NotFound:
            return None

    def start(
        self,
        name: str,
        image: str,
        port_mapping: tuple[int, int],
        env_file: EnvFile,
        extra_env: dict[str, str] | None = None,
        volume: str | None = None,
    ) -> None:
        """Run the container detached.

        Parameters
        ----------
        name : str
            Container name
        image : str
            Image to run
        port_mapping : tuple[int, int]
            (host_port, container_port) to publish over TCP
        env_file : EnvFile
            Settings file read at start time
        extra_env : dict[str, str] | None
            Variables added on top of the env file, taking precedence
        volume : str | None
            Host directory mounted read-write at the data directory

        Raises
        ------
        ContainerStartError
            If the image is missing or the daemon rejects the request
        """
        host_port, container_port = port_mapping
        environment = env_file.read()
        environment.update(extra_env or {})

        volumes = None
        if volume:
            volumes = {volume: {"bind": DATA_DIR, "mode": "rw"}}

        logger.debug(
            f"Starting container {name} from {image} "
            f"(port {host_port}->{container_port}, volume={volume})"
        )

        try:
            self.client.containers.run(
                image,
                name=name,
                detach=True,
                environment=environment,
                ports={f"{container_port}/tcp": host_port},
                volumes=volumes,
            )
        except docker.errors.ImageNotFound as e:
            raise ContainerStartError(f"Image {image} not found: {e}") from e
        except docker.errors.APIError as e:
            raise ContainerStartError(f"Failed to start container {name}: {e}") from e

    def stop(self, name: str) -> None:
        """Stop the container if it exists."""
        container = self._get(name)
        if container is None:
            return

        try:
            container.stop(timeout=STOP_TIMEOUT_SECONDS)
        except docker.errors.NotFound:
            pass

    def remove(self, name: str) -> None:
        """Force-remove the container if it exists."""
        container = self._get(name)
        if container is None:
            return

        try:
            container.remove(force=True)
        except docker.errors.NotFound:
            pass

    def remove_existing(self, name: str) -> None:
        """Stop and remove any container with this name.

        Best-effort removal with retries. Logs warnings but doesn't raise if
        removal keeps failing, leaving the next start to report a conflict.

        Parameters
        ----------
        name : str
            Name of the container to remove if it exists
        """
        for attempt in range(REMOVE_RETRIES):
            try:
                self.stop(name)
                self.remove(name)
                logger.debug(f"Container {name} removed or absent")
                return
            except docker.errors.APIError as e:
                if attempt < REMOVE_RETRIES - 1:
                    logger.warning(
                        f"Error removing container {name} (attempt {attempt + 1}/{REMOVE_RETRIES}): {e}. Retrying..."
                    )
                    time.sleep(REMOVE_RETRY_DELAY_SECONDS)
                else:
                    logger.warning(
                        f"Could not remove container {name} after {REMOVE_RETRIES} attempts: {e}. Continuing anyway..."
                    )

    def inspect_status(self, name: str) -> ContainerStatus:
        """Report the container state, ``ABSENT`` if there is no such container."""
        container = self._get(name)
        if container is None:
            return ContainerStatus.ABSENT

        status = container.attrs.get("State", {}).get("Status", container.status)
        try:
            return ContainerStatus(status)
        except ValueError:
            logger.warning(f"Unknown status {status!r} for container {name}")
            return ContainerStatus.DEAD

    def read_logs(self, name: str) -> bytes:
        """Return combined stdout and stderr of the container."""
        container = self._get(name)
        if container is None:
            return b""

        try:
            return container.logs(stdout=True, stderr=True)
        except docker.errors.NotFound:
            return b""

    def purge_volume(self, path: str, image: str) -> None:
        """Empty a data volume and hand it back to the host user.

        The server writes its files as the container's ``mysql`` user, often
        with mode 0700, so the host user cannot delete them directly. A
        throwaway root container from ``image`` removes the contents and
        chowns the directory to the calling uid. Failures are logged.

        Parameters
        ----------
        path : str
            Host directory previously mounted at the data directory
        image : str
            Image providing a shell
        """
        script = (
            f"rm -rf {DATA_DIR}/* {DATA_DIR}/.[!.]*; "
            f"chown {os.getuid()}:{os.getgid()} {DATA_DIR}"
        )

        try:
            self.client.containers.run(
                image,
                entrypoint=["/bin/sh", "-c", script],
                user="root",
                remove=True,
                volumes={path: {"bind": DATA_DIR, "mode": "rw"}},
            )
        except docker.errors.DockerException as e:
            logger.warning(f"Could not purge volume {path}: {e}")

    def bridge_gateway(self) -> str:
        """Return the gateway address of the default bridge network."""
        network = self.client.networks.get("bridge")
        configs = network.attrs.get("IPAM", {}).get("Config") or []
        if not configs or not configs[0].get("Gateway"):
            raise ContainerStartError("Bridge network has no gateway configured")
        return configs[0]["Gateway"]
