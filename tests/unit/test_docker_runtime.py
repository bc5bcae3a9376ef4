"""Unit tests for DockerRuntime with a mocked Docker client."""

from pathlib import Path
from unittest.mock import MagicMock

import docker
import pytest

from dbsmoke.constants import ContainerStatus
from dbsmoke.core.env_file import EnvFile
from dbsmoke.exceptions import ContainerStartError
from dbsmoke.services.docker_runtime import DockerRuntime


@pytest.fixture
def docker_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def runtime(docker_client: MagicMock) -> DockerRuntime:
    return DockerRuntime(client_factory=lambda: docker_client)


def make_container(status: str = "running") -> MagicMock:
    container = MagicMock()
    container.status = status
    container.attrs = {"State": {"Status": status}}
    return container


class TestStart:
    """Test starting containers."""

    def test_merges_env_file_and_extra_env(
        self, runtime: DockerRuntime, docker_client: MagicMock, tmp_path: Path
    ) -> None:
        env_file = EnvFile(tmp_path / "env")
        env_file.write({"MYSQL_DATABASE": "blog", "MYSQL_ROOT_PASSWORD": "from-file"})

        runtime.start(
            "mariadb_alpine_test",
            "mariadb-alpine:latest",
            (33060, 3306),
            env_file,
            extra_env={"MYSQL_ROOT_PASSWORD": "root"},
        )

        docker_client.containers.run.assert_called_once_with(
            "mariadb-alpine:latest",
            name="mariadb_alpine_test",
            detach=True,
            environment={"MYSQL_DATABASE": "blog", "MYSQL_ROOT_PASSWORD": "root"},
            ports={"3306/tcp": 33060},
            volumes=None,
        )

    def test_mounts_volume_at_data_dir(
        self, runtime: DockerRuntime, docker_client: MagicMock, tmp_path: Path
    ) -> None:
        env_file = EnvFile(tmp_path / "env")
        env_file.write({})

        runtime.start("db", "img", (33060, 3306), env_file, volume="/tmp/vol")

        kwargs = docker_client.containers.run.call_args.kwargs
        assert kwargs["volumes"] == {"/tmp/vol": {"bind": "/var/lib/mysql", "mode": "rw"}}

    def test_missing_image_raises_start_error(
        self, runtime: DockerRuntime, docker_client: MagicMock, tmp_path: Path
    ) -> None:
        docker_client.containers.run.side_effect = docker.errors.ImageNotFound("missing")

        with pytest.raises(ContainerStartError, match="Image img not found"):
            runtime.start("db", "img", (33060, 3306), EnvFile(tmp_path / "env"))

    def test_api_error_raises_start_error(
        self, runtime: DockerRuntime, docker_client: MagicMock, tmp_path: Path
    ) -> None:
        docker_client.containers.run.side_effect = docker.errors.APIError("port in use")

        with pytest.raises(ContainerStartError, match="Failed to start container db"):
            runtime.start("db", "img", (33060, 3306), EnvFile(tmp_path / "env"))

    def test_client_created_lazily(self) -> None:
        factory = MagicMock()

        runtime = DockerRuntime(client_factory=factory)
        factory.assert_not_called()

        assert runtime.client is factory.return_value
        assert runtime.client is factory.return_value
        factory.assert_called_once()


class TestInspect:
    """Test status, logs and network inspection."""

    def test_absent_when_not_found(self, runtime: DockerRuntime, docker_client: MagicMock) -> None:
        docker_client.containers.get.side_effect = docker.errors.NotFound("gone")

        assert runtime.inspect_status("db") is ContainerStatus.ABSENT

    @pytest.mark.parametrize("status", ["created", "running", "exited", "dead", "restarting"])
    def test_maps_runtime_status(
        self, runtime: DockerRuntime, docker_client: MagicMock, status: str
    ) -> None:
        docker_client.containers.get.return_value = make_container(status)

        assert runtime.inspect_status("db") is ContainerStatus(status)

    def test_unknown_status_treated_as_dead(
        self, runtime: DockerRuntime, docker_client: MagicMock
    ) -> None:
        docker_client.containers.get.return_value = make_container("weird")

        assert runtime.inspect_status("db") is ContainerStatus.DEAD

    def test_read_logs_combines_streams(
        self, runtime: DockerRuntime, docker_client: MagicMock
    ) -> None:
        container = make_container()
        container.logs.return_value = b"GENERATED ROOT PASSWORD: x\n"
        docker_client.containers.get.return_value = container

        assert runtime.read_logs("db") == b"GENERATED ROOT PASSWORD: x\n"
        container.logs.assert_called_once_with(stdout=True, stderr=True)

    def test_read_logs_of_absent_container(
        self, runtime: DockerRuntime, docker_client: MagicMock
    ) -> None:
        docker_client.containers.get.side_effect = docker.errors.NotFound("gone")

        assert runtime.read_logs("db") == b""

    def test_bridge_gateway(self, runtime: DockerRuntime, docker_client: MagicMock) -> None:
        docker_client.networks.get.return_value.attrs = {
            "IPAM": {"Config": [{"Subnet": "172.17.0.0/16", "Gateway": "172.17.0.1"}]}
        }

        assert runtime.bridge_gateway() == "172.17.0.1"
        docker_client.networks.get.assert_called_once_with("bridge")

    def test_bridge_without_gateway_raises(
        self, runtime: DockerRuntime, docker_client: MagicMock
    ) -> None:
        docker_client.networks.get.return_value.attrs = {"IPAM": {"Config": []}}

        with pytest.raises(ContainerStartError, match="no gateway"):
            runtime.bridge_gateway()


class TestRemove:
    """Test best-effort teardown."""

    def test_remove_existing_stops_and_removes(
        self, runtime: DockerRuntime, docker_client: MagicMock
    ) -> None:
        container = make_container()
        docker_client.containers.get.return_value = container

        runtime.remove_existing("db")

        container.stop.assert_called_once_with(timeout=10)
        container.remove.assert_called_once_with(force=True)

    def test_remove_existing_ignores_missing_container(
        self, runtime: DockerRuntime, docker_client: MagicMock
    ) -> None:
        docker_client.containers.get.side_effect = docker.errors.NotFound("gone")

        runtime.remove_existing("db")

    def test_remove_existing_gives_up_after_retries(
        self,
        runtime: DockerRuntime,
        docker_client: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr("dbsmoke.services.docker_runtime.time.sleep", lambda _: None)
        container = make_container()
        container.stop.side_effect = docker.errors.APIError("daemon busy")
        docker_client.containers.get.return_value = container

        runtime.remove_existing("db")

        assert container.stop.call_count == 2
        container.remove.assert_not_called()

    def test_remove_ignores_race_with_removal(
        self, runtime: DockerRuntime, docker_client: MagicMock
    ) -> None:
        container = make_container()
        container.remove.side_effect = docker.errors.NotFound("already gone")
        docker_client.containers.get.return_value = container

        runtime.remove("db")

    def test_purge_volume_clears_data_dir_as_root(
        self,
        runtime: DockerRuntime,
        docker_client: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr("dbsmoke.services.docker_runtime.os.getuid", lambda: 1000)
        monkeypatch.setattr("dbsmoke.services.docker_runtime.os.getgid", lambda: 1000)

        runtime.purge_volume("/tmp/mariadb_alpine_test_volume.abc", "mariadb-alpine:latest")

        args, kwargs = docker_client.containers.run.call_args
        assert args == ("mariadb-alpine:latest",)
        assert kwargs["user"] == "root"
        assert kwargs["remove"] is True
        assert kwargs["volumes"] == {
            "/tmp/mariadb_alpine_test_volume.abc": {"bind": "/var/lib/mysql", "mode": "rw"}
        }
        shell, flag, script = kwargs["entrypoint"]
        assert (shell, flag) == ("/bin/sh", "-c")
        assert "rm -rf /var/lib/mysql/*" in script
        assert "chown 1000:1000 /var/lib/mysql" in script

    def test_purge_volume_failure_is_logged(
        self,
        runtime: DockerRuntime,
        docker_client: MagicMock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        docker_client.containers.run.side_effect = docker.errors.ImageNotFound("missing")

        runtime.purge_volume("/tmp/volume", "mariadb-alpine:latest")

        assert "Could not purge volume /tmp/volume" in caplog.text
