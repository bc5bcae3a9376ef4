"""Collaborators the harness drives (container runtime, database client)."""

from __future__ import annotations

from dbsmoke.services.docker_runtime import DockerRuntime
from dbsmoke.services.mysql_client import MysqlClient

__all__ = ["DockerRuntime", "MysqlClient"]
