"""Database access through the ``mysql`` command-line client."""

import logging
import os
import subprocess
from typing import Callable

from dbsmoke.core.models import Credentials
from dbsmoke.exceptions import QueryError

logger = logging.getLogger(__name__)


class MysqlClient:
    """Run single statements against the published database port.

    The password is passed through the ``MYSQL_PWD`` environment variable of
    the child process, never on the command line.

    Parameters
    ----------
    host : str
        Address of the database
    port : int
        TCP port of the database
    binary : str
        Client executable
    timeout : int
        Seconds allowed per statement
    run : Callable
        Process runner with the ``subprocess.run`` signature
    """

    def __init__(
        self,
        host: str,
        port: int,
        binary: str = "mysql",
        timeout: int = 10,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self.host = host
        self.port = port
        self.binary = binary
        self.timeout = timeout
        self._run = run

    def build_command(self, query: str, credentials: Credentials) -> list[str]:
        # Two -s flags print bare values without headers or table borders
        return [
            self.binary,
            "--protocol=tcp",
            f"--host={self.host}",
            f"--port={self.port}",
            f"--user={credentials.login}",
            "-ss",
            "-e",
            query,
        ]

    def build_env(self, credentials: Credentials) -> dict[str, str]:
        env = dict(os.environ)
        env.pop("MYSQL_PWD", None)
        if credentials.secret:
            env["MYSQL_PWD"] = credentials.secret
        return env

    def execute(self, query: str, credentials: Credentials) -> str:
        """Run a statement and return its output.

        Parameters
        ----------
        query : str
            SQL statement
        credentials : Credentials
            Who to authenticate as

        Returns
        -------
        str
            Standard output with surrounding whitespace stripped

        Raises
        ------
        QueryError
            If the client is missing, times out or exits non-zero
        """
        cmd = self.build_command(query, credentials)
        logger.debug(f"Executing as {credentials.login}: {query}")

        try:
            result = self._run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=self.build_env(credentials),
                check=False,
            )
        except FileNotFoundError as e:
            raise QueryError(
                f"{self.binary} command not found. Please ensure the MySQL client is installed."
            ) from e
        except subprocess.TimeoutExpired as e:
            raise QueryError(f"Query timed out after {self.timeout}s: {query}") from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise QueryError(
                f"Query failed with exit code {result.returncode}: {stderr}",
                stderr=stderr,
                returncode=result.returncode,
            )

        return (result.stdout or "").strip()

    def is_alive(self, credentials: Credentials) -> bool:
        """Return True when ``SELECT 1`` succeeds."""
        try:
            self.execute("SELECT 1", credentials)
        except QueryError as e:
            logger.debug(f"Database not answering yet: {e}")
            return False
        return True
