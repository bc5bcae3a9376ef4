"""Fake database client recording the statements it is asked to run."""

from dbsmoke.core.models import Credentials
from dbsmoke.exceptions import QueryError


class FakeMysqlClient:
    """In-memory stand-in for MysqlClient.

    Parameters
    ----------
    responses : dict[str, str | Exception] | None
        Output (or exception to raise) per statement. Unlisted statements
        return "1".
    alive_after : int
        Number of ``is_alive`` calls that fail before the database answers
    """

    def __init__(
        self,
        responses: dict[str, str | Exception] | None = None,
        alive_after: int = 0,
    ) -> None:
        self.responses = dict(responses or {})
        self.alive_after = alive_after
        self.alive_checks = 0
        self.alive_credentials: list[Credentials] = []
        self.queries: list[tuple[str, Credentials]] = []

    def execute(self, query: str, credentials: Credentials) -> str:
        self.queries.append((query, credentials))
        response = self.responses.get(query, "1")
        if isinstance(response, Exception):
            raise response
        return response

    def is_alive(self, credentials: Credentials) -> bool:
        self.alive_checks += 1
        self.alive_credentials.append(credentials)
        return self.alive_checks > self.alive_after


def access_denied() -> QueryError:
    return QueryError(
        "Query failed with exit code 1: Access denied for user 'root'",
        stderr="ERROR 1045 (28000): Access denied for user 'root'",
        returncode=1,
    )
