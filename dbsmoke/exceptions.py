"""Harness-specific exceptions.

Every error raised while running scenarios derives from ``HarnessError`` and
aborts the run. The CLI maps all of them to exit status 1.
"""


class HarnessError(Exception):
    """Base class for fatal harness failures."""

    pass


class ContainerStartError(HarnessError):
    """Raised when the runtime refuses to start the container."""

    pass


class ContainerCrashedError(HarnessError):
    """Raised when the container stops running while being waited on."""

    pass


class ReadinessTimeoutError(HarnessError):
    """Raised when the service never answers within the poll budget."""

    pass


class ScenarioAssertionError(HarnessError):
    """Raised when the service answers but violates the scenario contract."""

    pass


class ExtractionError(HarnessError):
    """Raised when a required value cannot be scraped from container logs."""

    pass


class QueryError(HarnessError):
    """Raised when the database client fails to run a query.

    Parameters
    ----------
    message : str
        Description of the failure
    stderr : str
        Standard error captured from the client, if any
    returncode : int | None
        Client exit status, or None when the client never ran
    """

    def __init__(self, message: str, stderr: str = "", returncode: int | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode
