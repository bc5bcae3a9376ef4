"""Logging filters routing records to stdout or stderr."""

import logging


class StreamRoutingFilter(logging.Filter):
    """Accept only the records destined for one output stream.

    A record goes to stderr when it is tagged ``extra={"stream": "stderr"}``
    or has level WARNING or above. Everything else goes to stdout.

    Parameters
    ----------
    stream : str
        Either "stdout" or "stderr"
    """

    def __init__(self, stream: str) -> None:
        if stream not in ("stdout", "stderr"):
            raise ValueError(f"stream must be 'stdout' or 'stderr', got: {stream}")

        super().__init__()
        self.stream = stream

    def filter(self, record: logging.LogRecord) -> bool:
        tagged = getattr(record, "stream", None)

        if tagged == "stderr" or record.levelno >= logging.WARNING:
            target = "stderr"
        else:
            target = "stdout"

        return target == self.stream
