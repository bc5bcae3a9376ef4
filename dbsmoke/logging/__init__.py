"""Logging helpers for dbsmoke output routing."""

import logging
import sys

from dbsmoke.logging.filters import StreamRoutingFilter
from dbsmoke.logging.formatters import StreamFormatter

__all__ = ["StreamFormatter", "StreamRoutingFilter", "configure_logging"]


def configure_logging(verbose: bool = False) -> None:
    """Install stdout/stderr handlers on the root logger.

    Parameters
    ----------
    verbose : bool
        Emit DEBUG records when True, INFO otherwise
    """
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(StreamFormatter("%(message)s"))
    stdout_handler.addFilter(StreamRoutingFilter("stdout"))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(StreamFormatter("%(message)s"))
    stderr_handler.addFilter(StreamRoutingFilter("stderr"))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        handlers=[stdout_handler, stderr_handler],
        force=True,
    )

    for noisy in ["docker", "urllib3"]:
        logging.getLogger(noisy).setLevel(logging.WARNING)
