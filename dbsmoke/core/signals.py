"""Signal handling so teardown runs when the harness is terminated."""

from __future__ import annotations

import logging
import signal
import types

logger = logging.getLogger(__name__)


def setup_signal_handlers() -> None:
    """Turn SIGTERM into KeyboardInterrupt.

    SIGINT already raises KeyboardInterrupt. Routing SIGTERM the same way
    unwinds the stack through the runner's context managers, so the
    container and temporary files are removed before the process exits.
    """

    def sigterm_handler(signum: int, frame: types.FrameType | None) -> None:
        """Handle SIGTERM signal."""
        logger.warning("Received signal %d, tearing down", signum)
        raise KeyboardInterrupt

    signal.signal(signal.SIGTERM, sigterm_handler)
