"""Bounded polling with an injectable clock."""

import logging
import time
from typing import Callable

from dbsmoke.constants import PollResult

logger = logging.getLogger(__name__)


class Waiter:
    """Polls a condition a bounded number of times at a fixed interval.

    The wait stops early when the condition holds or when the liveness
    check fails. Time spent inside the condition does not count against the
    attempts, so a slow query still gets every attempt. An explicit
    ``budget_seconds`` additionally caps the wall-clock time of the wait,
    measured on the injected clock.

    Parameters
    ----------
    max_attempts : int
        Maximum number of condition checks
    interval_seconds : float
        Pause between consecutive checks
    budget_seconds : float | None
        Wall-clock limit for the whole wait, none when None
    clock : Callable[[], float]
        Monotonic time source
    sleep : Callable[[float], None]
        Function used to pause between checks
    """

    def __init__(
        self,
        max_attempts: int,
        interval_seconds: float,
        budget_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if interval_seconds < 0:
            raise ValueError("interval_seconds must not be negative")

        self.max_attempts = max_attempts
        self.interval_seconds = interval_seconds
        self.budget_seconds = budget_seconds
        self.clock = clock
        self.sleep = sleep

    def poll(
        self,
        description: str,
        condition: Callable[[], bool],
        alive: Callable[[], bool] | None = None,
    ) -> PollResult:
        """Wait until ``condition`` returns True.

        Parameters
        ----------
        description : str
            What is being waited for (for logging)
        condition : Callable[[], bool]
            Check that signals success
        alive : Callable[[], bool] | None
            Liveness check run before every condition check. A False result
            ends the wait at once.

        Returns
        -------
        PollResult
            READY, CRASHED or TIMED_OUT
        """
        start = self.clock()

        for attempt in range(1, self.max_attempts + 1):
            if alive is not None and not alive():
                logger.debug(
                    f"Wait '{description}' aborted: not alive (attempt {attempt})"
                )
                return PollResult.CRASHED

            if condition():
                logger.debug(
                    f"Wait '{description}' satisfied after {attempt} attempt(s), "
                    f"elapsed={self.clock() - start:.2f}s"
                )
                return PollResult.READY

            if attempt == self.max_attempts:
                break

            if (
                self.budget_seconds is not None
                and self.clock() - start >= self.budget_seconds
            ):
                break

            self.sleep(self.interval_seconds)

        logger.debug(
            f"Wait '{description}' timed out after {attempt} attempt(s), "
            f"elapsed={self.clock() - start:.2f}s"
        )
        return PollResult.TIMED_OUT
