"""Generic polling until a resource reaches a target state."""
import time
from typing import Any, Callable, Iterable, Optional, Tuple

from ibmrp.infrastructure.exceptions import (
    ResourceVanishedError,
    UnexpectedStateError,
    WaitTimeoutError,
)
from ibmrp.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)

# A refresh function returns (resource, state). A None resource means the
# resource was not found on this poll.
RefreshFunc = Callable[[], Tuple[Optional[Any], str]]


class StateChangeConf:
    """
    Polls a refresh function until the reported state is one of the targets.

    The first poll happens after ``delay`` seconds; later polls are spaced by
    at least ``min_timeout`` seconds. States in ``pending`` keep the wait
    going, any other non-target state fails it. Errors raised by the refresh
    function propagate unchanged.
    """

    def __init__(
        self,
        pending: Iterable[str],
        target: Iterable[str],
        refresh: RefreshFunc,
        timeout: float,
        delay: float = 0.0,
        min_timeout: float = 0.0,
        not_found_checks: int = 20,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.pending = set(pending)
        self.target = set(target)
        self.refresh = refresh
        self.timeout = timeout
        self.delay = delay
        self.min_timeout = min_timeout
        self.not_found_checks = not_found_checks
        self._sleep = sleep
        self._clock = clock

    def wait_for_state(self) -> Any:
        """
        Block until the resource reaches a target state.

        Returns:
            The resource returned by the last refresh

        Raises:
            WaitTimeoutError: If the timeout elapses first
            UnexpectedStateError: If a state outside pending and target is seen
            ResourceVanishedError: If the resource is missing for too many polls
        """
        deadline = self._clock() + self.timeout
        last_state: Optional[str] = None
        not_found = 0

        if self.delay > 0:
            self._sleep(self.delay)

        while True:
            resource, state = self.refresh()

            if resource is None:
                not_found += 1
                if not_found >= self.not_found_checks:
                    raise ResourceVanishedError(
                        f"resource not found after {not_found} checks",
                        {"last_state": last_state},
                    )
            else:
                not_found = 0
                last_state = state
                if state in self.target:
                    logger.debug(f"Reached target state '{state}'")
                    return resource
                if state not in self.pending:
                    raise UnexpectedStateError(state, sorted(self.target))
                logger.debug(f"Waiting, current state '{state}'")

            remaining = deadline - self._clock()
            if remaining <= 0:
                raise WaitTimeoutError(
                    f"timeout while waiting for state to become '{', '.join(sorted(self.target))}'"
                    f" (last state: '{last_state}', timeout: {self.timeout}s)",
                    last_state=last_state,
                    expected=sorted(self.target),
                )
            interval = self.min_timeout if self.min_timeout > 0 else 1.0
            self._sleep(min(interval, remaining))
