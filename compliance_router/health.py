"""Health tracking for on-prem discovery endpoints."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from loguru import logger

_MAX_TRACKED_FAILURES = 50


@dataclass
class _EndpointState:
    failures: list[float] = field(default_factory=list)
    state: str = "closed"  # "closed", "open", "half-open"
    opened_at: float = 0.0


class EndpointHealth:
    """Circuit breaker over discovery endpoints.

    An endpoint that fails discovery too often within a window is skipped
    (open) until a cooldown passes, then retried once (half-open).

    Owned by whoever builds the availability provider and passed in
    explicitly, so tests can reset it between runs.
    """

    def __init__(
        self,
        failure_threshold: int = 3,
        window_s: float = 300.0,
        cooldown_s: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._failure_threshold = failure_threshold
        self._window_s = window_s
        self._cooldown_s = cooldown_s
        self._clock = clock
        self._states: dict[str, _EndpointState] = {}

    def _get(self, endpoint: str) -> _EndpointState:
        if endpoint not in self._states:
            self._states[endpoint] = _EndpointState()
        return self._states[endpoint]

    def state(self, endpoint: str) -> str:
        return self._get(endpoint).state

    def is_open(self, endpoint: str) -> bool:
        """True while discovery should leave ``endpoint`` alone.

        An open endpoint whose cooldown has passed moves to half-open and
        gets one more discovery attempt.
        """
        s = self._get(endpoint)
        if s.state != "open":
            return False
        if self._clock() - s.opened_at < self._cooldown_s:
            return True
        s.state = "half-open"
        logger.info(f"EndpointHealth: retrying discovery at {endpoint}")
        return False

    def record_success(self, endpoint: str) -> None:
        s = self._get(endpoint)
        if s.state != "closed":
            logger.info(f"EndpointHealth: {endpoint} answered discovery again")
        self._states[endpoint] = _EndpointState()

    def record_failure(self, endpoint: str) -> None:
        """Count a failed discovery attempt against ``endpoint``."""
        s = self._get(endpoint)
        now = self._clock()
        recent = [t for t in s.failures if now - t < self._window_s]
        s.failures = recent[-(_MAX_TRACKED_FAILURES - 1):] + [now]

        if s.state == "half-open":
            self._trip(endpoint, s, now, "retry after cooldown failed")
        elif s.state == "closed" and len(s.failures) >= self._failure_threshold:
            self._trip(endpoint, s, now, f"{len(s.failures)} failed discoveries within {self._window_s:.0f}s")

    def _trip(self, endpoint: str, s: _EndpointState, now: float, why: str) -> None:
        s.state = "open"
        s.opened_at = now
        logger.warning(f"EndpointHealth: skipping {endpoint} for {self._cooldown_s:.0f}s ({why})")

    def reset(self) -> None:
        """Forget all endpoint state."""
        self._states.clear()
