"""Wall-clock budget for one analysis request."""

import time
from typing import Callable, Optional

from .errors import DeadlineError


class Deadline:
    """
    Tracks remaining time for a request.

    check() is called between stages; timeout_for() bounds each network
    call so a slow upstream cannot run past the budget.
    """

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.seconds = seconds
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    def expired(self) -> bool:
        return self.remaining() <= 0

    def check(self, stage: str) -> None:
        """Raise DeadlineError if the budget is spent before `stage` starts."""
        if self.expired():
            raise DeadlineError(
                f'Deadline of {self.seconds:.0f}s exceeded before {stage}',
                stage=stage,
            )

    def timeout_for(self, stage: str, limit: Optional[float] = None) -> float:
        """Timeout for a network call in `stage`, capped at `limit`."""
        self.check(stage)
        remaining = self.remaining()
        return min(limit, remaining) if limit else remaining
