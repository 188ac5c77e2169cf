"""Clocks used to evaluate caller deadlines."""

import time
from dataclasses import dataclass


def system_clock() -> int:
    """Current unix time in whole seconds."""
    return int(time.time())


@dataclass
class ManualClock:
    """Clock that only moves when told to. Used by the harness and tests."""
    now: int = 1_700_000_000

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now
