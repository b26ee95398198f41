"""
Delay and sound timers, counting down at 60Hz of wall-clock time.
"""

import time
from typing import Callable, Optional

from .constants import TIMER_INTERVAL


class Timers:
    """
    Both timers drop by one when at least TIMER_INTERVAL seconds have passed
    since the previous decrement. tick() is called once per emulator cycle, so
    the countdown rate does not depend on how fast instructions run.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.clock = clock or time.monotonic
        self.delay = 0
        self.sound = 0
        self.last_tick = self.clock()

    def tick(self) -> bool:
        """Decrement both timers if a 60Hz period has elapsed. Returns True if it did."""
        now = self.clock()
        if now - self.last_tick < TIMER_INTERVAL:
            return False

        self.last_tick = now
        if self.delay > 0:
            self.delay -= 1
        if self.sound > 0:
            self.sound -= 1
        return True
