"""
Think-time between a virtual user's work cycles.

Each user gets its own Pacer so delays never synchronize across users.
Pass a seed to get a reproducible delay sequence.
"""

import random
import time


class Pacer:
    """Random sleep in [0, max_ms) milliseconds before each unit of work."""

    def __init__(self, seed=None):
        self.seed = seed
        self._rng = random.Random(seed)

    def next_delay(self, max_ms):
        """Draw the next delay in whole milliseconds."""
        if max_ms < 0:
            raise ValueError(f"max_ms must be >= 0, got {max_ms}")
        if max_ms == 0:
            return 0
        return self._rng.randrange(int(max_ms))

    def wait(self, max_ms, interrupt=None):
        """
        Block the calling thread for a random delay and return it (ms).

        If ``interrupt`` (a threading.Event-like object) is given, the sleep
        ends as soon as it is set.
        """
        delay_ms = self.next_delay(max_ms)
        seconds = delay_ms / 1000.0
        if interrupt is not None:
            interrupt.wait(seconds)
        elif seconds > 0:
            time.sleep(seconds)
        return delay_ms
