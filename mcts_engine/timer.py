from __future__ import annotations

import time


class TurnTimer:
    """Wall clock for a single decision, started on construction."""

    def __init__(self) -> None:
        self._start = time.perf_counter()

    @property
    def milliseconds_elapsed_this_turn(self) -> int:
        return int((time.perf_counter() - self._start) * 1000)
