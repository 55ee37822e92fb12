"""Adaptive percentage progress reports."""

from __future__ import annotations

import sys
import time
from typing import Callable, Optional, TextIO


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class ProgressReporter:
    """Prints "N%..." reports at roughly regular wall-clock intervals.

    The number of steps between clock checks adapts so that checks happen about
    every ``report_interval`` milliseconds; a report is printed only if more than
    ``min_report_interval`` milliseconds passed since the last one.
    """

    def __init__(
        self,
        maxsteps: int,
        init_report_step: int,
        report_interval: int = 3000,
        min_report_interval: int = 1000,
        prefix: str = "",
        stream: Optional[TextIO] = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.maxsteps = maxsteps
        self.prefix = prefix
        self._report_step = init_report_step
        self._report_interval = report_interval
        self._min_report_interval = min_report_interval
        self._stream = stream
        self._clock = clock
        self._numsteps = 0
        self._steps_since_report = 0
        self._last_progress = -1
        self._last_clock = clock()
        self._elapsed = 0

    @property
    def elapsed(self) -> int:
        """Milliseconds between the last two reports."""
        return self._elapsed

    @property
    def elapsed_steps(self) -> int:
        return self._numsteps

    def _emit(self, text: str) -> None:
        stream = self._stream if self._stream is not None else sys.stderr
        stream.write(text)
        stream.flush()

    def report(self, delta_steps_done: int) -> None:
        self._steps_since_report += delta_steps_done
        self._numsteps += delta_steps_done
        if self._steps_since_report <= self._report_step:
            return

        now = self._clock()
        delta = now - self._last_clock
        if delta:
            self._report_step = int(self._report_step * (self._report_interval / delta) + 0.5)
        else:
            self._report_step *= 10

        if delta > self._min_report_interval:
            progress = int(100.0 * self._numsteps / self.maxsteps) if self.maxsteps else 0
            progress = min(progress, 100)

            if self._last_progress < 0 and self.prefix:
                self._emit(self.prefix)

            if progress != self._last_progress:
                self._emit(f"{progress}%" if progress == 100 else f"{progress}%...")
            else:
                self._emit(".")

            self._last_progress = progress
            self._steps_since_report = 0
            self._last_clock = now
            self._elapsed = delta

    def report_last(self) -> None:
        """Finish the progress line if anything was reported."""
        if self._last_progress >= 0:
            self._emit("100%\n" if self._last_progress != 100 else "\n")