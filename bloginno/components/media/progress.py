"""
Upload progress apportioning.

A logical operation may upload an image and a video back to back. The UI
renders a single bar for the whole operation, so each upload is given a
phase of the 0-100 range (image first, then video) and the combined stream
of values is forced to be non-decreasing.
"""

from __future__ import annotations

from bloginno.core.ports.media import ProgressCallback


class ProgressReporter:
    """Forwards monotonic progress values in [0, 100] to an observer."""

    def __init__(self, observer: ProgressCallback | None = None) -> None:
        self._observer = observer
        self._last: float | None = None

    @property
    def last(self) -> float:
        return self._last if self._last is not None else 0.0

    def report(self, value: float) -> None:
        value = min(max(value, 0.0), 100.0)
        if self._last is not None and value <= self._last:
            return
        self._last = value
        if self._observer is not None:
            self._observer(value)

    def phase(self, start: float, end: float) -> ProgressCallback:
        """Map a single upload's 0-100 progress onto [start, end]."""
        span = end - start

        def _report(pct: float) -> None:
            if pct >= 100.0:
                self.report(end)
            else:
                self.report(start + span * max(pct, 0.0) / 100.0)

        return _report

    def phases(self, count: int) -> list[ProgressCallback]:
        """Split the range evenly across `count` sequential uploads."""
        if count <= 0:
            return []
        step = 100.0 / count
        return [
            self.phase(i * step, 100.0 if i == count - 1 else (i + 1) * step)
            for i in range(count)
        ]
