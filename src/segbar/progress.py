from __future__ import annotations

import time
from collections.abc import Callable, Iterable

from segbar.defaults import get_default_segments
from segbar.segments import RenderState, Segment, render_line


class ProgressBar:
    """Count/total pair rendered through an ordered sequence of segments.

    `segments` defaults to a snapshot of the process-wide default taken here;
    the bar never looks at the shared default again.
    """

    __slots__ = ("total", "count", "segments", "separator", "clock", "start_time")

    def __init__(
        self,
        total: int,
        segments: Iterable[Segment] | None = None,
        *,
        separator: str = " ",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.total = max(0, int(total))
        self.count = 0
        if segments is None:
            self.segments: tuple[Segment, ...] = get_default_segments()
        else:
            self.segments = tuple(segments)
        self.separator = separator
        self.clock = clock
        self.start_time = clock()

    def set_count(self, n: int) -> None:
        # Counts beyond `total` are allowed and render as overflow.
        self.count = max(0, int(n))

    def advance(self, n: int = 1) -> None:
        self.set_count(self.count + n)

    @property
    def fraction(self) -> float:
        return (self.count / self.total) if self.total else 0.0

    def state(self) -> RenderState:
        elapsed = max(0.0, float(self.clock() - self.start_time))
        return RenderState(count=self.count, total=self.total, elapsed_s=elapsed)

    def render(self) -> str:
        return render_line(self.segments, self.state(), self.separator)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"ProgressBar(count={self.count}, total={self.total}, segments={self.segments!r})"
