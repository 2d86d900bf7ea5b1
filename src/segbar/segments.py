"""Display segments: each renders one fragment of a progress line.

Every segment is a pure function of a `RenderState`. The built-in segments are
frozen dataclasses, so one instance can be shared by any number of bars.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class RenderState:
    """Snapshot of a bar at render time."""

    count: int
    total: int
    elapsed_s: float


@runtime_checkable
class Segment(Protocol):
    def render(self, state: RenderState) -> str: ...


def _hms(seconds: float) -> str:
    secs = max(0, int(seconds))
    h, rem = divmod(secs, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


@dataclass(frozen=True, slots=True)
class Label:
    text: str = ""

    def render(self, state: RenderState) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class Index:
    """`k of n`."""

    def render(self, state: RenderState) -> str:
        return f"{state.count} of {state.total}"


@dataclass(frozen=True, slots=True)
class BarLine:
    """Fixed-width glyph track, e.g. `[#########---------]`.

    The filled part is clamped to `width`, so an overfull bar keeps its width.
    """

    width: int = 30
    fill: str = "#"
    empty: str = "-"

    def render(self, state: RenderState) -> str:
        width = max(0, int(self.width))
        filled = (width * state.count // state.total) if state.total > 0 else 0
        filled = min(max(0, filled), width)
        return "[" + self.fill * filled + self.empty * (width - filled) + "]"


@dataclass(frozen=True, slots=True)
class Percent:
    """Rounded percentage; `0%` for an empty total, unclamped above 100."""

    def render(self, state: RenderState) -> str:
        if state.total <= 0:
            return "0%"
        pct = math.floor(100 * state.count / state.total + 0.5)
        return f"{pct}%"


@dataclass(frozen=True, slots=True)
class TimeEstimate:
    """Remaining time and throughput, e.g. `ETA: 00:01:05 (at 3.20) it/s)`."""

    def render(self, state: RenderState) -> str:
        rate = 0.0
        if state.elapsed_s > 0 and state.count > 0:
            rate = state.count / state.elapsed_s

        eta = 0.0
        if rate > 0:
            eta = max(state.total - state.count, 0) / rate

        return f"ETA: {_hms(eta)} (at {rate:.2f}) it/s)"


def render_line(segments: tuple[Segment, ...], state: RenderState, separator: str = " ") -> str:
    """Join every segment's fragment for `state`, in order."""
    return separator.join(seg.render(state) for seg in segments)
