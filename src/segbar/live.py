"""Carriage-return progress line on a text stream."""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from shutil import get_terminal_size
from typing import Any, TypeVar

from segbar.progress import ProgressBar
from segbar.segments import Segment

logger = logging.getLogger("segbar.live")

T = TypeVar("T")


@dataclass(slots=True)
class LiveProgress:
    bar: ProgressBar
    label: str = ""
    enabled: bool = True
    stream: object = field(default_factory=lambda: sys.stderr)
    min_interval_s: float = 0.08
    _last_render: float = field(default=0.0, init=False, repr=False)
    _finished: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self._render(force=True)  # initial line

    @property
    def finished(self) -> bool:
        return self._finished

    def set_count(self, n: int) -> None:
        if self._finished:
            return
        self.bar.set_count(n)
        self._render()

    def advance(self, n: int = 1) -> None:
        if self._finished:
            return
        self.bar.advance(n)
        self._render()

    def finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._render(force=True)
        self._write("\n")

    def line(self) -> str:
        text = self.bar.render()
        if self.label:
            text = f"{self.label} {text}"
        return text

    def __enter__(self) -> LiveProgress:
        return self

    def __exit__(self, *exc: object) -> None:
        self.finish()

    def _write(self, s: str) -> None:
        if not self.enabled:
            return
        try:
            self.stream.write(s)  # type: ignore[attr-defined]
            self.stream.flush()  # type: ignore[attr-defined]
        except Exception as e:  # noqa: BLE001
            # Progress is best-effort; never fail the caller because of rendering.
            logger.debug("disabling progress output: %s: %s", type(e).__name__, e)
            self.enabled = False

    def _render(self, *, force: bool = False) -> None:
        if not self.enabled:
            return

        now = time.monotonic()
        if (not force) and (now - self._last_render) < float(self.min_interval_s):
            return
        self._last_render = now

        cols = get_terminal_size(fallback=(80, 20)).columns
        msg = self.line()[: max(0, cols - 1)]
        self._write("\r" + msg)


def track(
    iterable: Iterable[T],
    total: int | None = None,
    *,
    label: str = "",
    segments: Iterable[Segment] | None = None,
    **live_kwargs: Any,
) -> Iterator[T]:
    """Yield items from `iterable`, advancing a live progress line after each."""
    if total is None:
        total = len(iterable) if hasattr(iterable, "__len__") else 0  # type: ignore[arg-type]

    live = LiveProgress(ProgressBar(total, segments), label=label, **live_kwargs)
    try:
        for item in iterable:
            yield item
            live.advance()
    finally:
        live.finish()
