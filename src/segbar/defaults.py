"""Process-wide default segment sequence.

Bars read the default exactly once, at construction, and keep their own copy.
The process-wide value is guarded by a lock. `override_default_segments` never
touches it: the override lives in a context variable, so it is seen only by
code running in the overriding context (the same thread, the same asyncio
task, or tasks created inside the scope).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from segbar.errors import SegbarConfigError
from segbar.segments import BarLine, Index, Segment, TimeEstimate

logger = logging.getLogger("segbar.defaults")

DEFAULT_SEGMENTS: tuple[Segment, ...] = (Index(), BarLine(), TimeEstimate())

_lock = threading.Lock()
_current: tuple[Segment, ...] = DEFAULT_SEGMENTS

_override: ContextVar[tuple[Segment, ...] | None] = ContextVar(
    "segbar_default_override", default=None
)


def _as_segments(segments: Iterable[Segment]) -> tuple[Segment, ...]:
    out = tuple(segments)
    for seg in out:
        if not callable(getattr(seg, "render", None)):
            raise SegbarConfigError(f"Not a segment (no render method): {seg!r}")
    return out


def get_default_segments() -> tuple[Segment, ...]:
    scoped = _override.get()
    if scoped is not None:
        return scoped
    with _lock:
        return _current


def set_default_segments(segments: Iterable[Segment]) -> None:
    """Replace the process-wide default. Existing bars are unaffected.

    Inside an `override_default_segments` scope the new value is stored, but
    the current context keeps seeing the override until the scope exits.
    """
    global _current

    new = _as_segments(segments)
    with _lock:
        _current = new
    logger.debug("default segments set to %r", new)
    if _override.get() is not None:
        logger.debug("default segments set inside an override scope; the override stays in effect")


def reset_default_segments() -> None:
    set_default_segments(DEFAULT_SEGMENTS)


@contextmanager
def override_default_segments(segments: Iterable[Segment]) -> Iterator[tuple[Segment, ...]]:
    """Temporarily replace the default for the current context only.

    Other threads, and asyncio tasks created outside the scope, keep seeing the
    process-wide default. The prior value is restored on exit, even on error.
    """
    new = _as_segments(segments)
    token = _override.set(new)
    logger.debug("default segments overridden with %r", new)
    try:
        yield new
    finally:
        _override.reset(token)
        logger.debug("default segments override restored")
