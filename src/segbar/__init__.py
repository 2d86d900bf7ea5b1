from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from segbar.defaults import (
    DEFAULT_SEGMENTS,
    get_default_segments,
    override_default_segments,
    reset_default_segments,
    set_default_segments,
)
from segbar.errors import SegbarConfigError, SegbarError
from segbar.live import LiveProgress, track
from segbar.progress import ProgressBar
from segbar.segments import BarLine, Index, Label, Percent, RenderState, Segment, TimeEstimate


def _package_version() -> str:
    try:
        return version("segbar")
    except PackageNotFoundError:
        # Running from a source checkout, or otherwise not installed.
        return "0.0.0"


__version__ = _package_version()

__all__ = [
    "DEFAULT_SEGMENTS",
    "BarLine",
    "Index",
    "Label",
    "LiveProgress",
    "Percent",
    "ProgressBar",
    "RenderState",
    "Segment",
    "SegbarConfigError",
    "SegbarError",
    "TimeEstimate",
    "__version__",
    "get_default_segments",
    "override_default_segments",
    "reset_default_segments",
    "set_default_segments",
    "track",
]
