"""Configuration loading for segbar.

This module is intentionally small and deterministic: it only reads
`segbar.toml`, performs light validation, and maps the result onto segments.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from segbar.defaults import set_default_segments
from segbar.errors import SegbarConfigError
from segbar.live import LiveProgress
from segbar.progress import ProgressBar
from segbar.segments import BarLine, Index, Label, Percent, Segment, TimeEstimate

CONFIG_FILENAME = "segbar.toml"

SEGMENT_NAMES = ("label", "index", "bar", "eta", "percent")


@dataclass(frozen=True)
class LayoutConfig:
    segments: list[str]
    separator: str
    label: str


@dataclass(frozen=True)
class BarConfig:
    width: int
    fill: str
    empty: str


@dataclass(frozen=True)
class LiveConfig:
    enabled: bool
    min_interval_s: float


@dataclass(frozen=True)
class SegbarConfig:
    version: int
    layout: LayoutConfig
    bar: BarConfig
    live: LiveConfig


def find_project_root(start: Path) -> Path:
    """Walk upward from `start` (file or directory) looking for `segbar.toml`."""

    cur = start
    try:
        if cur.is_file():
            cur = cur.parent
    except OSError:
        cur = cur.parent

    cur = cur.resolve()
    while True:
        if (cur / CONFIG_FILENAME).is_file():
            return cur
        if cur.parent == cur:
            break
        cur = cur.parent

    raise SegbarConfigError(f"Could not find {CONFIG_FILENAME} by walking upward from start path.")


def _as_table(value: Any, *, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SegbarConfigError(f"Expected [{name}] to be a table.")
    return value


def _as_str_list(value: Any, *, name: str) -> list[str]:
    if not isinstance(value, list) or any(not isinstance(x, str) for x in value):
        raise SegbarConfigError(f"Expected {name} to be a list of strings.")
    return list(value)


def _as_bool(value: Any, *, name: str) -> bool:
    if not isinstance(value, bool):
        raise SegbarConfigError(f"Expected {name} to be a boolean.")
    return value


def _as_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise SegbarConfigError(f"Expected {name} to be an integer.")
    return value


def _as_float(value: Any, *, name: str) -> float:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise SegbarConfigError(f"Expected {name} to be a number.")
    return float(value)


def _as_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str):
        raise SegbarConfigError(f"Expected {name} to be a string.")
    return value


def _as_glyph(value: Any, *, name: str) -> str:
    s = _as_str(value, name=name)
    if len(s) != 1:
        raise SegbarConfigError(f"Expected {name} to be a single character.")
    return s


def load_config(*, root: Path | None = None, config_path: Path | None = None) -> SegbarConfig:
    """Load and validate `segbar.toml`.

    If neither `root` nor `config_path` are provided, the config is discovered
    by walking upward from the current working directory.
    """

    if config_path is None:
        if root is None:
            root = find_project_root(Path.cwd())
        config_path = root / CONFIG_FILENAME

    try:
        raw = config_path.read_bytes()
    except FileNotFoundError as e:
        raise SegbarConfigError(f"Missing {CONFIG_FILENAME} at: {config_path}") from e
    except OSError as e:
        raise SegbarConfigError(f"Failed reading config file: {config_path}") from e

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise SegbarConfigError(f"Config is not valid UTF-8: {config_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise SegbarConfigError(f"Invalid TOML in {config_path}: {e}") from e

    version = data.get("version", None)
    if version is None:
        raise SegbarConfigError(f"Missing required `version = 1` in {CONFIG_FILENAME}.")
    version_i = _as_int(version, name="version")
    if version_i != 1:
        raise SegbarConfigError(f"Unsupported config version: {version_i} (expected 1).")

    layout_tbl = _as_table(data.get("layout"), name="layout")
    bar_tbl = _as_table(data.get("bar"), name="bar")
    live_tbl = _as_table(data.get("live"), name="live")

    if "segments" in layout_tbl:
        segments = _as_str_list(layout_tbl["segments"], name="layout.segments")
    else:
        segments = ["index", "bar", "eta"]

    if "separator" in layout_tbl:
        separator = _as_str(layout_tbl["separator"], name="layout.separator")
    else:
        separator = " "

    if "label" in layout_tbl:
        label = _as_str(layout_tbl["label"], name="layout.label")
    else:
        label = ""

    width = _as_int(bar_tbl["width"], name="bar.width") if "width" in bar_tbl else 30
    fill = _as_glyph(bar_tbl["fill"], name="bar.fill") if "fill" in bar_tbl else "#"
    empty = _as_glyph(bar_tbl["empty"], name="bar.empty") if "empty" in bar_tbl else "-"

    if "enabled" in live_tbl:
        enabled = _as_bool(live_tbl["enabled"], name="live.enabled")
    else:
        enabled = True

    if "min_interval_s" in live_tbl:
        min_interval_s = _as_float(live_tbl["min_interval_s"], name="live.min_interval_s")
    else:
        min_interval_s = 0.08

    # Validation
    unknown = [s for s in segments if s not in SEGMENT_NAMES]
    if unknown:
        raise SegbarConfigError(
            f"Invalid config: unknown layout.segments {unknown!r} "
            f"(expected any of {', '.join(SEGMENT_NAMES)})."
        )

    if width < 1:
        raise SegbarConfigError("Invalid config: bar.width must be >= 1.")

    if min_interval_s < 0:
        raise SegbarConfigError("Invalid config: live.min_interval_s must be >= 0.")

    return SegbarConfig(
        version=version_i,
        layout=LayoutConfig(segments=segments, separator=separator, label=label),
        bar=BarConfig(width=width, fill=fill, empty=empty),
        live=LiveConfig(enabled=enabled, min_interval_s=min_interval_s),
    )


def build_segments(cfg: SegbarConfig) -> tuple[Segment, ...]:
    out: list[Segment] = []
    for name in cfg.layout.segments:
        if name == "label":
            out.append(Label(cfg.layout.label))
        elif name == "index":
            out.append(Index())
        elif name == "bar":
            out.append(BarLine(width=cfg.bar.width, fill=cfg.bar.fill, empty=cfg.bar.empty))
        elif name == "eta":
            out.append(TimeEstimate())
        elif name == "percent":
            out.append(Percent())
        else:
            raise SegbarConfigError(f"Unknown segment name: {name!r}")
    return tuple(out)


def apply_config(cfg: SegbarConfig) -> tuple[Segment, ...]:
    """Install the configured segments as the process-wide default."""
    segments = build_segments(cfg)
    set_default_segments(segments)
    return segments


def make_bar(cfg: SegbarConfig, total: int, **kwargs: Any) -> ProgressBar:
    """Build a bar from explicit config, bypassing the process-wide default.

    Segments always come from `cfg`; pass them to `ProgressBar` directly to use others.
    """
    if "segments" in kwargs:
        raise TypeError("make_bar() takes its segments from cfg, not from a segments= argument")
    kwargs.setdefault("separator", cfg.layout.separator)
    return ProgressBar(total, build_segments(cfg), **kwargs)


def make_live(cfg: SegbarConfig, total: int, **kwargs: Any) -> LiveProgress:
    kwargs.setdefault("enabled", cfg.live.enabled)
    kwargs.setdefault("min_interval_s", cfg.live.min_interval_s)
    return LiveProgress(make_bar(cfg, total), **kwargs)
