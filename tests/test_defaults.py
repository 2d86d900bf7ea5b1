from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor

import pytest

from segbar.defaults import (
    DEFAULT_SEGMENTS,
    get_default_segments,
    override_default_segments,
    reset_default_segments,
    set_default_segments,
)
from segbar.errors import SegbarConfigError
from segbar.progress import ProgressBar
from segbar.segments import Index, Label, Percent


@pytest.fixture(autouse=True)
def _restore_defaults() -> Iterator[None]:
    reset_default_segments()
    yield
    reset_default_segments()


def test_new_bar_copies_process_default() -> None:
    pb = ProgressBar(3)
    assert pb.segments == DEFAULT_SEGMENTS


def test_changing_default_does_not_affect_existing_bar() -> None:
    before = ProgressBar(4)
    before.set_count(2)
    line = before.render()

    set_default_segments([Percent()])

    after = ProgressBar(4)
    after.set_count(2)
    assert after.render() == "50%"
    assert before.segments == DEFAULT_SEGMENTS
    assert before.render().split(" ETA")[0] == line.split(" ETA")[0]


def test_mutating_the_list_passed_to_set_default_has_no_effect() -> None:
    segs = [Index()]
    set_default_segments(segs)
    segs.append(Percent())
    assert get_default_segments() == (Index(),)


def test_set_default_rejects_non_segments() -> None:
    with pytest.raises(SegbarConfigError):
        set_default_segments([Index(), "not a segment"])  # type: ignore[list-item]
    assert get_default_segments() == DEFAULT_SEGMENTS


def test_override_applies_and_restores() -> None:
    with override_default_segments([Label("tmp")]) as applied:
        assert applied == (Label("tmp"),)
        assert ProgressBar(1).render() == "tmp"
    assert get_default_segments() == DEFAULT_SEGMENTS


def test_override_restores_when_body_raises() -> None:
    set_default_segments([Index()])
    with pytest.raises(RuntimeError, match="boom"):
        with override_default_segments([Percent()]):
            raise RuntimeError("boom")
    assert get_default_segments() == (Index(),)


def test_nested_overrides_unwind_in_order() -> None:
    with override_default_segments([Label("outer")]):
        with override_default_segments([Label("inner")]):
            assert get_default_segments() == (Label("inner"),)
        assert get_default_segments() == (Label("outer"),)
    assert get_default_segments() == DEFAULT_SEGMENTS


def test_override_is_never_visible_to_other_threads() -> None:
    stop = threading.Event()
    override = (Label("scoped"),)

    def overrider() -> int:
        n = 0
        while True:
            with override_default_segments(override):
                assert ProgressBar(1).segments == override
            n += 1
            if stop.is_set():
                return n
            time.sleep(0)

    def builder() -> int:
        mismatched = 0
        for _ in range(500):
            if ProgressBar(10).segments != DEFAULT_SEGMENTS:
                mismatched += 1
        return mismatched

    with ThreadPoolExecutor(max_workers=9) as pool:
        over = pool.submit(overrider)
        builders = [pool.submit(builder) for _ in range(8)]
        results = [f.result() for f in builders]
        stop.set()
        assert over.result() > 0

    assert results == [0] * 8
    assert get_default_segments() == DEFAULT_SEGMENTS


def test_default_changes_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="segbar.defaults"):
        with override_default_segments([Index()]):
            pass
    messages = [r.getMessage() for r in caplog.records if r.name == "segbar.defaults"]
    assert any("overridden" in m for m in messages)
    assert any("restored" in m for m in messages)


def test_override_is_not_visible_to_other_asyncio_tasks() -> None:
    scoped = (Label("scoped"),)

    async def overriding() -> tuple[object, ...]:
        with override_default_segments(scoped):
            await asyncio.sleep(0.05)
            return ProgressBar(1).segments

    async def unrelated() -> tuple[object, ...]:
        await asyncio.sleep(0.01)
        return ProgressBar(1).segments

    async def main() -> tuple[tuple[object, ...], tuple[object, ...]]:
        a, b = await asyncio.gather(overriding(), unrelated())
        return a, b

    inside, outside = asyncio.run(main())
    assert inside == scoped
    assert outside == DEFAULT_SEGMENTS


def test_worker_thread_inside_override_scope_does_not_block() -> None:
    seen: list[tuple[object, ...]] = []

    def worker() -> None:
        seen.append(ProgressBar(1).segments)

    with override_default_segments([Label("x")]):
        t = threading.Thread(target=worker)
        t.start()
        t.join(timeout=5)
        assert not t.is_alive()

    assert seen == [DEFAULT_SEGMENTS]


def test_set_default_inside_override_scope_persists(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="segbar.defaults"):
        with override_default_segments([Label("tmp")]):
            set_default_segments([Percent()])
            assert get_default_segments() == (Label("tmp"),)
    assert get_default_segments() == (Percent(),)
    assert any("inside an override scope" in r.getMessage() for r in caplog.records)
