# tests/test_debounce.py
"""Tests for per-path change debouncing."""

import asyncio

import pytest

from writing_tracker.goals.debounce import ChangeDebouncer

WAIT = 0.1


class Recorder:
    """Handler that records every call."""

    def __init__(self, delay: float = 0.0, fail_on=None):
        self.calls = []
        self.delay = delay
        self.fail_on = fail_on
        self.active = 0
        self.max_active = 0

    async def __call__(self, path, content):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if path == self.fail_on:
                raise RuntimeError("boom")
            self.calls.append((path, content))
        finally:
            self.active -= 1


class TestChangeDebouncer:
    """Tests for ChangeDebouncer."""

    @pytest.mark.asyncio
    async def test_burst_collapses_to_one_call(self):
        """N events in the window produce one call with the last content."""
        handler = Recorder()
        debouncer = ChangeDebouncer(handler, wait=WAIT)

        for i in range(5):
            debouncer.submit("draft.md", f"version {i}")

        await asyncio.sleep(WAIT * 3)

        assert handler.calls == [("draft.md", "version 4")]
        assert debouncer.pending == []

    @pytest.mark.asyncio
    async def test_new_event_restarts_timer(self):
        handler = Recorder()
        debouncer = ChangeDebouncer(handler, wait=WAIT)

        debouncer.submit("draft.md", "a")
        await asyncio.sleep(WAIT * 0.6)
        debouncer.submit("draft.md", "b")
        await asyncio.sleep(WAIT * 0.6)

        assert handler.calls == []
        assert debouncer.pending == ["draft.md"]

        await asyncio.sleep(WAIT * 2)

        assert handler.calls == [("draft.md", "b")]

    @pytest.mark.asyncio
    async def test_paths_are_independent(self):
        """A noisy file does not hold back another file's update."""
        handler = Recorder()
        debouncer = ChangeDebouncer(handler, wait=WAIT)

        debouncer.submit("quiet.md")
        for _ in range(4):
            debouncer.submit("noisy.md")
            await asyncio.sleep(WAIT * 0.4)

        assert ("quiet.md", None) in handler.calls
        assert ("noisy.md", None) not in handler.calls

        await asyncio.sleep(WAIT * 2)
        assert sorted(handler.calls) == [("noisy.md", None), ("quiet.md", None)]

    @pytest.mark.asyncio
    async def test_same_path_calls_do_not_overlap(self):
        """An event during a running call waits for it to finish."""
        handler = Recorder(delay=WAIT * 2)
        debouncer = ChangeDebouncer(handler, wait=WAIT / 4)

        debouncer.submit("draft.md", "first")
        await asyncio.sleep(WAIT / 2)  # first call is now running
        debouncer.submit("draft.md", "second")

        await asyncio.sleep(WAIT * 6)

        assert handler.calls == [("draft.md", "first"), ("draft.md", "second")]
        assert handler.max_active == 1

    @pytest.mark.asyncio
    async def test_flush_runs_pending_now(self):
        handler = Recorder()
        debouncer = ChangeDebouncer(handler, wait=10)

        debouncer.submit("a.md", "x")
        debouncer.submit("b.md")
        await debouncer.flush()

        assert sorted(handler.calls) == [("a.md", "x"), ("b.md", None)]
        assert debouncer.pending == []

    @pytest.mark.asyncio
    async def test_cancel_all(self):
        handler = Recorder()
        debouncer = ChangeDebouncer(handler, wait=WAIT)

        debouncer.submit("a.md")
        debouncer.cancel_all()
        await asyncio.sleep(WAIT * 2)

        assert handler.calls == []

    @pytest.mark.asyncio
    async def test_handler_error_does_not_stop_later_events(self):
        handler = Recorder(fail_on="bad.md")
        debouncer = ChangeDebouncer(handler, wait=WAIT / 2)

        debouncer.submit("bad.md")
        await asyncio.sleep(WAIT * 2)
        debouncer.submit("good.md")
        await asyncio.sleep(WAIT * 2)

        assert handler.calls == [("good.md", None)]

    @pytest.mark.asyncio
    async def test_locks_released_after_calls_finish(self):
        """Per-path locks exist only while a call for that path runs or waits."""
        handler = Recorder(delay=WAIT)
        debouncer = ChangeDebouncer(handler, wait=WAIT / 4)

        for i in range(20):
            debouncer.submit(f"note-{i}.md")
        debouncer.submit("draft.md", "first")
        await asyncio.sleep(WAIT / 2)  # every call is now running
        debouncer.submit("draft.md", "second")
        await asyncio.sleep(WAIT / 2)

        assert "draft.md" in debouncer._locks

        await asyncio.sleep(WAIT * 4)

        assert len(handler.calls) == 22
        assert handler.calls[-1] == ("draft.md", "second")
        assert debouncer._locks == {}
        assert debouncer._lock_users == {}
