"""Composite focus tracking and schedulers.

A widget made of several controls is "focused" while any of them is. Moving
focus from one sibling to another produces a blur then a focus; the tracker
waits a short settle delay after each blur and only reports that focus left
when no control is focused at that point.
"""

import asyncio
import heapq
import itertools
import logging
from typing import Callable, List, Optional, Set, Tuple

from .controls import Cleanup, Control, TimerHandle

logger = logging.getLogger(__name__)


class CompositeFocusTracker:
    """Counts focused constituent controls of one widget.

    Example:
        tracker = CompositeFocusTracker(scheduler, 100, widget.exit_edit)
        tracker.attach(number_input)
        tracker.attach(unit_dropdown)
    """

    def __init__(self, scheduler, settle_ms: int, on_focus_left: Callable[[], None]):
        self._scheduler = scheduler
        self._settle_ms = settle_ms
        self._on_focus_left = on_focus_left
        self._focused: Set[int] = set()
        self._pending: Optional[TimerHandle] = None
        self._cleanups: List[Cleanup] = []

    @property
    def focused_count(self) -> int:
        return len(self._focused)

    @property
    def has_pending_check(self) -> bool:
        return self._pending is not None

    def attach(self, control: Control) -> None:
        control_id = id(control)
        self._cleanups.append(control.on_focus(lambda: self._focus_in(control_id)))
        self._cleanups.append(control.on_blur(lambda: self._focus_out(control_id)))

    def reset(self) -> None:
        """Forget focus state (e.g. after leaving edit mode programmatically)."""
        self.cancel()
        self._focused.clear()

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def detach_all(self) -> None:
        self.cancel()
        for cleanup in self._cleanups:
            cleanup()
        self._cleanups.clear()
        self._focused.clear()

    def _focus_in(self, control_id: int) -> None:
        self._focused.add(control_id)

    def _focus_out(self, control_id: int) -> None:
        self._focused.discard(control_id)
        self.cancel()
        self._pending = self._scheduler.call_later(self._settle_ms, self._check)

    def _check(self) -> None:
        self._pending = None
        if not self._focused:
            self._on_focus_left()


# ─────────────────────────────────────────────────────────────────
# Schedulers
# ─────────────────────────────────────────────────────────────────


class _ManualHandle:
    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by explicit ``advance`` calls.

    Used by tests and by headless hosts without an event loop.
    """

    def __init__(self):
        self.now = 0
        self._queue: List[Tuple[int, int, _ManualHandle, Callable[[], None]]] = []
        self._counter = itertools.count()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle()
        heapq.heappush(self._queue, (self.now + max(delay_ms, 0), next(self._counter), handle, callback))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)

    def advance(self, ms: int) -> int:
        """Move time forward, running due callbacks in order.

        Returns:
            Number of callbacks run.
        """
        target = self.now + ms
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            self.now = due
            if handle.cancelled:
                continue
            callback()
            ran += 1
        self.now = target
        return ran

    def run_all(self) -> int:
        ran = 0
        while self._queue:
            ran += self.advance(self._queue[0][0] - self.now)
        return ran


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000, callback)
