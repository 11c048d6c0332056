"""
Retry Scheduler: client-side countdown and automatic re-attempt.

State machine (one user-initiated generation = one cycle):

    IDLE ──begin──► IN_FLIGHT ──Ok──────────► DONE
                       │  ▲
                       │  └── deadline fires (attempt + 1)
                       │                 ▲
                       ├──AllLimited──► COUNTING_DOWN   (tick every second, display only)
                       │
                       └──Error───────► FAILED          (no automatic retry)

Invariants:
- One cycle at a time. begin_generation() and close() cancel both timers
  and any retry request still in flight, then bump the epoch; anything
  tagged with an older epoch is ignored.
- The tick timer and the deadline timer are started together and cancelled
  together.
- No maximum attempt count: AllLimited always leads to another countdown.

Timers come from an event loop style source (anything with
``call_later(delay, callback, *args)`` returning a handle with ``cancel()``).
The running asyncio loop is used by default; tests pass a manual clock.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Sequence

from dispatcher import AllLimited, DispatchResult, Error, Ok

from .courses import Course, can_generate

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    COUNTING_DOWN = "counting_down"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class RetryState:
    """Snapshot of one generation cycle, safe to hand to renderers."""

    phase: Phase = Phase.IDLE
    attempt: int = 1
    wait_seconds: Optional[int] = None
    remaining_seconds: Optional[int] = None
    text: str = ""
    error: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.phase in (Phase.IN_FLIGHT, Phase.COUNTING_DOWN)

    @property
    def is_rate_limited(self) -> bool:
        return self.is_loading and self.wait_seconds is not None

    @property
    def progress_percent(self) -> int:
        """Share of the wait still remaining, 100 -> 0."""
        if not self.wait_seconds or self.remaining_seconds is None:
            return 0
        percent = math.floor(self.remaining_seconds / self.wait_seconds * 100 + 0.5)
        return max(0, min(100, percent))


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerSource(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


GenerateFn = Callable[[Sequence[Course]], Awaitable[DispatchResult]]
StateListener = Callable[[RetryState], None]


class RetryScheduler:
    """
    Drives generation attempts for one UI component.

    Usage:
        scheduler = RetryScheduler(client.generate_integration, on_change=render)
        await scheduler.begin_generation(courses)
        await scheduler.wait()        # until DONE / FAILED
        scheduler.close()             # teardown

    ``generate`` returns Ok / AllLimited / Error or raises; a raised
    exception is treated like Error.
    """

    def __init__(
        self,
        generate: GenerateFn,
        *,
        tick_seconds: float = 1.0,
        timers: Optional[TimerSource] = None,
        on_change: Optional[StateListener] = None,
    ):
        self._generate = generate
        self.tick_seconds = tick_seconds
        self._timers = timers
        self._listeners: List[StateListener] = [on_change] if on_change else []

        self.state = RetryState()
        self._epoch = 0
        self._payload: List[Course] = []
        self._tick_handle: Optional[TimerHandle] = None
        self._deadline_handle: Optional[TimerHandle] = None
        self._task: Optional[asyncio.Task] = None

    # ──────────────────────────────────────────────────────────
    # PUBLIC
    # ──────────────────────────────────────────────────────────

    @property
    def timers_active(self) -> bool:
        return self._tick_handle is not None or self._deadline_handle is not None

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    async def begin_generation(self, courses: Sequence[Course]) -> RetryState:
        """Start a fresh cycle. No-op unless 2-4 courses are given."""
        if not can_generate(courses):
            logger.debug(f"begin_generation ignored: {len(courses or [])} course(s) selected")
            return self.state

        self._cancel_timers()
        self._epoch += 1
        epoch = self._epoch
        self._payload = list(courses)
        await self._cancel_task()

        self._set(RetryState(phase=Phase.IN_FLIGHT, attempt=1))
        await self._attempt(epoch)
        return self.state

    async def wait(self) -> RetryState:
        """Wait until the current cycle leaves IN_FLIGHT / COUNTING_DOWN."""
        while self.state.is_loading:
            task = self._task
            if task is not None and not task.done():
                # A superseded retry may be cancelled while we wait on it
                await asyncio.wait({task})
            else:
                await asyncio.sleep(self.tick_seconds / 10)
        return self.state

    def close(self) -> None:
        """Teardown: cancel timers and drop the current cycle."""
        self._cancel_timers()
        self._epoch += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        self.state = RetryState()

    # ──────────────────────────────────────────────────────────
    # CYCLE
    # ──────────────────────────────────────────────────────────

    async def _attempt(self, epoch: int) -> None:
        attempt = self.state.attempt
        try:
            result = await self._generate(self._payload)
        except Exception as e:
            if epoch != self._epoch:
                return
            logger.error(f"Integration attempt {attempt} failed: {e}")
            self._fail(str(e))
            return

        if epoch != self._epoch:
            logger.debug(f"Ignoring response from superseded cycle (attempt {attempt})")
            return

        if isinstance(result, Ok):
            self._cancel_timers()
            self._set(replace(
                self.state,
                phase=Phase.DONE,
                text=result.text,
                wait_seconds=None,
                remaining_seconds=None,
            ))
        elif isinstance(result, AllLimited):
            self._start_countdown(epoch, result.retry_after_seconds)
        elif isinstance(result, Error):
            logger.error(f"Integration attempt {attempt} failed: {result.message}")
            self._fail(result.message)
        else:
            self._fail(f"Unexpected result: {result!r}")

    def _start_countdown(self, epoch: int, seconds: float) -> None:
        delay = max(1, math.ceil(seconds))
        self._cancel_timers()
        self._set(replace(
            self.state,
            phase=Phase.COUNTING_DOWN,
            wait_seconds=delay,
            remaining_seconds=delay,
        ))
        logger.info(f"All keys busy; attempt {self.state.attempt + 1} in {delay}s")

        timers = self._get_timers()
        self._tick_handle = timers.call_later(self.tick_seconds, self._tick, epoch)
        self._deadline_handle = timers.call_later(delay * self.tick_seconds, self._fire, epoch)

    def _tick(self, epoch: int) -> None:
        if epoch != self._epoch or self.state.phase is not Phase.COUNTING_DOWN:
            return
        remaining = max(0, (self.state.remaining_seconds or 0) - 1)
        self._set(replace(self.state, remaining_seconds=remaining))
        # Keeps ticking (at 0) until the deadline cancels it
        self._tick_handle = self._get_timers().call_later(self.tick_seconds, self._tick, epoch)

    def _fire(self, epoch: int) -> None:
        if epoch != self._epoch or self.state.phase is not Phase.COUNTING_DOWN:
            return
        self._cancel_timers()
        self._set(replace(
            self.state,
            phase=Phase.IN_FLIGHT,
            attempt=self.state.attempt + 1,
            remaining_seconds=0,
        ))
        self._task = asyncio.get_running_loop().create_task(self._attempt(epoch))

    def _fail(self, message: str) -> None:
        self._cancel_timers()
        self._set(replace(
            self.state,
            phase=Phase.FAILED,
            error=message,
            wait_seconds=None,
            remaining_seconds=None,
        ))

    # ──────────────────────────────────────────────────────────
    # HELPERS
    # ──────────────────────────────────────────────────────────

    def _get_timers(self) -> TimerSource:
        return self._timers if self._timers is not None else asyncio.get_running_loop()

    async def _cancel_task(self) -> None:
        """Cancel the in-flight retry and wait until its request is gone."""
        task, self._task = self._task, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        await asyncio.wait({task})

    def _cancel_timers(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None
        if self._deadline_handle is not None:
            self._deadline_handle.cancel()
            self._deadline_handle = None

    def _set(self, state: RetryState) -> None:
        self.state = state
        for listener in list(self._listeners):
            listener(state)
