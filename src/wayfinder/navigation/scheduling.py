"""Deferred scheduling for the transition engine.

The engine only ever needs three things from its host: run a callback
"after this turn", run one after a delay, and drive an awaitable to
completion.  ``ManualScheduler`` leaves the timing to the host (call
``flush()`` at the render boundary); ``TaskGroupScheduler`` runs
everything on an anyio task group.
"""

import heapq
import itertools
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import anyio
import anyio.abc

from wayfinder.errors import ConfigurationError

logger = logging.getLogger("wayfinder.navigation")

type Callback = Callable[[], Any]


class Scheduler(Protocol):
    """What the engine needs from the host's event loop."""

    def call_soon(self, callback: Callback) -> None: ...

    def call_later(self, delay: float, callback: Callback) -> None: ...

    def spawn(
        self,
        factory: Callable[[], Awaitable[Any]],
        on_result: Callable[[Any], Any],
        on_error: Callable[[BaseException], Any],
    ) -> None: ...


class ManualScheduler:
    """Deterministic scheduler driven by the host.

    Nothing runs until the host calls ``flush()`` (run everything that is
    due) or ``advance(seconds)`` (move the virtual clock, then flush).

    Usage::

        scheduler = ManualScheduler()
        router = Router(routes, scheduler=scheduler)
        router.push("/users")
        scheduler.flush()  # post-commit callbacks run here
    """

    __slots__ = ("_counter", "_ready", "_timers", "now")

    def __init__(self) -> None:
        self.now = 0.0
        self._ready: deque[Callback] = deque()
        self._timers: list[tuple[float, int, Callback]] = []
        # Tie-breaker so timers due at the same time keep scheduling order
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._ready) + len(self._timers)

    def call_soon(self, callback: Callback) -> None:
        self._ready.append(callback)

    def call_later(self, delay: float, callback: Callback) -> None:
        heapq.heappush(self._timers, (self.now + max(delay, 0.0), next(self._counter), callback))

    def spawn(
        self,
        factory: Callable[[], Awaitable[Any]],
        on_result: Callable[[Any], Any],
        on_error: Callable[[BaseException], Any],
    ) -> None:
        msg = (
            "ManualScheduler cannot run awaitables. Use TaskGroupScheduler for "
            "async guards and async lazy views."
        )
        raise ConfigurationError(msg)

    def flush(self) -> int:
        """Run every ready callback, including ones scheduled while flushing."""
        ran = 0
        while self._timers and self._timers[0][0] <= self.now:
            self._ready.append(heapq.heappop(self._timers)[2])
        while self._ready:
            callback = self._ready.popleft()
            callback()
            ran += 1
        return ran

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing timers in due order."""
        target = self.now + seconds
        ran = self.flush()
        while self._timers and self._timers[0][0] <= target:
            due, _, callback = heapq.heappop(self._timers)
            self.now = due
            callback()
            ran += 1 + self.flush()
        self.now = target
        return ran + self.flush()


class TaskGroupScheduler:
    """Schedules onto an anyio task group (asyncio or trio).

    Usage::

        async with anyio.create_task_group() as tg:
            router = Router(routes, scheduler=TaskGroupScheduler(tg))
            route = await router.navigate("/users")
            tg.cancel_scope.cancel()
    """

    __slots__ = ("_task_group",)

    def __init__(self, task_group: anyio.abc.TaskGroup) -> None:
        self._task_group = task_group

    def call_soon(self, callback: Callback) -> None:
        self._task_group.start_soon(self._run_after, 0.0, callback)

    def call_later(self, delay: float, callback: Callback) -> None:
        self._task_group.start_soon(self._run_after, delay, callback)

    def spawn(
        self,
        factory: Callable[[], Awaitable[Any]],
        on_result: Callable[[Any], Any],
        on_error: Callable[[BaseException], Any],
    ) -> None:
        self._task_group.start_soon(self._settle, factory, on_result, on_error)

    @staticmethod
    async def _run_after(delay: float, callback: Callback) -> None:
        await anyio.sleep(delay)
        try:
            callback()
        except Exception:
            logger.exception("scheduled navigation callback failed")

    @staticmethod
    async def _settle(
        factory: Callable[[], Awaitable[Any]],
        on_result: Callable[[Any], Any],
        on_error: Callable[[BaseException], Any],
    ) -> None:
        try:
            result = await factory()
        except Exception as exc:
            on_error(exc)
            return
        on_result(result)
