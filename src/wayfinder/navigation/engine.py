"""Transition engine — the guard pipeline between two routes.

``transition_to()`` resolves a target, diffs it against the current
route, and runs the guard queue in a fixed order:

1. leave guards of deactivated views, deepest first
2. global ``before_each`` hooks
3. update guards of reused views
4. ``before_enter`` of each activated record, shallow to deep
5. lazy view loading for activated records
6. enter guards of activated views
7. global ``before_resolve`` hooks

then commits.  Guards run strictly one after another; each must call
its ``next`` continuation for the queue to move.  A later navigation
supersedes an earlier one by replacing ``pending``: the older run sees
the mismatch at its next step boundary and aborts as cancelled.

Concrete history backends subclass ``TransitionEngine`` and implement
the history contract (``push``, ``replace``, ``go``, ``ensure_url``,
``get_current_location``).
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from wayfinder._internal.types import AfterHook, Guard, RawLocation
from wayfinder.config import normalize_base
from wayfinder.errors import NavigationAborted, NavigationFailureType
from wayfinder.navigation.guards import (
    extract_enter_guards,
    extract_leave_guards,
    extract_update_guards,
    resolve_queue,
)
from wayfinder.navigation.instances import InstanceLookup, ViewInstances
from wayfinder.navigation.lazy import resolve_lazy_components
from wayfinder.navigation.queue import run_queue
from wayfinder.navigation.resolution import Abort, Redirect, classify
from wayfinder.navigation.scheduling import ManualScheduler, Scheduler
from wayfinder.routing.matcher import Matcher
from wayfinder.routing.route import START, Route, is_same_route

logger = logging.getLogger("wayfinder.navigation")

type OnComplete = Callable[[Route], Any]
type OnAbort = Callable[[NavigationAborted], Any]


def register_hook[T](hooks: list[T], fn: T) -> Callable[[], None]:
    """Append *fn* to *hooks* and return a function that removes it."""
    hooks.append(fn)

    def unregister() -> None:
        if fn in hooks:
            hooks.remove(fn)

    return unregister


class NavigationHooks:
    """Globally registered hooks, shared by router and engine."""

    __slots__ = ("after_each", "before_each", "before_resolve")

    def __init__(self) -> None:
        self.before_each: list[Guard] = []
        self.before_resolve: list[Guard] = []
        self.after_each: list[AfterHook] = []


class TransitionEngine:
    """Owns the current route and drives navigations to commit or abort.

    State:
        current: Last committed route; starts as ``START``.
        pending: Route of the navigation in flight, or ``None``.
        ready: Set after the first navigation commits or fails with an error.
    """

    def __init__(
        self,
        matcher: Matcher,
        *,
        hooks: NavigationHooks | None = None,
        scheduler: Scheduler | None = None,
        instances: InstanceLookup | None = None,
        base: str | None = "/",
        poll_interval: float = 0.016,
    ) -> None:
        self.matcher = matcher
        self.hooks = hooks if hooks is not None else NavigationHooks()
        self.scheduler: Scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.instances: InstanceLookup = instances if instances is not None else ViewInstances()
        self.base = normalize_base(base)
        self.poll_interval = poll_interval

        self.current: Route = START
        self.pending: Route | None = None
        self.ready = False
        self._listener: Callable[[Route], Any] | None = None
        self._ready_callbacks: list[Callable[[Route], Any]] = []
        self._ready_error_callbacks: list[Callable[[BaseException], Any]] = []
        self._error_callbacks: list[Callable[[BaseException], Any]] = []

    # -- History contract (implemented by backends) --

    def push(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> None:
        raise NotImplementedError

    def replace(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> None:
        raise NotImplementedError

    def go(self, delta: int) -> None:
        raise NotImplementedError

    def ensure_url(self, push: bool = False) -> None:
        """Bring the external URL in line with ``current``."""
        raise NotImplementedError

    def get_current_location(self) -> str:
        raise NotImplementedError

    # -- Observers --

    def listen(self, callback: Callable[[Route], Any]) -> None:
        """Set the callback informed of every committed route."""
        self._listener = callback

    def on_ready(
        self,
        callback: Callable[[Route], Any],
        error_callback: Callable[[BaseException], Any] | None = None,
    ) -> None:
        if self.ready:
            callback(self.current)
            return
        self._ready_callbacks.append(callback)
        if error_callback is not None:
            self._ready_error_callbacks.append(error_callback)

    def on_error(self, callback: Callable[[BaseException], Any]) -> None:
        self._error_callbacks.append(callback)

    # -- Transitions --

    def transition_to(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> None:
        """Resolve *location* against ``current`` and try to commit it."""
        route = self.matcher.match(location, self.current)

        def complete(committed: Route) -> None:
            self.update_route(route)
            if on_complete is not None:
                on_complete(route)
            self.ensure_url()

            if not self.ready:
                self.ready = True
                for callback in self._ready_callbacks:
                    callback(route)

        def abort(failure: NavigationAborted) -> None:
            if on_abort is not None:
                on_abort(failure)
            if failure.error is not None and not self.ready:
                self.ready = True
                for callback in self._ready_error_callbacks:
                    callback(failure.error)

        self.confirm_transition(route, complete, abort)

    def confirm_transition(
        self,
        route: Route,
        on_complete: OnComplete,
        on_abort: OnAbort | None = None,
    ) -> None:
        """Run the guard pipeline for *route*; commit is left to *on_complete*."""
        current = self.current

        def abort(kind: NavigationFailureType, error: BaseException | None = None) -> None:
            if error is not None:
                if self._error_callbacks:
                    for callback in list(self._error_callbacks):
                        callback(error)
                else:
                    logger.error("uncaught error during route navigation", exc_info=error)
            if on_abort is not None:
                on_abort(NavigationAborted(kind, to=route, from_route=current, error=error))

        if is_same_route(route, current) and len(route.matched) == len(current.matched):
            self.ensure_url()
            abort(NavigationFailureType.DUPLICATED)
            return

        updated, deactivated, activated = resolve_queue(current.matched, route.matched)

        queue: list[Guard | None] = [
            *extract_leave_guards(deactivated, self.instances),
            *self.hooks.before_each,
            *extract_update_guards(updated, self.instances),
            *(guard for record in activated for guard in record.before_enter),
            resolve_lazy_components(activated, self.scheduler),
        ]

        self.pending = route

        def iterator(hook: Guard, advance: Callable[..., None]) -> None:
            if self.pending is not route:
                abort(NavigationFailureType.CANCELLED)
                return

            def on_next(value: Any = None) -> None:
                match classify(value):
                    case Abort(error=error):
                        self.ensure_url(True)
                        if error is None:
                            abort(NavigationFailureType.ABORTED)
                        else:
                            abort(NavigationFailureType.ERROR, error)
                    case Redirect(location=target, replace=replace):
                        abort(NavigationFailureType.REDIRECTED)
                        if replace:
                            self.replace(target)
                        else:
                            self.push(target)
                    case _:
                        advance(value)

            result = None
            try:
                result = hook(route, current, on_next)
                if inspect.isawaitable(result):
                    self.scheduler.spawn(
                        lambda: result,
                        lambda _value: None,
                        lambda exc: abort(NavigationFailureType.ERROR, exc),
                    )
            except Exception as exc:
                if inspect.iscoroutine(result):
                    result.close()
                abort(NavigationFailureType.ERROR, exc)

        def after_first_queue() -> None:
            post_enter: list[Callable[[], None]] = []

            def is_valid() -> bool:
                return self.current is route

            enter_guards = extract_enter_guards(
                activated,
                post_enter,
                is_valid,
                self.instances,
                self.scheduler,
                self.poll_interval,
            )

            def finish() -> None:
                if self.pending is not route:
                    abort(NavigationFailureType.CANCELLED)
                    return
                self.pending = None
                on_complete(route)

                def flush_post_enter() -> None:
                    for callback in post_enter:
                        callback()

                self.scheduler.call_soon(flush_post_enter)

            run_queue([*enter_guards, *self.hooks.before_resolve], iterator, finish)

        run_queue(queue, iterator, after_first_queue)

    def update_route(self, route: Route) -> None:
        """Swap ``current``, inform the listener, then run ``after_each`` hooks."""
        previous = self.current
        self.current = route
        if self._listener is not None:
            self._listener(route)
        for hook in list(self.hooks.after_each):
            hook(route, previous)
