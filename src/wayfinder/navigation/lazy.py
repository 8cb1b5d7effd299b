"""Lazily loaded view components.

A ``LazyComponent`` wraps a loader that produces the real component.
Navigation halts at the lazy-resolution step until every lazy view of
the entering records has loaded, or stops on the first failure.

Two loader shapes are accepted::

    # callback style, may settle later
    def load_users(resolve, reject):
        resolve(UsersView)

    # coroutine style, needs an event-loop scheduler
    async def load_users():
        module = await import_somehow("app.views.users")
        return module  # a module contributes its ``default`` attribute
"""

import functools
import inspect
import logging
from collections.abc import Callable
from types import ModuleType
from typing import Any

from wayfinder._internal.types import Next
from wayfinder.navigation.scheduling import Scheduler
from wayfinder.routing.record import RouteRecord

logger = logging.getLogger("wayfinder.navigation")


class LazyComponent:
    """Placeholder for a view component that loads on first navigation."""

    __slots__ = ("loader", "resolved")

    def __init__(self, loader: Callable[..., Any]) -> None:
        self.loader = loader
        self.resolved: Any = None

    def __repr__(self) -> str:
        name = getattr(self.loader, "__qualname__", repr(self.loader))
        state = "resolved" if self.resolved is not None else "pending"
        return f"<LazyComponent {name} {state}>"


def _once(fn: Callable[..., Any]) -> Callable[..., Any]:
    called = False

    def wrapper(*args: Any) -> Any:
        nonlocal called
        if called:
            return None
        called = True
        return fn(*args)

    return wrapper


def _unwrap(resolved: Any) -> Any:
    if isinstance(resolved, ModuleType):
        return getattr(resolved, "default", resolved)
    return resolved


def resolve_lazy_components(matched: tuple[RouteRecord, ...], scheduler: Scheduler) -> Callable[..., None]:
    """Build the guard step that loads every lazy view among *matched*."""

    def step(to: Any, from_route: Any, next_: Next) -> None:
        waiting: list[tuple[RouteRecord, str, LazyComponent]] = []
        for record in matched:
            for view, component in list(record.components.items()):
                if not isinstance(component, LazyComponent):
                    continue
                if component.resolved is not None:
                    record.components[view] = component.resolved
                else:
                    waiting.append((record, view, component))

        if not waiting:
            next_()
            return

        # Every load is counted before any loader starts
        pending = len(waiting)
        failed = False

        def settle(record: RouteRecord, view: str, lazy: LazyComponent, value: Any) -> None:
            nonlocal pending
            value = _unwrap(value)
            lazy.resolved = value
            record.components[view] = value
            pending -= 1
            if pending <= 0 and not failed:
                next_()

        def fail(view: str, reason: Any) -> None:
            nonlocal failed
            msg = f"Failed to resolve async component {view}: {reason}"
            logger.warning(msg)
            if not failed:
                failed = True
                next_(reason if isinstance(reason, BaseException) else RuntimeError(msg))

        for record, view, lazy in waiting:
            on_resolve = _once(functools.partial(settle, record, view, lazy))
            on_reject = _once(functools.partial(fail, view))

            if inspect.iscoroutinefunction(lazy.loader):
                scheduler.spawn(lazy.loader, on_resolve, on_reject)
                continue

            try:
                result = lazy.loader(on_resolve, on_reject)
            except Exception as exc:
                on_reject(exc)
                continue
            if inspect.isawaitable(result):
                scheduler.spawn(functools.partial(_identity, result), on_resolve, on_reject)

    return step


def _identity(value: Any) -> Any:
    return value
