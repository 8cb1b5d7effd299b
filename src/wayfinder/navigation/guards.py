"""Per-view guard extraction and binding.

View components declare guards as attributes::

    class UserView:
        @staticmethod
        def before_route_enter(to, from_route, next):
            next(lambda view: view.load(to.params["id"]))

        def before_route_update(self, to, from_route, next):
            self.load(to.params["id"])
            next()

        def before_route_leave(self, to, from_route, next):
            next(False if self.dirty else None)

Leave and update guards run bound to the view's live instance and are
skipped when no instance is registered.  Enter guards run before the
view exists; a callback passed to their ``next`` is deferred until after
commit and then handed the instance once it registers.
"""

import functools
import inspect
from collections.abc import Callable, Iterable
from typing import Any

from wayfinder._internal.types import Component, Guard, Next
from wayfinder.navigation.instances import InstanceLookup
from wayfinder.navigation.resolution import DeferredEnter, classify
from wayfinder.navigation.scheduling import Scheduler
from wayfinder.routing.record import RouteRecord

LEAVE_GUARD = "before_route_leave"
UPDATE_GUARD = "before_route_update"
ENTER_GUARD = "before_route_enter"

type Binder = Callable[[Guard, RouteRecord, str, Any], Guard | None]


def resolve_queue(
    current: tuple[RouteRecord, ...],
    target: tuple[RouteRecord, ...],
) -> tuple[tuple[RouteRecord, ...], tuple[RouteRecord, ...], tuple[RouteRecord, ...]]:
    """Diff two matched chains by common prefix.

    Returns ``(updated, deactivated, activated)``: the reused records,
    the leaving records of *current*, and the entering records of *target*.
    """
    i = 0
    limit = min(len(current), len(target))
    while i < limit and current[i] is target[i]:
        i += 1
    return target[:i], current[i:], target[i:]


def extract_guard(component: Component, key: str) -> list[Guard]:
    """Return the guards *component* declares under *key*, as a list."""
    guard = getattr(component, key, None)
    if guard is None:
        return []
    if isinstance(guard, (list, tuple)):
        return [g for g in guard if g is not None]
    return [guard]


def extract_guards(
    records: Iterable[RouteRecord],
    key: str,
    bind: Binder,
    instances: InstanceLookup,
    *,
    reverse: bool = False,
) -> list[Guard]:
    """Collect and bind guards per (record, view); optionally deepest-first."""
    groups: list[list[Guard]] = []
    for record in records:
        for view, component in record.components.items():
            instance = instances.lookup(record, view)
            bound = [bind(guard, record, view, instance) for guard in extract_guard(component, key)]
            groups.append([g for g in bound if g is not None])
    if reverse:
        groups.reverse()
    return [guard for group in groups for guard in group]


def bind_guard(guard: Guard, record: RouteRecord, view: str, instance: Any) -> Guard | None:
    """Bind a leave/update guard to its instance; no instance, no guard."""
    if instance is None:
        return None
    if inspect.ismethod(guard):
        return guard
    return functools.partial(guard, instance)


def extract_leave_guards(deactivated: Iterable[RouteRecord], instances: InstanceLookup) -> list[Guard]:
    return extract_guards(deactivated, LEAVE_GUARD, bind_guard, instances, reverse=True)


def extract_update_guards(updated: Iterable[RouteRecord], instances: InstanceLookup) -> list[Guard]:
    return extract_guards(updated, UPDATE_GUARD, bind_guard, instances)


def extract_enter_guards(
    activated: Iterable[RouteRecord],
    callbacks: list[Callable[[], None]],
    is_valid: Callable[[], bool],
    instances: InstanceLookup,
    scheduler: Scheduler,
    poll_interval: float,
) -> list[Guard]:
    """Wrap enter guards so callbacks given to ``next`` land in *callbacks*."""

    def bind(guard: Guard, record: RouteRecord, view: str, _instance: Any) -> Guard:
        def route_enter_guard(to: Any, from_route: Any, next_: Next) -> Any:
            def forward(value: Any = None) -> None:
                next_(value)
                if isinstance(classify(value), DeferredEnter):
                    callbacks.append(
                        lambda: poll(value, record, view, is_valid, instances, scheduler, poll_interval)
                    )

            return guard(to, from_route, forward)

        return route_enter_guard

    return extract_guards(activated, ENTER_GUARD, bind, instances)


def poll(
    callback: Callable[[Any], Any],
    record: RouteRecord,
    view: str,
    is_valid: Callable[[], bool],
    instances: InstanceLookup,
    scheduler: Scheduler,
    interval: float,
) -> None:
    """Hand *callback* the view instance, retrying until it registers.

    Gives up silently once the navigation is no longer the current one.
    """
    instance = instances.lookup(record, view)
    if instance is not None:
        callback(instance)
    elif is_valid():
        scheduler.call_later(
            interval,
            lambda: poll(callback, record, view, is_valid, instances, scheduler, interval),
        )
