"""Router — the assembled navigation API.

Wires a ``Matcher`` and a history backend into one object graph.  There
is no global installation state: build as many routers as you like.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import anyio

from wayfinder._internal.types import AfterHook, Component, Guard, RawLocation
from wayfinder.config import RouterConfig
from wayfinder.errors import NavigationAborted
from wayfinder.history.memory import MemoryHistory
from wayfinder.navigation.engine import (
    NavigationHooks,
    OnAbort,
    OnComplete,
    TransitionEngine,
    register_hook,
)
from wayfinder.navigation.instances import InstanceLookup, ViewInstances
from wayfinder.navigation.scheduling import ManualScheduler, Scheduler
from wayfinder.routing.location import Location, clean_path, normalize_location
from wayfinder.routing.matcher import Matcher
from wayfinder.routing.record import RouteConfig
from wayfinder.routing.route import START, Route


@dataclass(frozen=True, slots=True)
class Resolved:
    """Result of ``Router.resolve()``."""

    location: Location
    route: Route
    href: str


def create_href(base: str, full_path: str, hash_mode: bool = False) -> str:
    path = f"#{full_path}" if hash_mode else full_path
    return clean_path(f"{base}/{path}") if base else path


class Router:
    """Matcher, history backend and global hooks in one place.

    Usage::

        router = Router([
            {"path": "/", "component": Home},
            {"path": "/user/:id", "name": "user", "component": User},
            {"path": "*", "component": NotFound},
        ])

        @router.before_each
        def auth(to, from_route, next):
            next("/login" if to.meta.get("private") else None)

        router.start()
        router.push({"name": "user", "params": {"id": 42}})
        router.current_route.path  # "/user/42"

    With the default ``ManualScheduler`` every navigation made of
    synchronous guards commits before ``push()`` returns; post-commit
    callbacks wait for ``router.scheduler.flush()``.
    """

    __slots__ = ("config", "history", "hooks", "instances", "matcher", "scheduler")

    def __init__(
        self,
        routes: Iterable[RouteConfig | Mapping[str, Any]] = (),
        config: RouterConfig | None = None,
        *,
        history: Callable[..., TransitionEngine] = MemoryHistory,
        scheduler: Scheduler | None = None,
        instances: InstanceLookup | None = None,
    ) -> None:
        self.config: RouterConfig = config or RouterConfig()
        self.hooks = NavigationHooks()
        self.matcher = Matcher(routes, self.config)
        self.scheduler: Scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.instances: InstanceLookup = instances if instances is not None else ViewInstances()
        self.history: TransitionEngine = history(
            self.matcher,
            hooks=self.hooks,
            scheduler=self.scheduler,
            instances=self.instances,
            base=self.config.base,
            poll_interval=self.config.poll_interval,
        )

    # -- State --

    @property
    def current_route(self) -> Route:
        return self.history.current

    def match(
        self,
        raw: RawLocation,
        current: Route | None = None,
        redirected_from: Location | None = None,
    ) -> Route:
        return self.matcher.match(raw, current, redirected_from)

    def start(
        self,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> None:
        """Run the initial navigation to the backend's current location."""
        self.history.transition_to(self.history.get_current_location(), on_complete, on_abort)

    def listen(self, callback: Callable[[Route], Any]) -> None:
        """Be told about every committed route (the reactive bridge)."""
        self.history.listen(callback)

    # -- Global hooks --

    def before_each(self, guard: Guard) -> Callable[[], None]:
        """Register a guard run before every navigation.

        Returns a function that unregisters it.
        """
        return register_hook(self.hooks.before_each, guard)

    def before_resolve(self, guard: Guard) -> Callable[[], None]:
        """Register a guard run after enter guards and lazy views resolve."""
        return register_hook(self.hooks.before_resolve, guard)

    def after_each(self, hook: AfterHook) -> Callable[[], None]:
        """Register a hook called with ``(to, from_route)`` after each commit."""
        return register_hook(self.hooks.after_each, hook)

    def on_ready(
        self,
        callback: Callable[[Route], Any],
        error_callback: Callable[[BaseException], Any] | None = None,
    ) -> None:
        self.history.on_ready(callback, error_callback)

    def on_error(self, callback: Callable[[BaseException], Any]) -> None:
        self.history.on_error(callback)

    # -- Navigation --

    def push(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> None:
        self.history.push(location, on_complete, on_abort)

    def replace(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> None:
        self.history.replace(location, on_complete, on_abort)

    def go(self, delta: int) -> None:
        self.history.go(delta)

    def back(self) -> None:
        self.go(-1)

    def forward(self) -> None:
        self.go(1)

    async def navigate(self, location: RawLocation, *, replace: bool = False) -> Route:
        """Push (or replace) and wait for the navigation to settle.

        Returns the committed route.  Raises ``NavigationAborted`` when
        the navigation is aborted, cancelled, redirected by a guard, or
        is a duplicate of the current route.
        """
        done = anyio.Event()
        committed: list[Route] = []
        failures: list[NavigationAborted] = []

        def complete(route: Route) -> None:
            committed.append(route)
            done.set()

        def abort(failure: NavigationAborted) -> None:
            failures.append(failure)
            done.set()

        if replace:
            self.replace(location, complete, abort)
        else:
            self.push(location, complete, abort)

        await done.wait()
        if failures:
            raise failures[0]
        return committed[0]

    # -- Resolution --

    def resolve(
        self,
        to: RawLocation,
        current: Route | None = None,
        append: bool = False,
    ) -> Resolved:
        """Resolve *to* without navigating.

        ``href`` points at the location as written: for a redirecting
        route it is the redirect source, not its destination.
        """
        current = current or self.history.current
        location = normalize_location(to, current, append, parse_query=self.config.parse_query)
        route = self.matcher.match(location, current)
        full_path = route.redirected_from or route.full_path
        return Resolved(location, route, self.create_href(full_path))

    def create_href(self, full_path: str) -> str:
        return create_href(self.history.base, full_path, self.config.hash_mode)

    def get_matched_components(self, to: RawLocation | Route | None = None) -> list[Component]:
        """Components of every view along the matched chain, root first."""
        if to is None:
            route = self.current_route
        elif isinstance(to, Route):
            route = to
        else:
            route = self.resolve(to).route
        return [component for record in route.matched for component in record.components.values()]

    def add_routes(self, routes: Iterable[RouteConfig | Mapping[str, Any]]) -> None:
        """Extend the route table; re-run the current navigation if there is one."""
        self.matcher.add_routes(routes)
        if self.history.current is not START:
            self.history.transition_to(self.history.get_current_location())
