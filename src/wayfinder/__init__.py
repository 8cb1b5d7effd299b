"""Wayfinder — client-side routing core.

Route tables, path patterns, and an interruptible guard pipeline for
single-page applications.  Rendering and browser history stay outside;
wayfinder decides *where* you are and *whether* you may go elsewhere.

Basic usage::

    from wayfinder import Router

    router = Router([
        {"path": "/", "component": Home},
        {"path": "/user/:id", "name": "user", "component": User},
        {"path": "*", "component": NotFound},
    ])

    router.start()
    router.push("/user/42")
    router.current_route.params  # {"id": "42"}

Async guards and lazy views (anyio, asyncio or trio)::

    async with anyio.create_task_group() as tg:
        router = Router(routes, scheduler=TaskGroupScheduler(tg))
        route = await router.navigate("/user/42")
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ConfigurationError",
    "LazyComponent",
    "Location",
    "ManualScheduler",
    "Matcher",
    "MemoryHistory",
    "NavigationAborted",
    "NavigationFailureType",
    "Resolved",
    "Route",
    "RouteConfig",
    "RouteRecord",
    "Router",
    "RouterConfig",
    "START",
    "TaskGroupScheduler",
    "ViewInstances",
    "WayfinderError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wayfinder`` fast while providing a clean top-level API.
    """
    if name in ("Router", "Resolved"):
        from wayfinder import router as _router

        return getattr(_router, name)

    if name == "RouterConfig":
        from wayfinder.config import RouterConfig

        return RouterConfig

    if name == "Matcher":
        from wayfinder.routing.matcher import Matcher

        return Matcher

    if name == "Location":
        from wayfinder.routing.location import Location

        return Location

    if name in ("RouteConfig", "RouteRecord"):
        from wayfinder.routing import record as _record

        return getattr(_record, name)

    if name in ("Route", "START"):
        from wayfinder.routing import route as _route

        return getattr(_route, name)

    if name == "MemoryHistory":
        from wayfinder.history.memory import MemoryHistory

        return MemoryHistory

    if name in ("ManualScheduler", "TaskGroupScheduler"):
        from wayfinder.navigation import scheduling as _scheduling

        return getattr(_scheduling, name)

    if name == "LazyComponent":
        from wayfinder.navigation.lazy import LazyComponent

        return LazyComponent

    if name == "ViewInstances":
        from wayfinder.navigation.instances import ViewInstances

        return ViewInstances

    if name in ("ConfigurationError", "NavigationAborted", "NavigationFailureType", "WayfinderError"):
        from wayfinder import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
