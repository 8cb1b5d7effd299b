"""Navigation — the guard pipeline that moves between routes.

Guards are plain callables ``(to, from_route, next)``; the engine runs
them one at a time and commits only when every one of them has called
``next`` without aborting or redirecting.

Scheduling is pluggable:
    ManualScheduler -- host-driven, deterministic (default)
    TaskGroupScheduler -- anyio task group, needed for async guards and loaders
"""

from wayfinder.navigation.engine import NavigationHooks, TransitionEngine
from wayfinder.navigation.instances import InstanceLookup, ViewInstances
from wayfinder.navigation.lazy import LazyComponent
from wayfinder.navigation.resolution import Abort, DeferredEnter, Proceed, Redirect, classify
from wayfinder.navigation.scheduling import ManualScheduler, Scheduler, TaskGroupScheduler

__all__ = [
    "Abort",
    "DeferredEnter",
    "InstanceLookup",
    "LazyComponent",
    "ManualScheduler",
    "NavigationHooks",
    "Proceed",
    "Redirect",
    "Scheduler",
    "TaskGroupScheduler",
    "TransitionEngine",
    "ViewInstances",
    "classify",
]
