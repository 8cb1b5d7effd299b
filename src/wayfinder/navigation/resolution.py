"""What a guard asked for when it called ``next``.

``classify()`` decides once, at the point the continuation is invoked,
which of four outcomes a value means:

- ``Proceed``: ``next()`` or any value without a more specific meaning
- ``Abort``: ``next(False)`` or ``next(exc)``
- ``Redirect``: ``next("/path")`` or a location carrying ``path``/``name``
- ``DeferredEnter``: ``next(callback)``, only meaningful for enter guards
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from wayfinder.routing.location import Location


@dataclass(frozen=True, slots=True)
class Proceed:
    value: Any = None


@dataclass(frozen=True, slots=True)
class Abort:
    error: BaseException | None = None


@dataclass(frozen=True, slots=True)
class Redirect:
    location: Any
    replace: bool = False


@dataclass(frozen=True, slots=True)
class DeferredEnter:
    callback: Callable[[Any], Any]


type Resolution = Proceed | Abort | Redirect | DeferredEnter


def _is_location(value: Any) -> bool:
    if isinstance(value, Mapping):
        return isinstance(value.get("path"), str) or isinstance(value.get("name"), str)
    if isinstance(value, Location):
        return isinstance(value.path, str) or isinstance(value.name, str)
    # Route snapshots are valid redirect targets too
    return hasattr(value, "matched") and isinstance(getattr(value, "path", None), str)


def classify(value: Any = None) -> Resolution:
    """Map the raw argument of ``next`` onto a ``Resolution``."""
    if value is False:
        return Abort()
    if isinstance(value, BaseException):
        return Abort(value)
    if isinstance(value, str):
        return Redirect(value)
    if _is_location(value):
        if isinstance(value, Mapping):
            replace = bool(value.get("replace", False))
        else:
            replace = bool(getattr(value, "replace", False))
        return Redirect(value, replace=replace)
    if callable(value):
        return DeferredEnter(value)
    return Proceed(value)
