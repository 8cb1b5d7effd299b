"""Route snapshots, the START sentinel, equality and containment."""

import copy
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from wayfinder.routing.location import Location
from wayfinder.routing.query import stringify_query
from wayfinder.routing.record import RouteRecord

_TRAILING_SLASH_RE = re.compile(r"/?$")

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True, eq=False)
class Route:
    """Immutable snapshot of a resolved navigation target.

    ``matched`` holds the records from root to leaf; an empty tuple means
    nothing matched, which is a valid route rather than an error.  Two
    routes are "the same" by ``is_same_route()``, never by identity.
    """

    path: str
    full_path: str
    name: str | None = None
    hash: str = ""
    query: Mapping[str, Any] = _EMPTY
    params: Mapping[str, Any] = _EMPTY
    matched: tuple[RouteRecord, ...] = ()
    meta: Mapping[str, Any] = _EMPTY
    redirected_from: str | None = None

    def __repr__(self) -> str:
        return f"<Route {self.full_path!r} matched={len(self.matched)}>"


def _freeze(value: Mapping[str, Any] | None) -> Mapping[str, Any]:
    if not value:
        return _EMPTY
    return MappingProxyType(copy.deepcopy(dict(value)))


def get_full_path(
    location: "Location | Route",
    stringify: Callable[[Mapping[str, Any]], str] | None = None,
) -> str:
    stringify = stringify or stringify_query
    return (location.path or "/") + stringify(location.query or {}) + (location.hash or "")


def create_route(
    matched: tuple[RouteRecord, ...],
    location: Location,
    redirected_from: Location | None = None,
    *,
    stringify: Callable[[Mapping[str, Any]], str] | None = None,
) -> Route:
    """Build the frozen snapshot for *location* with the given record chain.

    ``query`` and ``params`` are deep-copied so later mutation of the
    location cannot leak into the route.
    """
    record = matched[-1] if matched else None
    return Route(
        name=location.name or (record.name if record is not None else None),
        meta=MappingProxyType(record.meta) if record is not None else _EMPTY,
        path=location.path or "/",
        hash=location.hash or "",
        query=_freeze(location.query),
        params=_freeze(location.params),
        full_path=get_full_path(location, stringify),
        matched=matched,
        redirected_from=get_full_path(redirected_from, stringify) if redirected_from is not None else None,
    )


# The starting route that represents "nowhere", before the first navigation
START: Route = create_route((), Location(path="/"))


def is_object_equal(a: Mapping[str, Any] | None, b: Mapping[str, Any] | None) -> bool:
    """Key-set equality with string-coerced values, recursing into nested values."""
    if a is None or b is None:
        return a is b
    if len(a) != len(b) or set(a) != set(b):
        return False
    for key, a_val in a.items():
        b_val = b[key]
        if isinstance(a_val, Mapping) and isinstance(b_val, Mapping):
            if not is_object_equal(a_val, b_val):
                return False
        elif isinstance(a_val, (list, tuple)) and isinstance(b_val, (list, tuple)):
            if not is_object_equal(dict(enumerate(map(str, a_val))), dict(enumerate(map(str, b_val)))):
                return False
        elif str(a_val) != str(b_val):
            return False
    return True


def is_same_route(a: Route | None, b: Route | None) -> bool:
    """Structural route equality.

    The START sentinel only equals itself.  Otherwise routes compare by
    trailing-slash-normalized path, hash and query, or, for routes without
    a path, by name, hash, query and params.
    """
    if a is START or b is START:
        return a is b
    if a is None or b is None:
        return False
    if a.path and b.path:
        return (
            _TRAILING_SLASH_RE.sub("", a.path, count=1) == _TRAILING_SLASH_RE.sub("", b.path, count=1)
            and a.hash == b.hash
            and is_object_equal(a.query, b.query)
        )
    if a.name and b.name:
        return (
            a.name == b.name
            and a.hash == b.hash
            and is_object_equal(a.query, b.query)
            and is_object_equal(a.params, b.params)
        )
    return False


def is_included_route(current: Route, target: Route) -> bool:
    """True when *current* is *target* or nested below it.

    Used for "active link" state: the path prefix must match on segment
    boundaries, *target*'s hash (if any) must match, and every query key
    on *target* must be present on *current*.
    """
    current_path = _TRAILING_SLASH_RE.sub("/", current.path, count=1)
    target_path = _TRAILING_SLASH_RE.sub("/", target.path, count=1)
    return (
        current_path.startswith(target_path)
        and (not target.hash or current.hash == target.hash)
        and all(key in current.query for key in target.query)
    )
