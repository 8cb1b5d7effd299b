"""Location normalizer.

Turns heterogeneous navigation requests — ``"/users/1?tab=posts#top"``,
``{"name": "user", "params": {"id": 1}}``, ``{"params": {"id": 2}}`` — into
a canonical ``Location`` resolved against the current route.
"""

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, NamedTuple

from wayfinder._internal.types import Params, Query
from wayfinder.routing.pattern import fill_params
from wayfinder.routing.query import resolve_query

if TYPE_CHECKING:
    from wayfinder.routing.route import Route

logger = logging.getLogger("wayfinder.routing")

_LOCATION_KEYS = frozenset({"path", "name", "params", "query", "hash", "append", "replace"})


@dataclass(slots=True)
class Location:
    """A navigation target.

    ``None`` means "not given" for ``path``, ``name``, ``params``,
    ``query`` and ``hash``, so redirects and relative navigations can
    tell an omitted field from an empty one.  ``normalized`` marks a
    location that went through ``normalize_location()``.
    """

    path: str | None = None
    name: str | None = None
    params: Params | None = None
    query: Query | None = None
    hash: str | None = None
    append: bool = False
    replace: bool = False
    normalized: bool = False

    @classmethod
    def coerce(cls, raw: "str | Location | Mapping[str, Any]") -> "Location":
        """Build a Location from a string, a mapping, or return it unchanged."""
        if isinstance(raw, Location):
            return raw
        if isinstance(raw, str):
            return cls(path=raw)
        if isinstance(raw, Mapping):
            return cls(**{key: raw[key] for key in _LOCATION_KEYS if key in raw})
        return cls(
            path=getattr(raw, "path", None),
            name=getattr(raw, "name", None),
            params=dict(getattr(raw, "params", None) or {}),
            query=dict(getattr(raw, "query", None) or {}),
            hash=getattr(raw, "hash", None),
        )


class ParsedPath(NamedTuple):
    path: str
    query: str
    hash: str


def parse_path(path: str) -> ParsedPath:
    """Split ``"/a?b=1#c"`` into ``("/a", "b=1", "#c")``."""
    hash_ = ""
    query = ""

    hash_index = path.find("#")
    if hash_index >= 0:
        hash_ = path[hash_index:]
        path = path[:hash_index]

    query_index = path.find("?")
    if query_index >= 0:
        query = path[query_index + 1 :]
        path = path[:query_index]

    return ParsedPath(path, query, hash_)


def clean_path(path: str) -> str:
    """Collapse doubled slashes."""
    return re.sub(r"//", "/", path)


def resolve_path(relative: str, base: str, append: bool = False) -> str:
    """Resolve *relative* against *base* like a filesystem path.

    Examples::

        resolve_path("/abs", "/a/b")          -> "/abs"
        resolve_path("c", "/a/b")             -> "/a/c"
        resolve_path("c", "/a/b", append=True) -> "/a/b/c"
        resolve_path("../c", "/a/b/d")        -> "/a/c"
    """
    first = relative[:1]
    if first == "/":
        return relative
    if first in ("?", "#"):
        return base + relative

    stack = base.split("/")

    # Drop the trailing segment unless appending to a non-slash-terminated base
    if not append or not stack[-1]:
        stack.pop()

    for segment in relative.removeprefix("/").split("/"):
        if segment == "..":
            if stack:
                stack.pop()
        elif segment != ".":
            stack.append(segment)

    if not stack or stack[0] != "":
        stack.insert(0, "")

    return "/".join(stack)


def normalize_location(
    raw: "str | Location | Mapping[str, Any]",
    current: "Route | None" = None,
    append: bool = False,
    *,
    parse_query: Callable[[str], Query] | None = None,
) -> Location:
    """Canonicalize a navigation request.

    - Already-normalized locations come back unchanged.
    - Named targets pass through as copies; the matcher resolves the name.
    - ``params`` without ``path`` is a relative params navigation against
      *current*.
    - Otherwise the path is split, resolved against ``current.path``, and
      its query merged with any explicit ``query`` (explicit keys win).
    """
    target = Location.coerce(raw)

    if target.normalized:
        return target
    if target.name:
        return replace(target)

    if not target.path and target.params is not None and current is not None:
        params = {**current.params, **target.params}
        if current.name:
            return replace(target, normalized=True, name=current.name, params=params)
        if current.matched:
            raw_path = current.matched[-1].path
            path = fill_params(raw_path, params, f"path {current.path}")
            return replace(target, normalized=True, path=path)
        logger.warning("relative params navigation requires a current route.")
        return replace(target, normalized=True)

    parsed = parse_path(target.path or "")
    base_path = (current.path if current is not None else None) or "/"
    path = resolve_path(parsed.path, base_path, append or target.append) if parsed.path else base_path

    query = resolve_query(parsed.query, target.query, parse_query)

    hash_ = target.hash or parsed.hash
    if hash_ and not hash_.startswith("#"):
        hash_ = f"#{hash_}"

    return Location(path=path, query=query, hash=hash_, normalized=True)
