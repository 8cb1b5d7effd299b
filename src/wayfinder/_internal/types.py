"""Shared type aliases used across wayfinder modules."""

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

# Path params: values are strings, or lists of strings for repeat params
Params: TypeAlias = dict[str, Any]

# Parsed query: a value is a string, None (bare key), or a list of those
QueryValue: TypeAlias = str | None | list[str | None]
Query: TypeAlias = dict[str, QueryValue]

# The continuation handed to every guard
Next: TypeAlias = Callable[..., None]

# Navigation guard: (to, from_route, next); may be ``async def``
Guard: TypeAlias = Callable[[Any, Any, Next], Any]

# After-each hook: (to, from_route); cannot abort or redirect
AfterHook: TypeAlias = Callable[[Any, Any], Any]

# Opaque view component handle
Component: TypeAlias = Any

# Raw navigation request: "/path?x=1#h", a Location, or a mapping with the same keys
RawLocation: TypeAlias = str | Mapping[str, Any] | Any
