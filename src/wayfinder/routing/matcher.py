"""Matcher — resolves navigation targets to Route snapshots.

Named targets are looked up in ``name_map``; path targets scan
``path_list`` in priority order and the first pattern that matches
wins.  Redirects and aliases are followed until a concrete record (or
nothing) remains.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any
from urllib.parse import unquote

from wayfinder._internal.types import Params
from wayfinder.config import RouterConfig
from wayfinder.errors import report_configuration_issue
from wayfinder.routing.location import Location, normalize_location, resolve_path
from wayfinder.routing.pattern import WILDCARD_PARAM, RoutePattern, fill_params
from wayfinder.routing.record import RouteConfig, RouteRecord
from wayfinder.routing.route import Route, create_route
from wayfinder.routing.table import RouteTable

logger = logging.getLogger("wayfinder.routing")


def match_route(pattern: RoutePattern, path: str) -> Params | None:
    """Match *path* against *pattern* and return the decoded params.

    Returns ``None`` when the pattern does not match.  Repeat params come
    back as lists of segments; the wildcard and unnamed group ``0`` are
    exposed as ``"pathMatch"``.
    """
    m = pattern.regex.match(path)
    if m is None:
        return None

    params: Params = {}
    for key, value in zip(pattern.keys, m.groups(), strict=False):
        if value is None:
            continue
        if isinstance(key.name, int):
            name = str(key.name) if key.name else WILDCARD_PARAM
        else:
            name = key.name
        if key.repeat and key.delimiter:
            params[name] = [unquote(part) for part in value.split(key.delimiter)]
        else:
            params[name] = unquote(value)
    return params


class Matcher:
    """Resolves raw locations against a ``RouteTable``.

    Usage::

        matcher = Matcher([
            {"path": "/", "component": Home},
            {"path": "/user/:id", "name": "user", "component": User},
        ])
        route = matcher.match("/user/42")
        route.params  # {"id": "42"}
        matcher.match({"name": "user", "params": {"id": 7}}).path  # "/user/7"
    """

    __slots__ = ("config", "table")

    def __init__(
        self,
        routes: Iterable[RouteConfig | Mapping[str, Any]] = (),
        config: RouterConfig | None = None,
    ) -> None:
        self.config: RouterConfig = config or RouterConfig()
        self.table = RouteTable(strict=self.config.warnings_as_errors)
        self.table.add_routes(routes)

    def add_routes(self, routes: Iterable[RouteConfig | Mapping[str, Any]]) -> None:
        """Extend the tables in place. Existing entries keep their priority."""
        self.table.add_routes(routes)

    def match(
        self,
        raw: "str | Location | Mapping[str, Any]",
        current: Route | None = None,
        redirected_from: Location | None = None,
    ) -> Route:
        """Resolve *raw* to a Route. Never raises for "no match"."""
        location = normalize_location(raw, current, False, parse_query=self.config.parse_query)
        name = location.name

        if name:
            record = self.table.name_map.get(name)
            if record is None:
                logger.warning("Route with name '%s' does not exist", name)
                return self._create_route(None, location)

            required = {key.name for key in record.pattern.keys if not key.optional}
            params = dict(location.params or {})
            if current is not None:
                for key, value in current.params.items():
                    if key not in params and key in required:
                        params[key] = value

            path = fill_params(record.path, params, f'named route "{name}"')
            return self._create_route(record, replace(location, params=params, path=path), redirected_from)

        if location.path:
            for path in self.table.path_list:
                record = self.table.path_map[path]
                params = match_route(record.pattern, location.path)
                if params is not None:
                    return self._create_route(record, replace(location, params=params), redirected_from)
            location = replace(location, params={})

        return self._create_route(None, location)

    def _redirect(self, record: RouteRecord, location: Location) -> Route:
        original = record.redirect
        if callable(original):
            redirect = original(self._snapshot(self.table.chain(record), location))
        else:
            redirect = original

        if isinstance(redirect, (str, Mapping, Location)):
            target = Location.coerce(redirect)
        else:
            report_configuration_issue(f"invalid redirect option: {redirect!r}", strict=self.table.strict)
            return self._snapshot((), location)

        query = target.query if target.query is not None else location.query
        hash_ = target.hash if target.hash is not None else location.hash
        params = target.params if target.params is not None else location.params

        if target.name:
            if target.name not in self.table.name_map:
                report_configuration_issue(
                    f'redirect failed: named route "{target.name}" not found.',
                    strict=self.table.strict,
                )
            return self.match(
                Location(normalized=True, name=target.name, query=query, hash=hash_, params=params),
                None,
                location,
            )

        if target.path:
            parent = self.table.parent(record)
            raw_path = resolve_path(target.path, parent.path if parent is not None else "/", True)
            resolved = fill_params(raw_path, params, f'redirect route with path "{raw_path}"')
            return self.match(
                Location(normalized=True, path=resolved, query=query, hash=hash_),
                None,
                location,
            )

        report_configuration_issue(f"invalid redirect option: {redirect!r}", strict=self.table.strict)
        return self._snapshot((), location)

    def _alias(self, location: Location, match_as: str) -> Route:
        aliased_path = fill_params(match_as, location.params, f'aliased route with path "{match_as}"')
        aliased = self.match(Location(normalized=True, path=aliased_path))
        aliased_record = aliased.matched[-1] if aliased.matched else None
        return self._create_route(aliased_record, replace(location, params=dict(aliased.params)))

    def _create_route(
        self,
        record: RouteRecord | None,
        location: Location,
        redirected_from: Location | None = None,
    ) -> Route:
        if record is not None and record.redirect is not None:
            return self._redirect(record, redirected_from or location)
        if record is not None and record.match_as:
            return self._alias(location, record.match_as)
        matched = self.table.chain(record) if record is not None else ()
        return self._snapshot(matched, location, redirected_from)

    def _snapshot(
        self,
        matched: tuple[RouteRecord, ...],
        location: Location,
        redirected_from: Location | None = None,
    ) -> Route:
        return create_route(matched, location, redirected_from, stringify=self.config.stringify_query)
