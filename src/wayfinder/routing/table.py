"""Route record registry — flattens route configs into lookup tables.

Three aligned tables come out of a build:

- ``path_list``: paths in matching priority order (wildcards last)
- ``path_map``: path -> record, first registration wins
- ``name_map``: name -> record, first registration wins

Tables are append-only.  ``add_routes()`` extends them in place and
only ever moves wildcard entries, back to the end of ``path_list``.
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any

from wayfinder.errors import report_configuration_issue
from wayfinder.routing.location import clean_path
from wayfinder.routing.pattern import PatternOptions, RoutePattern, compile_pattern
from wayfinder.routing.record import DEFAULT_VIEW, RouteConfig, RouteRecord

_DEFAULT_CHILD_RE = re.compile(r"^/?$")


def normalize_path(path: str, parent: RouteRecord | None, strict: bool = False) -> str:
    """Join *path* to its parent's path unless it is already absolute.

    Top-level relative paths are rooted at ``/``; the bare ``*`` wildcard
    is left alone.
    """
    if not strict:
        path = path.removesuffix("/")
    if path.startswith("/"):
        return path
    if parent is None:
        return path if path.startswith("*") else "/" + path
    return clean_path(f"{parent.path}/{path}")


class RouteTable:
    """Arena of route records plus the three lookup tables.

    Usage::

        table = RouteTable()
        table.add_routes([{"path": "/", "component": Home}])
        record = table.path_map["/"]
        table.chain(record)  # (record,)
    """

    __slots__ = ("name_map", "path_list", "path_map", "records", "strict")

    def __init__(self, *, strict: bool = False) -> None:
        self.records: list[RouteRecord] = []
        self.path_list: list[str] = []
        self.path_map: dict[str, RouteRecord] = {}
        self.name_map: dict[str, RouteRecord] = {}
        # Escalate configuration warnings into ConfigurationError
        self.strict = strict

    def __len__(self) -> int:
        return len(self.path_list)

    def parent(self, record: RouteRecord) -> RouteRecord | None:
        if record.parent_id is None:
            return None
        return self.records[record.parent_id]

    def chain(self, record: RouteRecord | None) -> tuple[RouteRecord, ...]:
        """Root-first ancestor chain ending at *record*."""
        res: list[RouteRecord] = []
        while record is not None:
            res.append(record)
            record = self.parent(record)
        res.reverse()
        return tuple(res)

    # -- Building --

    def add_routes(self, routes: Iterable[RouteConfig | Mapping[str, Any]]) -> None:
        """Register *routes* and re-sort wildcards to the end."""
        for route in routes:
            self._add_record(RouteConfig.coerce(route), None, None)

        wildcards = [path for path in self.path_list if self.path_map[path].pattern.is_wildcard]
        if wildcards:
            self.path_list[:] = [path for path in self.path_list if path not in wildcards] + wildcards

    def _add_record(
        self,
        route: RouteConfig,
        parent: RouteRecord | None,
        match_as: str | None,
    ) -> None:
        options = PatternOptions.coerce(route.pattern_options)
        path = normalize_path(route.path, parent, options.strict)

        if route.case_sensitive is not None:
            options = PatternOptions(
                sensitive=route.case_sensitive,
                strict=options.strict,
                end=options.end,
                delimiter=options.delimiter,
            )

        if route.components is not None:
            components = dict(route.components)
            props = route.props or {}
        else:
            components = {DEFAULT_VIEW: route.component}
            props = {} if route.props is None else {DEFAULT_VIEW: route.props}

        if route.before_enter is None:
            before_enter: tuple[Any, ...] = ()
        elif callable(route.before_enter):
            before_enter = (route.before_enter,)
        else:
            before_enter = tuple(route.before_enter)

        record = RouteRecord(
            id=len(self.records),
            path=path,
            pattern=self._compile(path, options),
            components=components,
            name=route.name,
            parent_id=parent.id if parent is not None else None,
            match_as=match_as,
            redirect=route.redirect,
            before_enter=before_enter,
            meta=route.meta or {},
            props=props,
        )
        self.records.append(record)

        if route.children:
            children = [RouteConfig.coerce(child) for child in route.children]
            if (
                route.name
                and route.redirect is None
                and any(_DEFAULT_CHILD_RE.match(child.path) for child in children)
            ):
                report_configuration_issue(
                    f"Named Route '{route.name}' has a default child route. "
                    f"When navigating to this named route ({{'name': '{route.name}'}}), "
                    "the default child route will not be rendered. Remove the name from "
                    "this route and use the name of the default child route for named "
                    "links instead.",
                    strict=self.strict,
                )
            for child in children:
                child_match_as = clean_path(f"{match_as}/{child.path}") if match_as else None
                self._add_record(child, record, child_match_as)

        for alias in route.aliases:
            alias_route = RouteConfig(path=alias, children=route.children)
            self._add_record(alias_route, parent, record.path or "/")

        if record.path not in self.path_map:
            self.path_list.append(record.path)
            self.path_map[record.path] = record

        if route.name:
            if route.name not in self.name_map:
                self.name_map[route.name] = record
            elif match_as is None:
                report_configuration_issue(
                    f'Duplicate named routes definition: {{ name: "{route.name}", path: "{record.path}" }}',
                    strict=self.strict,
                )

    def _compile(self, path: str, options: PatternOptions) -> RoutePattern:
        pattern = compile_pattern(path, options)
        seen: set[str | int] = set()
        for key in pattern.keys:
            if key.name in seen:
                report_configuration_issue(
                    f'Duplicate param keys in route with path: "{path}"',
                    strict=self.strict,
                )
            seen.add(key.name)
        return pattern


def build_map(
    routes: Iterable[RouteConfig | Mapping[str, Any]],
    existing: RouteTable | None = None,
    *,
    strict: bool = False,
) -> RouteTable:
    """Build route tables from *routes*, extending *existing* when given."""
    table = existing if existing is not None else RouteTable(strict=strict)
    table.add_routes(routes)
    return table
