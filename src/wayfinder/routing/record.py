"""Route configuration grammar and RouteRecord.

``RouteConfig`` is the declarative input (plain mappings are accepted
too); ``RouteRecord`` is one resolved node of the flattened tree.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from wayfinder._internal.types import Component, Guard
from wayfinder.errors import ConfigurationError
from wayfinder.routing.pattern import PatternOptions, RoutePattern

DEFAULT_VIEW = "default"

type Redirect = str | Mapping[str, Any] | Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class RouteConfig:
    """One node of a route configuration tree.

    Usage::

        RouteConfig(
            path="/user/:id",
            name="user",
            component=UserView,
            children=[RouteConfig(path="posts", component=UserPosts)],
            alias="/u/:id",
        )

    Plain mappings with the same keys are accepted wherever a
    ``RouteConfig`` is.
    """

    path: str
    name: str | None = None
    component: Component = None
    components: Mapping[str, Component] | None = None
    children: Sequence["RouteConfig | Mapping[str, Any]"] = ()
    redirect: Redirect | None = None
    alias: str | Sequence[str] | None = None
    before_enter: Guard | Sequence[Guard] | None = None
    meta: Mapping[str, Any] | None = None
    props: Any = None
    case_sensitive: bool | None = None
    pattern_options: PatternOptions | Mapping[str, Any] | None = None

    @classmethod
    def coerce(cls, raw: "RouteConfig | Mapping[str, Any]") -> "RouteConfig":
        """Validate and convert a mapping into a ``RouteConfig``."""
        if isinstance(raw, RouteConfig):
            config = raw
        elif isinstance(raw, Mapping):
            if raw.get("path") is None:
                msg = f'"path" is required in a route configuration: {dict(raw)!r}'
                raise ConfigurationError(msg)
            unknown = set(raw) - set(cls.__dataclass_fields__)
            if unknown:
                msg = f"Unknown route configuration keys {sorted(unknown)} for path {raw['path']!r}"
                raise ConfigurationError(msg)
            config = cls(**raw)
        else:
            msg = f"Route configuration must be a RouteConfig or a mapping, got {type(raw).__name__}"
            raise ConfigurationError(msg)

        if config.path is None:
            msg = '"path" is required in a route configuration.'
            raise ConfigurationError(msg)
        if isinstance(config.component, str):
            msg = (
                f'route config "component" for path: {config.path or config.name} cannot be a '
                "string id. Use an actual component instead."
            )
            raise ConfigurationError(msg)
        return config

    @property
    def aliases(self) -> tuple[str, ...]:
        if self.alias is None:
            return ()
        if isinstance(self.alias, str):
            return (self.alias,)
        return tuple(self.alias)


@dataclass(frozen=True, slots=True, eq=False)
class RouteRecord:
    """A node of the flattened route tree.

    Records live in the ``RouteTable`` arena; ``id`` is the record's
    index there and ``parent_id`` the index of its parent.  Records
    compare by identity.

    ``components`` is the one mutable slot: lazy views are replaced by
    their resolved component once loaded.  Rendered instances are kept
    in a separate ``ViewInstances`` side-table, never on the record.
    """

    id: int
    path: str
    pattern: RoutePattern
    components: dict[str, Component]
    name: str | None = None
    parent_id: int | None = None
    match_as: str | None = None
    redirect: Redirect | None = None
    before_enter: tuple[Guard, ...] = ()
    meta: Mapping[str, Any] = field(default_factory=dict)
    props: Mapping[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        label = f" name={self.name!r}" if self.name else ""
        alias = f" match_as={self.match_as!r}" if self.match_as else ""
        return f"<RouteRecord #{self.id} {self.path!r}{label}{alias}>"
