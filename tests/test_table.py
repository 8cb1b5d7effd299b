"""Tests for wayfinder.routing.table — flattening route configs into lookup tables."""

import logging

import pytest

from wayfinder.errors import ConfigurationError
from wayfinder.routing.pattern import PatternOptions
from wayfinder.routing.record import RouteConfig
from wayfinder.routing.table import RouteTable, build_map, normalize_path


class Home:
    pass


class Other:
    pass


class TestNormalizePath:
    def test_absolute(self) -> None:
        assert normalize_path("/a", None) == "/a"

    def test_top_level_relative_gets_rooted(self) -> None:
        assert normalize_path("about", None) == "/about"

    def test_bare_wildcard_left_alone(self) -> None:
        assert normalize_path("*", None) == "*"

    def test_trailing_slash_trimmed_unless_strict(self) -> None:
        assert normalize_path("/a/", None) == "/a"
        assert normalize_path("/a/", None, strict=True) == "/a/"

    def test_root(self) -> None:
        assert normalize_path("/", None) == "/"


class TestBuildMap:
    def test_tables(self) -> None:
        table = build_map([
            {"path": "/", "component": Home},
            {"path": "/user/:id", "name": "user", "component": Other},
        ])
        assert table.path_list == ["/", "/user/:id"]
        assert table.name_map["user"] is table.path_map["/user/:id"]
        assert table.path_map["/"].components == {"default": Home}
        assert len(table) == 2

    def test_records_live_in_arena(self) -> None:
        table = build_map([{"path": "/a"}, {"path": "/b"}])
        for index, record in enumerate(table.records):
            assert record.id == index

    def test_accepts_route_config(self) -> None:
        table = build_map([RouteConfig(path="/typed", component=Home)])
        assert "/typed" in table.path_map

    def test_extends_existing(self) -> None:
        table = build_map([{"path": "/a"}])
        same = build_map([{"path": "/b"}], table)
        assert same is table
        assert table.path_list == ["/a", "/b"]

    def test_named_views(self) -> None:
        table = build_map([{"path": "/", "components": {"default": Home, "side": Other}}])
        assert table.path_map["/"].components == {"default": Home, "side": Other}

    def test_before_enter_normalized_to_tuple(self) -> None:
        def guard(to, from_route, next) -> None:
            next()

        table = build_map([{"path": "/a", "before_enter": guard}, {"path": "/b", "before_enter": [guard, guard]}])
        assert table.path_map["/a"].before_enter == (guard,)
        assert table.path_map["/b"].before_enter == (guard, guard)

    def test_case_sensitive(self) -> None:
        table = build_map([{"path": "/About", "case_sensitive": True}])
        assert table.path_map["/About"].pattern.regex.match("/about") is None

    def test_strict_pattern_option_keeps_trailing_slash(self) -> None:
        table = build_map([{"path": "/a/", "pattern_options": PatternOptions(strict=True)}])
        assert table.path_list == ["/a/"]


class TestNesting:
    def test_children_joined_to_parent(self) -> None:
        table = build_map([
            {"path": "/parent", "children": [{"path": "child"}, {"path": "/abs"}]},
        ])
        assert table.path_list == ["/parent/child", "/abs", "/parent"]
        child = table.path_map["/parent/child"]
        assert table.chain(child) == (table.path_map["/parent"], child)
        assert table.parent(table.path_map["/abs"]) is table.path_map["/parent"]

    def test_default_child(self) -> None:
        table = build_map([{"path": "/parent", "children": [{"path": ""}]}])
        default_child = table.path_map["/parent/"]
        assert default_child.pattern.regex.match("/parent")

    def test_named_route_with_default_child_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="wayfinder.routing"):
            build_map([{"path": "/p", "name": "p", "children": [{"path": ""}]}])
        assert "has a default child route" in caplog.text

    def test_named_route_with_redirect_does_not_warn(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="wayfinder.routing"):
            build_map([{"path": "/p", "name": "p", "redirect": "/p/x", "children": [{"path": ""}]}])
        assert caplog.text == ""


class TestPriority:
    def test_wildcard_moved_to_end(self) -> None:
        table = build_map([{"path": "*"}, {"path": "/a"}, {"path": "/:x"}])
        assert table.path_list == ["/a", "/:x", "*"]

    def test_wildcards_keep_relative_order(self) -> None:
        table = build_map([{"path": "/docs/*"}, {"path": "*"}, {"path": "/a"}])
        assert table.path_list == ["/a", "/docs/*", "*"]

    def test_add_routes_resorts_wildcards(self) -> None:
        table = build_map([{"path": "*"}])
        table.add_routes([{"path": "/late"}])
        assert table.path_list == ["/late", "*"]


class TestDuplicates:
    def test_duplicate_path_first_wins_silently(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="wayfinder.routing"):
            table = build_map([
                {"path": "/a", "component": Home},
                {"path": "/a", "component": Other},
            ])
        assert table.path_list == ["/a"]
        assert table.path_map["/a"].components["default"] is Home
        assert caplog.text == ""

    def test_duplicate_name_warns_first_wins(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="wayfinder.routing"):
            table = build_map([
                {"path": "/a", "name": "dup"},
                {"path": "/b", "name": "dup"},
            ])
        assert table.name_map["dup"].path == "/a"
        assert "Duplicate named routes definition" in caplog.text

    def test_duplicate_name_raises_when_strict(self) -> None:
        with pytest.raises(ConfigurationError, match="Duplicate named routes"):
            build_map([{"path": "/a", "name": "dup"}, {"path": "/b", "name": "dup"}], strict=True)

    def test_duplicate_param_keys_warn(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="wayfinder.routing"):
            build_map([{"path": "/:id/:id"}])
        assert "Duplicate param keys" in caplog.text


class TestAliases:
    def test_alias_record_points_at_real_path(self) -> None:
        table = build_map([{"path": "/real", "component": Home, "alias": "/alt"}])
        assert set(table.path_list) == {"/real", "/alt"}
        assert table.path_map["/alt"].match_as == "/real"
        assert table.path_map["/real"].match_as is None

    def test_multiple_aliases(self) -> None:
        table = build_map([{"path": "/real", "alias": ["/a1", "/a2"]}])
        assert table.path_map["/a1"].match_as == "/real"
        assert table.path_map["/a2"].match_as == "/real"

    def test_alias_children(self) -> None:
        table = build_map([
            {"path": "/real", "alias": "/alt", "children": [{"path": "kid"}]},
        ])
        assert table.path_map["/alt/kid"].match_as == "/real/kid"
        assert table.path_map["/real/kid"].match_as is None

    def test_aliased_named_route_does_not_warn(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="wayfinder.routing"):
            build_map([
                {"path": "/real", "alias": "/alt", "children": [{"path": "kid", "name": "kid"}]},
            ])
        assert caplog.text == ""


class TestValidation:
    def test_missing_path(self) -> None:
        with pytest.raises(ConfigurationError, match='"path" is required'):
            build_map([{"name": "nameless"}])

    def test_string_component(self) -> None:
        with pytest.raises(ConfigurationError, match="cannot be a string id"):
            build_map([{"path": "/a", "component": "Home"}])

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown route configuration keys"):
            build_map([{"path": "/a", "beforeEnter": None}])

    def test_not_a_mapping(self) -> None:
        with pytest.raises(ConfigurationError):
            RouteTable().add_routes(["/a"])
