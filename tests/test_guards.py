"""Tests for wayfinder.navigation.guards — extraction, binding, post-commit polling."""

from typing import Any

from wayfinder.navigation.guards import (
    extract_enter_guards,
    extract_guard,
    extract_leave_guards,
    extract_update_guards,
    poll,
    resolve_queue,
)
from wayfinder.navigation.instances import ViewInstances
from wayfinder.navigation.scheduling import ManualScheduler
from wayfinder.routing.table import RouteTable, build_map

log: list[str] = []


class Parent:
    def before_route_leave(self, to: Any, from_route: Any, next: Any) -> None:
        log.append(f"leave parent {self.label}")
        next()

    def __init__(self, label: str = "") -> None:
        self.label = label


class Child:
    before_route_leave = [
        lambda self, to, from_route, next: log.append("leave child 1"),
        lambda self, to, from_route, next: log.append("leave child 2"),
    ]

    def before_route_update(self, to: Any, from_route: Any, next: Any) -> None:
        log.append("update child")


class Entering:
    @staticmethod
    def before_route_enter(to: Any, from_route: Any, next: Any) -> None:
        next(lambda view: log.append(f"got {view}"))


def _table() -> RouteTable:
    return build_map([
        {
            "path": "/p",
            "component": Parent,
            "children": [{"path": "c", "components": {"default": Child, "side": Child}}],
        },
        {"path": "/enter", "component": Entering},
    ])


def _noop(value: Any = None) -> None:
    pass


class TestResolveQueue:
    def test_common_prefix(self) -> None:
        table = _table()
        parent, child = table.path_map["/p"], table.path_map["/p/c"]
        enter = table.path_map["/enter"]

        assert resolve_queue((parent, child), (parent,)) == ((parent,), (child,), ())
        assert resolve_queue((parent,), (parent, child)) == ((parent,), (), (child,))
        assert resolve_queue((parent, child), (enter,)) == ((), (parent, child), (enter,))
        assert resolve_queue((), (enter,)) == ((), (), (enter,))


class TestExtractGuard:
    def test_missing(self) -> None:
        assert extract_guard(object(), "before_route_leave") == []

    def test_single_and_list(self) -> None:
        assert len(extract_guard(Parent, "before_route_leave")) == 1
        assert len(extract_guard(Child, "before_route_leave")) == 2


class TestLeaveGuards:
    def setup_method(self) -> None:
        log.clear()

    def test_deepest_first_and_bound_to_instances(self) -> None:
        table = _table()
        parent, child = table.path_map["/p"], table.path_map["/p/c"]
        instances = ViewInstances()
        instances.register(parent, "default", Parent("A"))
        instances.register(child, "default", Child())
        instances.register(child, "side", Child())

        for guard in extract_leave_guards((parent, child), instances):
            guard(None, None, _noop)

        assert log == [
            "leave child 1",
            "leave child 2",
            "leave child 1",
            "leave child 2",
            "leave parent A",
        ]

    def test_skipped_without_instance(self) -> None:
        table = _table()
        parent, child = table.path_map["/p"], table.path_map["/p/c"]
        instances = ViewInstances()
        instances.register(parent, "default", Parent("A"))

        guards = extract_leave_guards((parent, child), instances)
        assert len(guards) == 1

    def test_bound_method_used_as_is(self) -> None:
        table = _table()
        parent = table.path_map["/p"]
        instance = Parent("bound")
        parent.components["default"] = instance
        instances = ViewInstances()
        instances.register(parent, "default", instance)

        (guard,) = extract_leave_guards((parent,), instances)
        guard(None, None, _noop)
        assert log == ["leave parent bound"]


class TestUpdateGuards:
    def setup_method(self) -> None:
        log.clear()

    def test_registration_order_per_view(self) -> None:
        table = _table()
        child = table.path_map["/p/c"]
        instances = ViewInstances()
        instances.register(child, "default", Child())
        instances.register(child, "side", Child())

        guards = extract_update_guards((child,), instances)
        for guard in guards:
            guard(None, None, _noop)
        assert log == ["update child", "update child"]


class TestEnterGuards:
    def setup_method(self) -> None:
        log.clear()

    def test_deferred_callback_collected(self) -> None:
        table = _table()
        record = table.path_map["/enter"]
        instances = ViewInstances()
        scheduler = ManualScheduler()
        callbacks: list[Any] = []
        advanced: list[Any] = []

        (guard,) = extract_enter_guards((record,), callbacks, lambda: True, instances, scheduler, 0.01)
        guard(None, None, advanced.append)

        assert len(advanced) == 1
        assert callable(advanced[0])
        assert len(callbacks) == 1

        instances.register(record, "default", "view-1")
        callbacks[0]()
        assert log == ["got view-1"]

    def test_plain_next_not_collected(self) -> None:
        table = build_map([{"path": "/plain", "component": Parent}])
        record = table.path_map["/plain"]

        class Plain:
            @staticmethod
            def before_route_enter(to: Any, from_route: Any, next: Any) -> None:
                next()

        record.components["default"] = Plain
        callbacks: list[Any] = []
        (guard,) = extract_enter_guards(
            (record,), callbacks, lambda: True, ViewInstances(), ManualScheduler(), 0.01
        )
        guard(None, None, _noop)
        assert callbacks == []


class TestPoll:
    def setup_method(self) -> None:
        log.clear()

    def test_retries_until_instance_registers(self) -> None:
        table = _table()
        record = table.path_map["/enter"]
        instances = ViewInstances()
        scheduler = ManualScheduler()

        poll(lambda view: log.append(f"got {view}"), record, "default", lambda: True, instances, scheduler, 0.01)
        assert log == []
        assert len(scheduler) == 1

        scheduler.advance(0.01)
        assert log == []

        instances.register(record, "default", "late-view")
        scheduler.advance(0.01)
        assert log == ["got late-view"]
        assert len(scheduler) == 0

    def test_gives_up_when_navigation_superseded(self) -> None:
        table = _table()
        record = table.path_map["/enter"]
        scheduler = ManualScheduler()
        valid = [True]

        poll(lambda view: log.append("never"), record, "default", lambda: valid[0], ViewInstances(), scheduler, 0.01)
        valid[0] = False
        scheduler.advance(0.05)
        assert log == []
        assert len(scheduler) == 0
