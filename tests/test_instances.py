"""Tests for wayfinder.navigation.instances — the view instance side-table."""

import pytest

from wayfinder.navigation.instances import ViewInstances
from wayfinder.routing.record import RouteRecord
from wayfinder.routing.table import build_map


@pytest.fixture
def record() -> RouteRecord:
    return build_map([{"path": "/a"}]).path_map["/a"]


class TestViewInstances:
    def test_register_and_lookup(self, record: RouteRecord) -> None:
        instances = ViewInstances()
        view = object()
        instances.register(record, "default", view)
        assert instances.lookup(record, "default") is view
        assert instances.lookup(record, "side") is None

    def test_teardown_hides_instance(self, record: RouteRecord) -> None:
        instances = ViewInstances()
        instances.register(record, "default", object())
        instances.begin_teardown(record, "default")
        assert instances.lookup(record, "default") is None

    def test_register_clears_teardown(self, record: RouteRecord) -> None:
        instances = ViewInstances()
        instances.register(record, "default", object())
        instances.begin_teardown(record, "default")
        fresh = object()
        instances.register(record, "default", fresh)
        assert instances.lookup(record, "default") is fresh

    def test_unregister(self, record: RouteRecord) -> None:
        instances = ViewInstances()
        instances.register(record, "default", object())
        instances.unregister(record, "default")
        assert instances.lookup(record, "default") is None

    def test_unregister_only_matching_instance(self, record: RouteRecord) -> None:
        instances = ViewInstances()
        current = object()
        instances.register(record, "default", current)
        instances.unregister(record, "default", object())
        assert instances.lookup(record, "default") is current
