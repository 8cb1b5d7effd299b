"""Tests for wayfinder.navigation.lazy — lazily loaded view components."""

import types
from typing import Any

import anyio
import pytest

from wayfinder.navigation.lazy import LazyComponent, resolve_lazy_components
from wayfinder.navigation.scheduling import ManualScheduler, TaskGroupScheduler
from wayfinder.routing.table import build_map


class Users:
    pass


class Sidebar:
    pass


def _run_step(matched: tuple, scheduler: Any = None) -> list[tuple]:
    calls: list[tuple] = []
    step = resolve_lazy_components(matched, scheduler or ManualScheduler())
    step(None, None, lambda *args: calls.append(args))
    return calls


class TestResolveLazyComponents:
    def test_no_lazy_views_proceeds_immediately(self) -> None:
        record = build_map([{"path": "/a", "component": Users}]).path_map["/a"]
        assert _run_step((record,)) == [()]

    def test_sync_resolve_replaces_component(self) -> None:
        lazy = LazyComponent(lambda resolve, reject: resolve(Users))
        record = build_map([{"path": "/a", "component": lazy}]).path_map["/a"]

        assert _run_step((record,)) == [()]
        assert record.components["default"] is Users
        assert lazy.resolved is Users

    def test_waits_for_every_view(self) -> None:
        resolvers: dict[str, Any] = {}
        users = LazyComponent(lambda resolve, reject: resolvers.__setitem__("users", resolve))
        side = LazyComponent(lambda resolve, reject: resolvers.__setitem__("side", resolve))
        record = build_map([{"path": "/a", "components": {"default": users, "side": side}}]).path_map["/a"]

        calls: list[tuple] = []
        step = resolve_lazy_components((record,), ManualScheduler())
        step(None, None, lambda *args: calls.append(args))
        assert calls == []

        resolvers["users"](Users)
        assert calls == []
        resolvers["side"](Sidebar)
        assert calls == [()]
        assert record.components == {"default": Users, "side": Sidebar}

    def test_one_sync_and_one_pending_proceeds_once(self) -> None:
        resolvers: list[Any] = []
        sync = LazyComponent(lambda resolve, reject: resolve(Users))
        pending = LazyComponent(lambda resolve, reject: resolvers.append(resolve))
        record = build_map([{"path": "/a", "components": {"default": sync, "side": pending}}]).path_map["/a"]

        calls: list[tuple] = []
        step = resolve_lazy_components((record,), ManualScheduler())
        step(None, None, lambda *args: calls.append(args))
        assert calls == []
        resolvers[0](Sidebar)
        resolvers[0](Sidebar)
        assert calls == [()]

    def test_module_contributes_default(self) -> None:
        module = types.ModuleType("views")
        module.default = Users  # type: ignore[attr-defined]
        lazy = LazyComponent(lambda resolve, reject: resolve(module))
        record = build_map([{"path": "/a", "component": lazy}]).path_map["/a"]

        _run_step((record,))
        assert record.components["default"] is Users

    def test_previously_resolved_is_reused(self) -> None:
        loads: list[int] = []

        def loader(resolve: Any, reject: Any) -> None:
            loads.append(1)
            resolve(Users)

        lazy = LazyComponent(loader)
        first = build_map([{"path": "/a", "component": lazy}]).path_map["/a"]
        second = build_map([{"path": "/b", "component": lazy}]).path_map["/b"]
        _run_step((first,))
        _run_step((second,))
        assert loads == [1]
        assert second.components["default"] is Users

    def test_reject_aborts_with_error(self) -> None:
        lazy = LazyComponent(lambda resolve, reject: reject("network down"))
        record = build_map([{"path": "/a", "component": lazy}]).path_map["/a"]

        calls = _run_step((record,))
        assert len(calls) == 1
        (error,) = calls[0]
        assert isinstance(error, RuntimeError)
        assert "network down" in str(error)

    def test_reject_with_exception_passes_it_through(self) -> None:
        boom = OSError("boom")
        lazy = LazyComponent(lambda resolve, reject: reject(boom))
        record = build_map([{"path": "/a", "component": lazy}]).path_map["/a"]
        assert _run_step((record,)) == [(boom,)]

    def test_loader_raising_aborts(self) -> None:
        def loader(resolve: Any, reject: Any) -> None:
            raise ImportError("missing module")

        record = build_map([{"path": "/a", "component": LazyComponent(loader)}]).path_map["/a"]
        calls = _run_step((record,))
        assert len(calls) == 1
        assert isinstance(calls[0][0], ImportError)

    def test_only_first_failure_reported(self) -> None:
        a = LazyComponent(lambda resolve, reject: reject(ValueError("a")))
        b = LazyComponent(lambda resolve, reject: reject(ValueError("b")))
        record = build_map([{"path": "/a", "components": {"default": a, "side": b}}]).path_map["/a"]
        calls = _run_step((record,))
        assert len(calls) == 1
        assert str(calls[0][0]) == "a"

    def test_coroutine_loader_needs_event_loop(self) -> None:
        async def loader() -> type:
            return Users

        record = build_map([{"path": "/a", "component": LazyComponent(loader)}]).path_map["/a"]
        with pytest.raises(Exception, match="TaskGroupScheduler"):
            _run_step((record,))

    @pytest.mark.anyio
    async def test_coroutine_loader(self) -> None:
        async def loader() -> type:
            await anyio.sleep(0)
            return Users

        record = build_map([{"path": "/a", "component": LazyComponent(loader)}]).path_map["/a"]
        calls: list[tuple] = []
        async with anyio.create_task_group() as tg:
            step = resolve_lazy_components((record,), TaskGroupScheduler(tg))
            step(None, None, lambda *args: calls.append(args))
        assert calls == [()]
        assert record.components["default"] is Users

    @pytest.mark.anyio
    async def test_callback_loader_returning_awaitable(self) -> None:
        async def fetch(resolve: Any) -> None:
            await anyio.sleep(0)
            resolve(Users)

        record = build_map(
            [{"path": "/a", "component": LazyComponent(lambda resolve, reject: fetch(resolve))}]
        ).path_map["/a"]
        calls: list[tuple] = []
        async with anyio.create_task_group() as tg:
            step = resolve_lazy_components((record,), TaskGroupScheduler(tg))
            step(None, None, lambda *args: calls.append(args))
        assert calls == [()]
        assert record.components["default"] is Users


class TestLazyComponentRepr:
    def test_repr(self) -> None:
        def load_users(resolve: Any, reject: Any) -> None:
            pass

        lazy = LazyComponent(load_users)
        assert "pending" in repr(lazy)
        lazy.resolved = Users
        assert "resolved" in repr(lazy)
