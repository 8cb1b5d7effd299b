"""Side-table of rendered view instances.

The rendering layer owns this table: it registers an instance when a
view mounts, marks it while it is being torn down, and unregisters it
once gone.  The transition engine only reads it through ``lookup()``,
to bind leave/update guards and to hand post-commit callbacks their
instance.
"""

from typing import Any, Protocol

from wayfinder.routing.record import RouteRecord


class InstanceLookup(Protocol):
    """Read access to live view instances."""

    def lookup(self, record: RouteRecord, view: str) -> Any | None:
        """Return the live instance for *view* of *record*, or ``None``."""
        ...


class ViewInstances:
    """Instances keyed by ``(record.id, view_name)``.

    Usage::

        instances = ViewInstances()
        instances.register(record, "default", user_view)
        instances.lookup(record, "default")  # user_view
        instances.begin_teardown(record, "default")
        instances.lookup(record, "default")  # None
    """

    __slots__ = ("_slots", "_tearing_down")

    def __init__(self) -> None:
        self._slots: dict[tuple[int, str], Any] = {}
        self._tearing_down: set[tuple[int, str]] = set()

    def register(self, record: RouteRecord, view: str, instance: Any) -> None:
        key = (record.id, view)
        self._slots[key] = instance
        self._tearing_down.discard(key)

    def begin_teardown(self, record: RouteRecord, view: str) -> None:
        key = (record.id, view)
        if key in self._slots:
            self._tearing_down.add(key)

    def unregister(self, record: RouteRecord, view: str, instance: Any = None) -> None:
        """Drop the slot; with *instance*, only if it is still the registered one."""
        key = (record.id, view)
        if instance is not None and self._slots.get(key) is not instance:
            return
        self._slots.pop(key, None)
        self._tearing_down.discard(key)

    def lookup(self, record: RouteRecord, view: str) -> Any | None:
        key = (record.id, view)
        if key in self._tearing_down:
            return None
        return self._slots.get(key)
