"""In-memory history backend.

Keeps its own stack of committed routes instead of talking to a
platform URL bar.  Used on servers, in tests, and anywhere else there is
no browser history to drive.
"""

from typing import Any

from wayfinder._internal.types import RawLocation
from wayfinder.errors import NavigationAborted, NavigationFailureType
from wayfinder.navigation.engine import OnAbort, OnComplete, TransitionEngine
from wayfinder.routing.route import START, Route


class MemoryHistory(TransitionEngine):
    """History stack held in a list.

    ``index`` points at the entry that is current; ``push`` truncates
    everything after it, ``go`` moves it without touching the stack.

    Usage::

        history = MemoryHistory(matcher)
        history.push("/users")
        history.push("/users/1")
        history.go(-1)
        history.get_current_location()  # "/users"
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.stack: list[Route] = []
        self.index = -1

    def push(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> None:
        def committed(route: Route) -> None:
            self.stack = [*self.stack[: self.index + 1], route]
            self.index += 1
            if on_complete is not None:
                on_complete(route)

        self.transition_to(location, committed, on_abort)

    def replace(
        self,
        location: RawLocation,
        on_complete: OnComplete | None = None,
        on_abort: OnAbort | None = None,
    ) -> None:
        def committed(route: Route) -> None:
            self.stack = [*self.stack[: max(self.index, 0)], route]
            self.index = max(self.index, 0)
            if on_complete is not None:
                on_complete(route)

        self.transition_to(location, committed, on_abort)

    def go(self, delta: int) -> None:
        target_index = self.index + delta
        if target_index < 0 or target_index >= len(self.stack):
            return
        route = self.stack[target_index]

        def committed(_route: Route) -> None:
            self.index = target_index
            self.update_route(route)

        def aborted(failure: NavigationAborted) -> None:
            # Already there: only the pointer moves
            if failure.kind is NavigationFailureType.DUPLICATED:
                self.index = target_index

        self.confirm_transition(route, committed, aborted)

    def ensure_url(self, push: bool = False) -> None:
        """Make the entry at ``index`` hold ``current``.

        The initial navigation and re-runs of the current location commit
        without going through ``push``/``replace``; this records them.
        """
        if self.current is START:
            return
        if 0 <= self.index < len(self.stack):
            self.stack[self.index] = self.current
        else:
            self.stack.append(self.current)
            self.index = len(self.stack) - 1

    def get_current_location(self) -> str:
        if 0 <= self.index < len(self.stack):
            return self.stack[self.index].full_path
        return "/"
