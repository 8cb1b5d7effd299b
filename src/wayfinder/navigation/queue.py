"""Sequential task runner for guard queues.

Each step receives an explicit ``advance`` capability and the queue only
moves when a step calls it, so the caller's iterator can run its
staleness check at every step boundary.  ``None`` entries are skipped.
"""

from collections.abc import Callable, Sequence
from typing import Any

type Step = Callable[..., Any]
type StepRunner = Callable[[Step, Callable[..., None]], None]


def run_queue(queue: Sequence[Step | None], iterator: StepRunner, on_done: Callable[[], None]) -> None:
    """Run *queue* one step at a time through *iterator*, then call *on_done*."""

    def step(index: int) -> None:
        while index < len(queue) and queue[index] is None:
            index += 1
        if index >= len(queue):
            on_done()
            return
        iterator(queue[index], lambda *_: step(index + 1))

    step(0)
