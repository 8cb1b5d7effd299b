"""History backends.

``TransitionEngine`` defines the contract every backend implements
(``push``, ``replace``, ``go``, ``ensure_url``, ``get_current_location``);
``MemoryHistory`` is the in-memory implementation.
"""

from wayfinder.history.memory import MemoryHistory
from wayfinder.navigation.engine import TransitionEngine

__all__ = ["MemoryHistory", "TransitionEngine"]
