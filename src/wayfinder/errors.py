"""Wayfinder exception hierarchy.

Shared across the pattern compiler, registry, matcher, and transition
engine so every module raises and catches the same types.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger("wayfinder.routing")


class WayfinderError(Exception):
    """Base for all wayfinder-specific errors."""


class ConfigurationError(WayfinderError):
    """Raised when a route configuration is invalid.

    Typically raised while the route table is being built.
    """


class ConfigurationWarning(UserWarning):
    """Category for non-fatal route configuration problems.

    Duplicate route names, duplicate param keys, a named route with a
    default child, malformed redirect targets.  The table keeps building.
    """


def report_configuration_issue(message: str, *, strict: bool = False) -> None:
    """Log a configuration problem, or raise it when *strict* is set."""
    if strict:
        raise ConfigurationError(message)
    logger.warning("%s: %s", ConfigurationWarning.__name__, message)


# ---------------------------------------------------------------------------
# Pattern fill errors
# ---------------------------------------------------------------------------


class PatternError(WayfinderError, ValueError):
    """A compiled pattern could not be filled with the given params."""

    def __init__(self, param: str | int | None, message: str) -> None:
        super().__init__(message)
        self.param = param


class MissingParameterError(PatternError):
    """A required parameter has no value."""

    def __init__(self, param: str | int) -> None:
        super().__init__(param, f'Expected "{param}" to be defined')


class TypeMismatchError(PatternError):
    """A sequence was given for a single param, or a scalar for a repeat param."""


class EmptyRepeatError(PatternError):
    """A required repeat parameter was given an empty sequence."""

    def __init__(self, param: str | int) -> None:
        super().__init__(param, f'Expected "{param}" to not be empty')


class ParameterPatternMismatchError(PatternError):
    """An encoded value does not match the parameter's own sub-pattern."""

    def __init__(self, param: str | int, pattern: str, segment: str) -> None:
        super().__init__(
            param,
            f'Expected "{param}" to match "{pattern}", but received "{segment}"',
        )
        self.pattern = pattern
        self.segment = segment


# ---------------------------------------------------------------------------
# Navigation failures
# ---------------------------------------------------------------------------


class NavigationFailureType(Enum):
    """Why a navigation did not commit."""

    ABORTED = "aborted"  # a guard resolved False
    CANCELLED = "cancelled"  # superseded by a newer navigation
    DUPLICATED = "duplicated"  # target is the current route
    REDIRECTED = "redirected"  # a guard redirected elsewhere
    ERROR = "error"  # a guard raised or resolved an exception


@dataclass(slots=True, eq=False)
class NavigationAborted(WayfinderError):
    """A navigation ended without committing.

    Passed to ``on_abort`` callbacks and raised by ``Router.navigate()``.
    Never raised synchronously from ``push()`` or ``replace()``.
    """

    kind: NavigationFailureType
    to: Any = None
    from_route: Any = None
    error: BaseException | None = None

    def __str__(self) -> str:
        target = getattr(self.to, "full_path", None) or "?"
        origin = getattr(self.from_route, "full_path", None) or "?"
        detail = f"navigation {self.kind.value}: {origin} -> {target}"
        if self.error is not None:
            return f"{detail} ({self.error})"
        return detail
