"""Router configuration.

RouterConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(base="/app", hash_mode=True)
    """

    # URL building
    base: str = "/"
    hash_mode: bool = False  # hrefs look like "/app/#/users/1"

    # Post-commit callbacks poll for their view instance at this interval (seconds)
    poll_interval: float = 0.016

    # Query codec overrides
    parse_query: Callable[[str], dict[str, Any]] | None = None
    stringify_query: Callable[[Mapping[str, Any]], str] | None = None

    # Raise ConfigurationError instead of logging configuration warnings
    warnings_as_errors: bool = False


def normalize_base(base: str | None) -> str:
    """Ensure a leading slash and strip the trailing one.

    ``""`` and ``"/"`` both normalize to ``""`` so hrefs can be built
    with a plain join.
    """
    if not base:
        base = "/"
    if not base.startswith("/"):
        base = "/" + base
    return base.removesuffix("/")
