"""Query string codec.

Keys and values are percent-encoded per RFC 3986 with ``!'()*`` also
escaped and commas kept readable.  Repeated keys accumulate into a list,
a key without ``=`` parses to ``None`` and serializes back as the bare
key, and ``+`` decodes to a space.
"""

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote, unquote

from wayfinder._internal.types import Query

logger = logging.getLogger("wayfinder.routing")

_RESERVED_RE = re.compile(r"[!'()*]")
_LEADING_RE = re.compile(r"^(\?|#|&)")


def encode(value: str) -> str:
    """``encodeURIComponent`` plus ``!'()*``, with commas left as-is."""
    encoded = quote(value, safe="-_.!~*'()")
    encoded = _RESERVED_RE.sub(lambda m: f"%{ord(m.group()):x}", encoded)
    return encoded.replace("%2C", ",")


def decode(value: str) -> str:
    return unquote(value, errors="strict")


def parse_query(query: str) -> Query:
    """Parse a raw query string (leading ``?``, ``#`` or ``&`` tolerated).

    Examples::

        parse_query("?a=1&a=2&flag&q=hello+world")
        # {"a": ["1", "2"], "flag": None, "q": "hello world"}
    """
    res: Query = {}
    query = _LEADING_RE.sub("", query.strip())
    if not query:
        return res

    for param in query.split("&"):
        parts = param.replace("+", " ").split("=")
        key = decode(parts[0])
        val = decode("=".join(parts[1:])) if len(parts) > 1 else None

        if key not in res:
            res[key] = val
        else:
            existing = res[key]
            if isinstance(existing, list):
                existing.append(val)
            else:
                res[key] = [existing, val]

    return res


def stringify_query(obj: Mapping[str, Any] | None) -> str:
    """Serialize a query mapping, including the leading ``?`` when non-empty."""
    if not obj:
        return ""

    pieces: list[str] = []
    for key, val in obj.items():
        if val is None:
            pieces.append(encode(key))
        elif isinstance(val, (list, tuple)):
            items = [encode(key) if item is None else f"{encode(key)}={encode(str(item))}" for item in val]
            joined = "&".join(items)
            if joined:
                pieces.append(joined)
        else:
            pieces.append(f"{encode(key)}={encode(str(val))}")

    res = "&".join(pieces)
    return f"?{res}" if res else ""


def resolve_query(
    query: str | None,
    extra_query: Mapping[str, Any] | None = None,
    parse: Callable[[str], Query] | None = None,
) -> Query:
    """Parse *query* and overlay *extra_query* (explicit keys win).

    A malformed query string is logged and treated as empty.
    """
    parser = parse or parse_query
    try:
        parsed = dict(parser(query or ""))
    except (ValueError, UnicodeDecodeError) as exc:
        logger.warning("malformed query string %r: %s", query, exc)
        parsed = {}
    if extra_query:
        parsed.update(extra_query)
    return parsed
