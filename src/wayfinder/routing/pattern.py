"""Path pattern compiler — route templates to regexes and back.

A template such as ``/user/:id(\\d+)/:tab?`` compiles to:

- a matching regex with one capture group per parameter token, and
- a filler that rebuilds a concrete path from a params mapping.

Template grammar::

    :name            named param, one or more non-delimiter characters
    :name(regex)     named param with a custom pattern
    (regex)          unnamed param, keyed 0, 1, 2, ...
    *                wildcard, captures the remainder (exposed as "pathMatch")
    ?  +  *          modifiers after a param: optional, repeat, optional repeat
    \\x              escaped character, emitted literally

Both compiled patterns and fillers are memoized for the lifetime of the
process.  Compilation is pure, so recompiling the same key twice only
wastes work.
"""

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from wayfinder.errors import (
    EmptyRepeatError,
    MissingParameterError,
    ParameterPatternMismatchError,
    PatternError,
    TypeMismatchError,
)

logger = logging.getLogger("wayfinder.routing")

# Name under which the wildcard and unnamed group 0 are exposed
WILDCARD_PARAM = "pathMatch"

_PATH_TOKEN_RE = re.compile(
    "|".join(
        (
            # Escaped characters that would otherwise be tokenized
            r"(\\.)",
            # "/:test(\d+)?" -> prefix, name, capture, -, modifier, -
            # "/route(\d+)"  -> -, -, -, group, -, -
            # "/*"           -> prefix, -, -, -, -, asterisk
            r"([/.])?(?:(?:\:(\w+)(?:\(((?:\\.|[^\\()])+)\))?|\(((?:\\.|[^\\()])+)\))([+*?])?|(\*))",
        )
    ),
    re.ASCII,
)

_ESCAPE_STRING_RE = re.compile(r"([.+*?=^!:${}()\[\]|/\\])")
_ESCAPE_GROUP_RE = re.compile(r"([=!:$/()])")
_CAPTURE_GROUP_RE = re.compile(r"\((?!\?)")

# Characters encodeURI leaves alone (quote() always keeps "_.-~")
_URI_SAFE = ";,/?:@&=+$!*'()#"


def escape_string(text: str) -> str:
    """Escape regex metacharacters in literal template text."""
    return _ESCAPE_STRING_RE.sub(r"\\\1", text)


def _escape_group(group: str) -> str:
    return _ESCAPE_GROUP_RE.sub(r"\\\1", group)


@dataclass(frozen=True, slots=True)
class PatternOptions:
    """Compilation options.

    Attributes:
        sensitive: Match case-sensitively.
        strict: Do not tolerate an optional trailing delimiter.
        end: Anchor at the end. ``False`` gives a prefix match that must
            be followed by a delimiter or the end of the string.
        delimiter: Segment delimiter.
    """

    sensitive: bool = False
    strict: bool = False
    end: bool = True
    delimiter: str = "/"

    @classmethod
    def coerce(cls, value: "PatternOptions | Mapping[str, Any] | None") -> "PatternOptions":
        if value is None:
            return cls()
        if isinstance(value, PatternOptions):
            return value
        return cls(**{k: v for k, v in value.items() if v is not None})


@dataclass(frozen=True, slots=True)
class ParamToken:
    """A parameter slot in a parsed template."""

    name: str | int
    prefix: str
    delimiter: str
    optional: bool
    repeat: bool
    partial: bool
    asterisk: bool
    pattern: str | None


type Token = str | ParamToken


def parse(template: str, delimiter: str = "/") -> list[Token]:
    """Split a template into literal strings and ``ParamToken`` entries.

    Examples::

        parse("/user/:id")  -> ["/user", ParamToken(name="id", prefix="/", ...)]
        parse("/files/*")   -> ["/files", ParamToken(name=0, asterisk=True, ...)]
    """
    tokens: list[Token] = []
    key = 0
    index = 0
    path = ""

    for res in _PATH_TOKEN_RE.finditer(template):
        offset = res.start()
        path += template[index:offset]
        index = res.end()

        escaped = res.group(1)
        if escaped:
            path += escaped[1]
            continue

        following = template[index] if index < len(template) else None
        prefix, name, capture, group, modifier, asterisk = res.group(2, 3, 4, 5, 6, 7)

        if path:
            tokens.append(path)
            path = ""

        token_delimiter = prefix or delimiter
        pattern = capture or group
        if pattern:
            token_pattern = _escape_group(pattern)
        elif asterisk:
            token_pattern = ".*"
        else:
            token_pattern = f"[^{escape_string(token_delimiter)}]+?"

        if name:
            token_name: str | int = name
        else:
            token_name = key
            key += 1

        tokens.append(
            ParamToken(
                name=token_name,
                prefix=prefix or "",
                delimiter=token_delimiter,
                optional=modifier in ("?", "*"),
                repeat=modifier in ("+", "*"),
                partial=prefix is not None and following is not None and following != prefix,
                asterisk=bool(asterisk),
                pattern=token_pattern,
            )
        )

    if index < len(template):
        path += template[index:]
    if path:
        tokens.append(path)

    return tokens


def tokens_to_regex(tokens: Sequence[Token], options: PatternOptions) -> tuple[str, list[ParamToken]]:
    """Build the regex source (without flags) and the ordered capture keys."""
    keys: list[ParamToken] = []
    route = ""

    for token in tokens:
        if isinstance(token, str):
            route += escape_string(token)
            continue

        prefix = escape_string(token.prefix)
        capture = f"(?:{token.pattern})"
        keys.append(token)

        if token.repeat:
            capture += f"(?:{prefix}{capture})*"

        if token.optional:
            if token.partial:
                capture = f"{prefix}({capture})?"
            else:
                capture = f"(?:{prefix}({capture}))?"
        else:
            capture = f"{prefix}({capture})"

        route += capture

    delimiter = escape_string(options.delimiter)
    ends_with_delimiter = route.endswith(delimiter)

    # A trailing delimiter is valid at the end of a match, not in the middle:
    # in prefix mode "/test/" must not match "/test//route".
    if not options.strict:
        if ends_with_delimiter:
            route = route[: -len(delimiter)]
        route += f"(?:{delimiter}(?=\\Z))?"

    if options.end:
        route += r"\Z"
    elif not (options.strict and ends_with_delimiter):
        route += f"(?={delimiter}|\\Z)"

    return "^" + route, keys


# ---------------------------------------------------------------------------
# Filling (reverse direction)
# ---------------------------------------------------------------------------


def _encode_pretty(value: str) -> str:
    return re.sub(r"[/?#]", lambda m: f"%{ord(m.group()):02X}", quote(value, safe=_URI_SAFE))


def _encode_asterisk(value: str) -> str:
    return re.sub(r"[?#]", lambda m: f"%{ord(m.group()):02X}", quote(value, safe=_URI_SAFE))


def _lookup(data: Mapping[Any, Any], name: str | int) -> Any:
    if name in data:
        return data[name]
    if isinstance(name, int):
        if str(name) in data:
            return data[str(name)]
        if name == 0:
            return data.get(WILDCARD_PARAM)
    return None


class PathFiller:
    """Rebuilds a concrete path from a params mapping.

    Usage::

        filler = compile_filler("/user/:id/:tab?")
        filler({"id": "42"})  # "/user/42"
    """

    __slots__ = ("_checks", "tokens")

    def __init__(self, tokens: Sequence[Token]) -> None:
        self.tokens: tuple[Token, ...] = tuple(tokens)
        # Compile every sub-pattern once, up front
        self._checks: dict[int, re.Pattern[str]] = {
            i: re.compile(f"(?:{token.pattern})")
            for i, token in enumerate(self.tokens)
            if isinstance(token, ParamToken) and token.pattern is not None
        }

    def __call__(self, params: Mapping[Any, Any] | None = None) -> str:
        """Fill the template.

        Raises ``MissingParameterError``, ``TypeMismatchError``,
        ``EmptyRepeatError``, or ``ParameterPatternMismatchError``.
        """
        data = params or {}
        path = ""

        for i, token in enumerate(self.tokens):
            if isinstance(token, str):
                path += token
                continue

            value = _lookup(data, token.name)

            if value is None:
                if token.optional:
                    # Partial tokens keep their static prefix
                    if token.partial:
                        path += token.prefix
                    continue
                raise MissingParameterError(token.name)

            if isinstance(value, (list, tuple)):
                if not token.repeat:
                    msg = f'Expected "{token.name}" to not repeat, but received {list(value)!r}'
                    raise TypeMismatchError(token.name, msg)
                if not value:
                    if token.optional:
                        continue
                    raise EmptyRepeatError(token.name)
                for j, item in enumerate(value):
                    segment = _encode_pretty(str(item))
                    self._check(i, token, segment)
                    path += (token.prefix if j == 0 else token.delimiter) + segment
                continue

            if token.repeat:
                msg = f'Expected "{token.name}" to be a sequence of values, but received {value!r}'
                raise TypeMismatchError(token.name, msg)

            segment = _encode_asterisk(str(value)) if token.asterisk else _encode_pretty(str(value))
            self._check(i, token, segment)
            path += token.prefix + segment

        return path

    def _check(self, index: int, token: ParamToken, segment: str) -> None:
        check = self._checks.get(index)
        if check is not None and check.fullmatch(segment) is None:
            raise ParameterPatternMismatchError(token.name, token.pattern or "", segment)


_filler_cache: dict[str, PathFiller] = {}


def compile_filler(template: str) -> PathFiller:
    """Return the memoized filler for *template*."""
    filler = _filler_cache.get(template)
    if filler is None:
        filler = _filler_cache[template] = PathFiller(parse(template))
    return filler


def fill_params(template: str, params: Mapping[Any, Any] | None, route_msg: str) -> str:
    """Fill *template*, logging a warning and returning ``""`` on failure.

    This is the forgiving entry point the matcher and normalizer use;
    call ``compile_filler()`` directly to get the exception instead.
    """
    try:
        return compile_filler(template)(params or {})
    except PatternError as exc:
        logger.warning("missing param for %s: %s", route_msg, exc)
        return ""


# ---------------------------------------------------------------------------
# Compiled patterns
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """Compiled form of a path template.

    ``keys[i]`` describes capture group ``i + 1`` of ``regex``.
    """

    source: str | tuple[str, ...] | None
    regex: re.Pattern[str]
    keys: tuple[ParamToken, ...]
    options: PatternOptions = field(default_factory=PatternOptions)

    @property
    def param_names(self) -> list[str | int]:
        return [key.name for key in self.keys]

    @property
    def is_wildcard(self) -> bool:
        """True when the template contains a ``*`` catch-all."""
        return any(key.asterisk for key in self.keys)

    def fill(self, params: Mapping[Any, Any] | None = None) -> str:
        """Rebuild a concrete path. Raises ``PatternError`` subclasses."""
        if not isinstance(self.source, str):
            raise PatternError(None, f"Cannot fill a pattern compiled from {self.source!r}")
        return compile_filler(self.source)(params)


_pattern_cache: dict[tuple[str, PatternOptions], RoutePattern] = {}


def _flags(options: PatternOptions) -> int:
    return 0 if options.sensitive else re.IGNORECASE


def compile_pattern(
    template: "str | Sequence[str] | re.Pattern[str] | RoutePattern",
    options: PatternOptions | Mapping[str, Any] | None = None,
) -> RoutePattern:
    """Compile a template string, a list of alternatives, or a prebuilt regex.

    String templates are cached by ``(template, options)``.

    Usage::

        pattern = compile_pattern("/user/:id")
        pattern.regex.match("/user/42").group(1)  # "42"
        pattern.fill({"id": "7"})                 # "/user/7"
    """
    opts = PatternOptions.coerce(options)

    if isinstance(template, RoutePattern):
        return template

    if isinstance(template, re.Pattern):
        # Only plain capturing groups become keys
        count = len(_CAPTURE_GROUP_RE.findall(template.pattern))
        keys = tuple(
            ParamToken(
                name=i,
                prefix="",
                delimiter="",
                optional=False,
                repeat=False,
                partial=False,
                asterisk=False,
                pattern=None,
            )
            for i in range(count)
        )
        return RoutePattern(source=None, regex=template, keys=keys, options=opts)

    if isinstance(template, str):
        cache_key = (template, opts)
        cached = _pattern_cache.get(cache_key)
        if cached is not None:
            return cached
        source, keys = tokens_to_regex(parse(template, opts.delimiter), opts)
        pattern = RoutePattern(
            source=template,
            regex=re.compile(source, _flags(opts)),
            keys=tuple(keys),
            options=opts,
        )
        _pattern_cache[cache_key] = pattern
        return pattern

    # Sequence of alternatives; keys accumulate across the branches
    parts: list[str] = []
    all_keys: list[ParamToken] = []
    for item in template:
        sub = compile_pattern(item, opts)
        parts.append(sub.regex.pattern)
        all_keys.extend(sub.keys)
    return RoutePattern(
        source=tuple(template),
        regex=re.compile("(?:" + "|".join(parts) + ")", _flags(opts)),
        keys=tuple(all_keys),
        options=opts,
    )
