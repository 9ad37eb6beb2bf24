"""Path pattern compilation.

Turns Express-style route patterns into anchored regular expressions plus
the ordered list of parameter names, one per capture group::

    "/users/:id"          -> one segment, captured as "id"
    "/posts/:id(\\d+)"    -> custom parameter pattern
    "/docs/:section?"     -> optional, together with its "/" prefix
    "/files/:path*"       -> zero or more segments
    "/files/:path+"       -> one or more segments
    "/assets/*"           -> unnamed wildcard, captured as "0"
    "/(.*)\\.json"        -> unnamed group, captured as "0"

The router treats the result as opaque: it only needs ``match(path)`` and
``param_names``.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

from waypost.errors import InvalidArgument

DEFAULT_DELIMITER = "/"

# Groups: 1 escaped char, 2 prefix, 3 name, 4 custom pattern,
#         5 unnamed group, 6 modifier, 7 asterisk
_TOKEN_RE = re.compile(
    r"(\\.)"
    r"|([/.])?(?:(?::(\w+)(?:\(((?:\\.|[^\\()])+)\))?|\(((?:\\.|[^\\()])+)\))([+*?])?|(\*))"
)

# Characters neutralised inside a user group so it can never add captures
_GROUP_ESCAPE_RE = re.compile(r"([=!:$/()])")


@dataclass(frozen=True, slots=True)
class PatternToken:
    """A parameter slot parsed out of a route pattern.

    Static text between tokens is kept as plain ``str`` pieces.
    """

    name: str
    prefix: str
    delimiter: str
    optional: bool
    repeat: bool
    partial: bool
    asterisk: bool
    pattern: str


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A compiled route pattern.

    ``regex`` has exactly one capture group per entry in ``keys``.
    """

    source: str
    regex: re.Pattern[str]
    keys: tuple[PatternToken, ...]

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(key.name for key in self.keys)

    def match(self, path: str) -> tuple[str | None, ...] | None:
        """Return raw captures for *path*, or ``None`` if it doesn't match.

        Captures of optional parameters that took no part in the match
        are ``None``.
        """
        m = self.regex.match(path)
        if m is None:
            return None
        return m.groups()


def _check_literal(pattern: str, text: str) -> None:
    if "(" in text or ")" in text:
        msg = f"Unbalanced group in route pattern {pattern!r}"
        raise InvalidArgument(msg)


def parse_pattern(pattern: str) -> list[str | PatternToken]:
    """Split *pattern* into static text and parameter tokens.

    Examples::

        "/users"        -> ["/users"]
        "/users/:id"    -> ["/users", PatternToken(name="id", prefix="/", ...)]
        "/a/*"          -> ["/a", PatternToken(name="0", asterisk=True, ...)]

    Raises ``InvalidArgument`` for an unbalanced ``(`` or ``)``.
    """
    tokens: list[str | PatternToken] = []
    key = 0
    index = 0
    path = ""

    for res in _TOKEN_RE.finditer(pattern):
        matched = res.group(0)
        offset = res.start()
        literal = pattern[index:offset]
        _check_literal(pattern, literal)
        path += literal
        index = offset + len(matched)

        escaped = res.group(1)
        if escaped:
            path += escaped[1]
            continue

        following = pattern[index] if index < len(pattern) else None
        prefix, name, capture, group, modifier, asterisk = res.group(2, 3, 4, 5, 6, 7)

        if path:
            tokens.append(path)
            path = ""

        if name is None:
            name = str(key)
            key += 1

        custom = capture or group
        delimiter = prefix or DEFAULT_DELIMITER
        if custom:
            token_pattern = _GROUP_ESCAPE_RE.sub(r"\\\1", custom)
        elif asterisk:
            token_pattern = ".*"
        else:
            token_pattern = f"[^{re.escape(delimiter)}]+?"

        tokens.append(
            PatternToken(
                name=name,
                prefix=prefix or "",
                delimiter=delimiter,
                optional=modifier in ("?", "*"),
                repeat=modifier in ("+", "*"),
                partial=prefix is not None and following is not None and following != prefix,
                asterisk=bool(asterisk),
                pattern=token_pattern,
            )
        )

    rest = pattern[index:]
    _check_literal(pattern, rest)
    path += rest
    if path:
        tokens.append(path)
    return tokens


def _tokens_to_regex(
    tokens: list[str | PatternToken],
    *,
    case_sensitive: bool,
    strict: bool,
    end: bool,
) -> re.Pattern[str]:
    route = ""
    for token in tokens:
        if isinstance(token, str):
            route += re.escape(token)
            continue

        prefix = re.escape(token.prefix)
        capture = f"(?:{token.pattern})"
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

    delimiter = re.escape(DEFAULT_DELIMITER)
    ends_with_delimiter = route.endswith(delimiter)

    # Non-strict: a single trailing delimiter is optional
    if not strict:
        if ends_with_delimiter:
            route = route[: -len(delimiter)]
        route += rf"(?:{delimiter}(?=\Z))?"

    if end:
        route += r"\Z"
    elif not (strict and ends_with_delimiter):
        route += rf"(?={delimiter}|\Z)"

    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile("^" + route, flags)
    except re.error as exc:
        msg = f"Invalid route pattern: {exc}"
        raise InvalidArgument(msg) from exc


@lru_cache(maxsize=512)
def compile_pattern(
    pattern: str,
    *,
    case_sensitive: bool = False,
    strict: bool = False,
    end: bool = True,
) -> CompiledPattern:
    """Compile *pattern* into a :class:`CompiledPattern`.

    Results are cached per pattern and option set; compiled patterns are
    immutable, so sharing them between routers is safe.
    """
    tokens = parse_pattern(pattern)
    regex = _tokens_to_regex(tokens, case_sensitive=case_sensitive, strict=strict, end=end)
    keys = tuple(token for token in tokens if isinstance(token, PatternToken))
    return CompiledPattern(source=pattern, regex=regex, keys=keys)
