"""Path parameter decoding.

Captured path segments arrive percent-encoded. Decoding is strict: a
malformed escape or an invalid UTF-8 byte sequence makes the value
``None`` instead of failing the whole request.
"""

import re
from collections.abc import Sequence
from urllib.parse import unquote_to_bytes

# A "%" not followed by two hex digits
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def decode_param(value: str | None) -> str | None:
    """Percent-decode a captured path segment.

    ``"caf%C3%A9"`` -> ``"café"``; ``"%E0%A4%A"`` -> ``None``; ``None``
    (an optional parameter that did not participate) stays ``None``.
    ``+`` is not treated as a space.
    """
    if value is None:
        return None
    if "%" not in value:
        return value
    if _BAD_ESCAPE_RE.search(value):
        return None
    try:
        return unquote_to_bytes(value).decode("utf-8")
    except UnicodeDecodeError:
        return None


def bind_params(
    names: Sequence[str],
    captures: Sequence[str | None],
) -> dict[str, str | None]:
    """Pair parameter names with decoded capture values, in order."""
    return {name: decode_param(value) for name, value in zip(names, captures, strict=True)}
