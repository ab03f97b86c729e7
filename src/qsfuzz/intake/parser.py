"""URL and query-string parsing for intake and enumeration.

This module turns raw input lines into ``ParsedURL`` objects. Parsing keeps
every component as received (no lowercasing of paths, no port or slash
normalization) because candidates must differ from their source URL in one
parameter value only.

Query strings are read in two modes:
- lenient: malformed fields are dropped, used while filtering input
- strict: the first malformed field raises ``QueryParseError``
"""

import re
from urllib.parse import unquote_plus, urlsplit

from qsfuzz.core.exceptions import QueryParseError, URLParseError
from qsfuzz.core.models import ParsedURL


_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def parse_url(raw: str) -> ParsedURL:
    """Parse a raw URL string.

    Args:
        raw: URL string as read from input

    Returns:
        ParsedURL with its parameters read leniently (may be empty)

    Raises:
        URLParseError: If the string is not a parseable URL
    """
    if not raw or not isinstance(raw, str):
        raise URLParseError(f"Invalid URL: {raw!r}")

    if _CONTROL_CHARS.search(raw):
        raise URLParseError(f"Invalid control character in URL: {raw!r}")

    try:
        parts = urlsplit(raw)
        # Accessing the port validates it
        parts.port
    except ValueError as e:
        raise URLParseError(f"Failed to parse URL '{raw}': {e}") from e

    if _BAD_ESCAPE.search(parts.netloc) or _BAD_ESCAPE.search(parts.path):
        raise URLParseError(f"Invalid percent-escape in URL: {raw!r}")

    return ParsedURL(
        scheme=parts.scheme,
        netloc=parts.netloc,
        host=parts.hostname or "",
        path=parts.path,
        query=parts.query,
        fragment=parts.fragment,
        params=parse_query(parts.query, strict=False),
    )


def parse_query(query: str, *, strict: bool = True) -> dict[str, list[str]]:
    """Parse a raw query string into an ordered parameter mapping.

    Fields are separated by ``&`` only. A field containing ``;`` or an
    invalid percent-escape is malformed. Fields without ``=`` yield an
    empty value.

    Args:
        query: Raw query string (without the leading ``?``)
        strict: Raise on the first malformed field instead of dropping it

    Returns:
        Mapping of parameter name to values, names in first-seen order

    Raises:
        QueryParseError: If ``strict`` and a field is malformed
    """
    params: dict[str, list[str]] = {}

    for query_field in query.split("&"):
        if not query_field:
            continue

        if ";" in query_field:
            if strict:
                raise QueryParseError(f"Invalid semicolon separator in query: {query_field!r}")
            continue

        name, _, value = query_field.partition("=")
        if _BAD_ESCAPE.search(name) or _BAD_ESCAPE.search(value):
            if strict:
                raise QueryParseError(f"Invalid percent-escape in query: {query_field!r}")
            continue

        params.setdefault(
            unquote_plus(name, errors="surrogateescape"), []
        ).append(unquote_plus(value, errors="surrogateescape"))

    return params
