"""Injection point enumeration.

For one URL and an ordered list of rule injections, this module produces
every candidate URL obtained by replacing exactly one parameter value with
one expanded injection. Output order is stable: injections in rule order,
then parameters in first-appearance order, then values in query order.
"""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Union
from urllib.parse import unquote_plus, urlencode

from qsfuzz.core.exceptions import QueryDecodeError, QueryEncodeError
from qsfuzz.core.models import Injection, ParsedURL
from qsfuzz.injection.template import expand_template
from qsfuzz.intake.parser import parse_query, parse_url


logger = logging.getLogger(__name__)


@contextmanager
def substituted(
    params: dict[str, list[str]],
    name: str,
    index: int,
    payload: str,
) -> Iterator[dict[str, list[str]]]:
    """Temporarily overwrite one value slot of ``params``.

    The original value is put back when the block exits, including on error.
    """
    original = params[name][index]
    params[name][index] = payload
    try:
        yield params
    finally:
        params[name][index] = original


def encode_query(params: dict[str, list[str]]) -> str:
    """Form-encode a parameter mapping, grouped and sorted by name.

    Undecodable bytes kept as surrogates by ``parse_query`` are written back
    as their original percent-escapes.

    Raises:
        QueryEncodeError: If a value cannot be encoded as UTF-8
    """
    try:
        return urlencode(
            [(name, value) for name in sorted(params) for value in params[name]],
            errors="surrogateescape",
        )
    except UnicodeEncodeError as e:
        raise QueryEncodeError(f"Failed to encode query parameters: {e}") from e


def decode_query(query: str) -> str:
    """Percent-decode an encoded query string.

    Raises:
        QueryDecodeError: If the decoded bytes are not valid UTF-8
    """
    try:
        return unquote_plus(query, errors="strict")
    except UnicodeDecodeError as e:
        raise QueryDecodeError(f"Failed to decode query '{query}': {e}") from e


def iter_injections(
    url: Union[ParsedURL, str],
    rules: Sequence[str],
    decode_params: bool = False,
) -> Iterator[Injection]:
    """Lazily enumerate the injections for one URL.

    Being a generator, errors surface on first iteration rather than on call.

    Args:
        url: URL to fuzz, parsed or raw
        rules: Injection templates, in rule order
        decode_params: Attach the percent-decoded query instead of the
            encoded one. Candidates may then be invalid URLs.

    Yields:
        One Injection per (injection, parameter, value index) combination

    Raises:
        URLParseError: If ``url`` is a string that does not parse
        QueryParseError: If the URL's raw query is malformed
    """
    if isinstance(url, str):
        url = parse_url(url)

    # Private working copy, never shared between calls
    params = parse_query(url.query, strict=True)

    context = url.context()
    payloads = [(template, expand_template(template, context)) for template in rules]

    for template, payload in payloads:
        for name, values in params.items():
            for index in range(len(values)):
                try:
                    with substituted(params, name, index, payload):
                        query = encode_query(params)
                    if decode_params:
                        query = decode_query(query)
                except (QueryEncodeError, QueryDecodeError) as e:
                    logger.debug(f"Skipping {name}[{index}] for {url}: {e}")
                    continue

                yield Injection(
                    url=url.with_query(query),
                    payload=payload,
                    template=template,
                    parameter=name,
                    index=index,
                )


def enumerate_injections(
    url: Union[ParsedURL, str],
    rules: Sequence[str],
    decode_params: bool = False,
) -> list[str]:
    """Return every candidate URL for ``url`` and ``rules``.

    At most ``len(rules) * url.value_count`` candidates are returned, fewer
    only when some combinations fail to encode or decode.

    Raises:
        URLParseError: If ``url`` is a string that does not parse
        QueryParseError: If the URL's raw query is malformed
    """
    return [
        injection.url
        for injection in iter_injections(url, rules, decode_params=decode_params)
    ]
