"""URL intake and deduplication.

This module filters a raw stream of URL lines down to the URLs worth
fuzzing. Lines that do not parse, and URLs without query parameters, are
dropped silently since input is expected to contain noise. Remaining URLs
are deduplicated on host, path and the set of parameter names, so that
- https://example.com/search?q=test&lang=en
- https://example.com/search?lang=fr&q=other
are fuzzed once.
"""

import logging
import sys
from pathlib import Path
from typing import IO, Iterable, Optional, Union

from qsfuzz.core.exceptions import URLParseError
from qsfuzz.core.models import ParsedURL
from qsfuzz.intake.parser import parse_url


logger = logging.getLogger(__name__)


class URLDeduper:
    """Deduplicate query-bearing URLs by parameter structure.

    The first URL seen for a given key is kept and later ones are dropped,
    whatever their parameter values or parameter order.
    """

    def deduplicate(self, lines: Iterable[str]) -> list[str]:
        """Filter and deduplicate raw URL lines.

        Args:
            lines: Raw URL strings, one per input line

        Returns:
            Canonical URL strings, first-seen order preserved

        Raises:
            OSError: If reading from ``lines`` fails
        """
        return [parsed.geturl() for parsed in self.deduplicate_parsed(lines)]

    def deduplicate_parsed(self, lines: Iterable[str]) -> list[ParsedURL]:
        """Like ``deduplicate`` but returns the parsed URLs."""
        seen_keys = set()
        deduplicated = []
        skipped = 0

        for line in lines:
            parsed = self._parse_line(line)
            if parsed is None:
                skipped += 1
                continue

            key = self.dedup_key(parsed)
            if key in seen_keys:
                continue
            seen_keys.add(key)
            deduplicated.append(parsed)

        logger.debug(
            f"Intake kept {len(deduplicated)} URLs, skipped {skipped} unusable lines"
        )
        return deduplicated

    def dedup_key(self, url: ParsedURL) -> str:
        """Generate the structure key (host + path + sorted param names).

        Args:
            url: Parsed URL

        Returns:
            Deduplication key
        """
        param_names = sorted(url.params)
        return f"{url.host}{url.path}?{'&'.join(param_names)}"

    def get_duplicates(self, lines: Iterable[str]) -> dict[str, list[str]]:
        """Find duplicate URL groups.

        Args:
            lines: Raw URL strings

        Returns:
            Dictionary mapping dedup keys to the URLs sharing them, only for
            keys seen more than once
        """
        groups: dict[str, list[str]] = {}

        for line in lines:
            parsed = self._parse_line(line)
            if parsed is None:
                continue
            groups.setdefault(self.dedup_key(parsed), []).append(parsed.geturl())

        return {key: urls for key, urls in groups.items() if len(urls) > 1}

    def _parse_line(self, line: str) -> Optional[ParsedURL]:
        """Parse one input line, returning None for unusable lines."""
        raw = line.strip()
        if not raw:
            return None

        try:
            parsed = parse_url(raw)
        except URLParseError:
            return None

        # Nothing to fuzz
        if not parsed.params:
            return None

        return parsed


def deduplicate(lines: Iterable[str]) -> list[str]:
    """Filter and deduplicate raw URL lines with a default ``URLDeduper``."""
    return URLDeduper().deduplicate(lines)


def read_urls(source: Union[Path, str, IO[str], None] = None) -> list[ParsedURL]:
    """Read and deduplicate URLs from a file, a text stream or stdin.

    Args:
        source: Path to a URL list, an open text stream, or None for stdin

    Returns:
        Deduplicated parsed URLs

    Raises:
        OSError: If the source cannot be opened or read
    """
    deduper = URLDeduper()

    if source is None:
        return deduper.deduplicate_parsed(sys.stdin)

    if isinstance(source, (str, Path)):
        with Path(source).open("r", encoding="utf-8", errors="replace") as f:
            return deduper.deduplicate_parsed(f)

    return deduper.deduplicate_parsed(source)
