"""URL intake: parsing, filtering and deduplication.

- parse_url / parse_query: Parse raw URLs and query strings
- URLDeduper: Drop unusable URLs and collapse equivalent ones
"""

from qsfuzz.intake.parser import parse_query, parse_url
from qsfuzz.intake.deduper import URLDeduper, deduplicate, read_urls

__all__ = [
    "parse_query",
    "parse_url",
    "URLDeduper",
    "deduplicate",
    "read_urls",
]
