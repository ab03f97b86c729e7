"""qsfuzz - query string fuzzing candidate generator.

Deduplicates URL lists and enumerates the requests obtained by injecting
rule payloads into one query parameter at a time.
"""

from qsfuzz.injection import enumerate_injections, expand_template, iter_injections
from qsfuzz.intake import URLDeduper, deduplicate, parse_url

__version__ = "0.1.0"

__all__ = [
    "URLDeduper",
    "deduplicate",
    "enumerate_injections",
    "expand_template",
    "iter_injections",
    "parse_url",
]
