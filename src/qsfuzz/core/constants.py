"""Constants used throughout qsfuzz.

Placeholder tokens recognised in rule injections, default settings and
process exit codes.
"""

from enum import Enum


class Placeholder(str, Enum):
    """Tokens expanded inside rule injections."""
    FULLURL = "[[fullurl]]"
    DOMAIN = "[[domain]]"
    PATH = "[[path]]"


PLACEHOLDER_OPEN = "[["
PLACEHOLDER_CLOSE = "]]"


class OutputFormat(str, Enum):
    """Candidate output formats for the CLI."""
    PLAIN = "plain"
    JSON = "json"


# Application-wide defaults
DEFAULTS = {
    "concurrency": 25,
}


EXIT_ERROR = 1
