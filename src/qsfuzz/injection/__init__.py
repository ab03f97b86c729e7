"""Rule expansion and injection enumeration.

- expand_template: Resolve [[fullurl]], [[domain]] and [[path]] placeholders
- enumerate_injections / iter_injections: Produce candidate URLs
"""

from qsfuzz.injection.template import expand_template
from qsfuzz.injection.enumerator import (
    decode_query,
    encode_query,
    enumerate_injections,
    iter_injections,
    substituted,
)

__all__ = [
    "expand_template",
    "decode_query",
    "encode_query",
    "enumerate_injections",
    "iter_injections",
    "substituted",
]
