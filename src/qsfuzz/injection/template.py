"""Placeholder expansion for rule injections.

Injections may reference the URL being fuzzed through literal tokens:

    [[fullurl]]  query-escaped full URL
    [[domain]]   bare hostname
    [[path]]     query-escaped, decoded URL path

Unknown bracket sequences are left as they are.
"""

from urllib.parse import quote_plus

from qsfuzz.core.constants import PLACEHOLDER_CLOSE, PLACEHOLDER_OPEN, Placeholder
from qsfuzz.core.models import TemplateContext


def expand_template(template: str, context: TemplateContext) -> str:
    """Expand the placeholders of one injection against a URL context.

    Args:
        template: Raw injection from a rule
        context: Values derived from the URL being fuzzed

    Returns:
        Injection with every recognised placeholder replaced
    """
    if PLACEHOLDER_OPEN not in template or PLACEHOLDER_CLOSE not in template:
        return template

    # Replacement values containing another token are not re-expanded reliably
    template = template.replace(Placeholder.FULLURL.value, quote_plus(context.url))
    template = template.replace(Placeholder.DOMAIN.value, context.hostname)
    template = template.replace(Placeholder.PATH.value, quote_plus(context.path))
    return template
