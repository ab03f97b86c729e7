"""Core data models for qsfuzz.

This module defines the data structures shared by the intake, injection and
orchestration stages: parsed URLs, template contexts, configured rules and
the injection records produced by enumeration.
"""

from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import unquote, urlunsplit


# ============================================================================
# URL Models
# ============================================================================

@dataclass
class ParsedURL:
    """A URL that parsed successfully and carries at least one parameter.

    Components are kept exactly as received so the URL can be re-serialized
    without normalization. ``params`` maps parameter names, in order of first
    appearance, to their values in query order.
    """
    scheme: str
    netloc: str
    host: str                               # Hostname without userinfo/port
    path: str                               # Escaped path, as received
    query: str                              # Raw query string
    fragment: str = ""
    params: dict[str, list[str]] = field(default_factory=dict)

    def geturl(self) -> str:
        """Return the canonical string form of the URL."""
        return self.with_query(self.query)

    def with_query(self, query: str) -> str:
        """Return the URL string with its query replaced by ``query``."""
        return urlunsplit((self.scheme, self.netloc, self.path, query, self.fragment))

    @property
    def decoded_path(self) -> str:
        return unquote(self.path)

    @property
    def value_count(self) -> int:
        """Total number of value slots across all parameters."""
        return sum(len(values) for values in self.params.values())

    def context(self) -> "TemplateContext":
        """Build the template context used to expand rule injections."""
        return TemplateContext(
            url=self.geturl(),
            hostname=self.host,
            path=self.decoded_path,
        )

    def __str__(self) -> str:
        return self.geturl()


@dataclass(frozen=True)
class TemplateContext:
    """Per-URL values substituted into rule placeholders."""
    url: str
    hostname: str
    path: str


# ============================================================================
# Rule Models
# ============================================================================

@dataclass
class Rule:
    """A configured fuzzing rule.

    Only ``injections`` drives candidate generation. Keys consumed by later
    stages (expectations, heuristics) are kept untouched in ``extra``.
    """
    name: str
    injections: list[str]
    description: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class FuzzConfig:
    """Loaded configuration file."""
    rules: list[Rule] = field(default_factory=list)
    cookies: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def injections(self) -> list[str]:
        """All injection templates, in rule order then injection order."""
        return [injection for rule in self.rules for injection in rule.injections]

    def rule_for(self, template: str) -> Optional[Rule]:
        """Return the first rule that declares ``template``."""
        for rule in self.rules:
            if template in rule.injections:
                return rule
        return None


# ============================================================================
# Injection Model
# ============================================================================

@dataclass(frozen=True)
class Injection:
    """One candidate request produced by enumeration."""
    url: str                                # Rewritten candidate URL
    payload: str                            # Expanded injection value
    template: str                           # Injection before expansion
    parameter: str
    index: int                              # Position within the parameter's values

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "url": self.url,
            "payload": self.payload,
            "template": self.template,
            "parameter": self.parameter,
            "index": self.index,
        }
