"""Rule interface shared by every checker."""

from __future__ import annotations

from typing import Protocol

from misracheck.facts import Node
from misracheck.severity import Severity


class Rule(Protocol):
    """Protocol implemented by all rule predicates.

    ``matches`` must depend only on the node and its resolved types, never on
    traversal order or state kept between calls. ``explain`` is only called
    for nodes that matched.
    """

    id: str
    category: str
    severity: Severity

    def matches(self, node: Node) -> bool:
        """Return ``True`` when ``node`` violates the rule."""

    def explain(self, node: Node) -> str:
        """Render the diagnostic message for a matching ``node``."""


def category_of(rule_id: str) -> str:
    """Derive the category tag from a dotted rule id (``MISRA.10.1`` -> ``MISRA.10``)."""

    head, sep, _ = rule_id.rpartition(".")
    return head if sep else rule_id
