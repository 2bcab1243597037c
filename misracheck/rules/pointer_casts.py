"""Detect casts from void* to object pointers (MISRA C:2012 Rule 11.3)."""

from __future__ import annotations

from typing import Optional

from misracheck.facts import Node, NodeKind, cast_types
from misracheck.severity import Severity

from . import category_of
from .catalog import lookup

RULE_ID = "MISRA.11.3"
_INFO = lookup(RULE_ID)


class VoidPointerCastRule:
    """Flag casts whose source is ``void*`` and whose target is a non-void object pointer."""

    id = RULE_ID
    category = category_of(RULE_ID)

    def __init__(self, severity: Optional[Severity] = None) -> None:
        self.severity = severity or _INFO.default_severity

    def matches(self, node: Node) -> bool:
        if node.kind is not NodeKind.CAST:
            return False
        source, target = cast_types(node)
        return source.is_void_pointer and target.is_object_pointer

    def explain(self, node: Node) -> str:
        source, target = cast_types(node)
        return f"Cast from '{source}' to object pointer '{target}'. {_INFO.remediation}"
