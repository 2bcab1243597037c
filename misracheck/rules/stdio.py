"""Detect calls to unbounded formatted write functions (MISRA C:2012 Rule 21.6)."""

from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

from misracheck.facts import Node, NodeKind, call_arguments, callee
from misracheck.severity import Severity

from . import category_of
from .catalog import lookup

RULE_ID = "MISRA.21.6"
_INFO = lookup(RULE_ID)

DEFAULT_UNSAFE_FUNCTIONS: FrozenSet[str] = frozenset({"sprintf", "vsprintf"})


class UnboundedFormatWriteRule:
    """Flag calls whose callee belongs to the configured unsafe formatted write set."""

    id = RULE_ID
    category = category_of(RULE_ID)

    def __init__(
        self,
        unsafe_functions: Iterable[str] = DEFAULT_UNSAFE_FUNCTIONS,
        severity: Optional[Severity] = None,
    ) -> None:
        if isinstance(unsafe_functions, str):
            unsafe_functions = (unsafe_functions,)
        self.unsafe_functions: FrozenSet[str] = frozenset(unsafe_functions)
        self.severity = severity or _INFO.default_severity

    def matches(self, node: Node) -> bool:
        if node.kind is not NodeKind.CALL:
            return False
        return callee(node) in self.unsafe_functions

    def explain(self, node: Node) -> str:
        name = callee(node)
        argc = len(call_arguments(node))
        return f"Call to unbounded formatted write '{name}' ({argc} argument(s)). {_INFO.remediation}"
