"""Detect comparisons mixing signed and unsigned operands (MISRA C:2012 Rule 10.1)."""

from __future__ import annotations

from typing import Optional

from misracheck.facts import Node, NodeKind, Signedness, comparison_operands, operator
from misracheck.severity import Severity

from . import category_of
from .catalog import lookup

RULE_ID = "MISRA.10.1"
_INFO = lookup(RULE_ID)
_SIGNED_PAIR = {Signedness.SIGNED, Signedness.UNSIGNED}


class UnsignedSignedCompareRule:
    """Flag comparisons whose operands differ in signedness, whatever their widths."""

    id = RULE_ID
    category = category_of(RULE_ID)

    def __init__(self, severity: Optional[Severity] = None) -> None:
        self.severity = severity or _INFO.default_severity

    def matches(self, node: Node) -> bool:
        if node.kind is not NodeKind.COMPARISON:
            return False
        left, right = comparison_operands(node)
        return {left.signedness, right.signedness} == _SIGNED_PAIR

    def explain(self, node: Node) -> str:
        left, right = comparison_operands(node)
        signed, unsigned = (left, right) if left.signedness is Signedness.SIGNED else (right, left)
        return (
            f"Comparison '{operator(node)}' mixes signed operand '{signed}' with unsigned "
            f"operand '{unsigned}'; the signed value is converted to unsigned before comparing. "
            f"{_INFO.remediation}"
        )
