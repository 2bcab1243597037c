"""Reference metadata for the MISRA C:2012 rules shipped with the engine."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional

from misracheck.severity import CLASSIFICATION_SEVERITY, Severity

RULE_PREFIX = "MISRA."
_TRAILING_NUMBER = re.compile(r"(\d+\.\d+)$")
_MESSAGE_NUMBER = re.compile(r"MISRA[^\d]*(\d+\.\d+)", re.IGNORECASE)


@dataclass(frozen=True)
class RuleInfo:
    rule_id: str
    title: str
    classification: str  # "Mandatory" | "Required" | "Advisory"
    rationale: str
    non_compliant: str  # code example
    compliant: str  # fixed code example
    remediation: str

    @property
    def default_severity(self) -> Severity:
        return CLASSIFICATION_SEVERITY[self.classification]


_CATALOG: Dict[str, RuleInfo] = {}


def _add(info: RuleInfo) -> None:
    _CATALOG[info.rule_id] = info


_add(RuleInfo(
    rule_id="MISRA.10.1",
    title="Operands shall not be of an inappropriate essential type",
    classification="Required",
    rationale=(
        "Comparing a signed and an unsigned operand applies the usual arithmetic "
        "conversions: a negative signed value is converted to a large unsigned value "
        "before the comparison, silently inverting its result."
    ),
    non_compliant="""\
uint32_t a = 1000;
int8_t b = -1;
if (a > b) { }""",
    compliant="""\
uint32_t a = 1000;
int8_t b = -1;
if ((int64_t)a > (int64_t)b) { }""",
    remediation="Convert both operands to a common essential type with an explicit cast before comparing.",
))

_add(RuleInfo(
    rule_id="MISRA.11.3",
    title="A cast shall not be performed between a pointer to object type and a pointer to a different object type",
    classification="Required",
    rationale=(
        "Converting void* to an object pointer can produce a misaligned pointer and "
        "hides the original object type from the compiler."
    ),
    non_compliant="""\
void* ptr;
int* iptr = (int*)ptr;""",
    compliant="""\
int value;
int* iptr = &value;""",
    remediation="Keep the original object pointer type, or document the conversion with a deviation.",
))

_add(RuleInfo(
    rule_id="MISRA.21.6",
    title="The Standard Library input/output functions shall not be used",
    classification="Required",
    rationale=(
        "Formatted output functions such as sprintf write without a bound on the "
        "destination buffer and have unspecified or undefined behaviour for bad formats."
    ),
    non_compliant="""\
char buffer[100];
sprintf(buffer, "Value: %u", a);""",
    compliant="""\
char buffer[100];
format_u32(buffer, sizeof(buffer), a);  /* project-approved bounded writer */""",
    remediation="Use a bounded, project-approved formatting routine instead of the stdio formatted writers.",
))


def lookup(rule_id: str) -> Optional[RuleInfo]:
    return _CATALOG.get(rule_id)


def all_rules() -> Dict[str, RuleInfo]:
    return dict(_CATALOG)


def resolve(text: str) -> Optional[str]:
    """Map a rule reference in any common spelling to its catalog id.

    Accepts the catalog id itself (``MISRA.10.1``), ids ending in the rule
    number (``MISRA-C-2012-10.1``, ``10.1``) and free text naming a rule
    (``"MISRA rule 10.1 violated"``). Returns ``None`` when nothing matches.
    """

    if text in _CATALOG:
        return text
    for pattern, value in ((_TRAILING_NUMBER, text.strip()), (_MESSAGE_NUMBER, text)):
        match = pattern.search(value)
        if match and RULE_PREFIX + match.group(1) in _CATALOG:
            return RULE_PREFIX + match.group(1)
    return None
