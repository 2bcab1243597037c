import pytest

from misracheck.facts import SourceLocation, TypeDescriptor, call, cast, comparison
from misracheck.rules import category_of
from misracheck.rules.catalog import all_rules, lookup, resolve
from misracheck.rules.essential_types import UnsignedSignedCompareRule
from misracheck.rules.pointer_casts import VoidPointerCastRule
from misracheck.rules.stdio import UnboundedFormatWriteRule
from misracheck.severity import Severity

LOC = SourceLocation("rules.c", 10, 4)
SIGNED = [TypeDescriptor.signed(8), TypeDescriptor.signed(64)]
UNSIGNED = [TypeDescriptor.unsigned(8), TypeDescriptor.unsigned(32)]
VOID_PTR = TypeDescriptor.pointer_to(TypeDescriptor.void())
INT_PTR = TypeDescriptor.pointer_to(TypeDescriptor.signed(32, name="int"))


@pytest.mark.parametrize("signed", SIGNED)
@pytest.mark.parametrize("unsigned", UNSIGNED)
def test_compare_rule_matches_mixed_signedness_in_either_order(signed, unsigned):
    rule = UnsignedSignedCompareRule()

    assert rule.matches(comparison(">", unsigned, signed, LOC))
    assert rule.matches(comparison("==", signed, unsigned, LOC))


@pytest.mark.parametrize(
    "left, right",
    [
        (SIGNED[0], SIGNED[1]),
        (UNSIGNED[0], UNSIGNED[1]),
        (TypeDescriptor(name="double"), TypeDescriptor.unsigned(32)),
    ],
)
def test_compare_rule_ignores_same_or_unsigned_free_pairs(left, right):
    assert not UnsignedSignedCompareRule().matches(comparison("<", left, right, LOC))


def test_compare_rule_ignores_other_kinds():
    assert not UnsignedSignedCompareRule().matches(call("sprintf", LOC))


def test_compare_rule_message_names_both_operands():
    message = UnsignedSignedCompareRule().explain(comparison(">", UNSIGNED[1], SIGNED[0], LOC))

    assert "'>'" in message
    assert "int8_t" in message
    assert "uint32_t" in message


def test_void_pointer_cast_rule():
    rule = VoidPointerCastRule()

    assert rule.matches(cast(VOID_PTR, INT_PTR, LOC))
    assert not rule.matches(cast(VOID_PTR, VOID_PTR, LOC))
    assert not rule.matches(cast(INT_PTR, VOID_PTR, LOC))
    assert not rule.matches(cast(INT_PTR, INT_PTR, LOC))
    assert "int*" in rule.explain(cast(VOID_PTR, INT_PTR, LOC))


def test_void_pointer_cast_to_function_pointer_is_not_an_object_cast():
    func_ptr = TypeDescriptor.pointer_to(TypeDescriptor(name="void(int)", is_function=True))

    assert not VoidPointerCastRule().matches(cast(VOID_PTR, func_ptr, LOC))


def test_format_write_rule_uses_configured_names():
    node = call("sprintf", LOC)

    assert UnboundedFormatWriteRule(unsafe_functions={"sprintf"}).matches(node)
    assert not UnboundedFormatWriteRule(unsafe_functions=()).matches(node)
    assert not UnboundedFormatWriteRule(unsafe_functions={"vsprintf"}).matches(node)
    assert UnboundedFormatWriteRule(unsafe_functions="sprintf").matches(node)


def test_format_write_rule_default_set_and_message():
    rule = UnboundedFormatWriteRule()
    node = call("sprintf", LOC, [])

    assert rule.matches(node)
    assert not rule.matches(call("snprintf", LOC))
    assert "sprintf" in rule.explain(node)


def test_rule_metadata_comes_from_catalog():
    rule = VoidPointerCastRule()

    assert rule.id == "MISRA.11.3"
    assert rule.category == "MISRA.11"
    assert lookup(rule.id).classification == "Required"
    assert rule.severity is Severity.WARNING
    assert VoidPointerCastRule(severity=Severity.ERROR).severity is Severity.ERROR


def test_category_of():
    assert category_of("MISRA.21.6") == "MISRA.21"
    assert category_of("standalone") == "standalone"


def test_catalog_covers_shipped_rules():
    catalog = all_rules()

    assert set(catalog) == {"MISRA.10.1", "MISRA.11.3", "MISRA.21.6"}
    assert all(info.default_severity is Severity.WARNING for info in catalog.values())
    assert lookup("MISRA.1.1") is None


@pytest.mark.parametrize("value, expected", [("error", Severity.ERROR), (" Note ", Severity.NOTE), (Severity.WARNING, Severity.WARNING)])
def test_severity_parse(value, expected):
    assert Severity.parse(value) is expected


@pytest.mark.parametrize(
    "reference",
    ["MISRA.10.1", "10.1", "MISRA-C-2012-10.1", "MisraC2012-10.1", "Violation of MISRA rule 10.1 here"],
)
def test_resolve_accepts_common_rule_spellings(reference):
    assert resolve(reference) == "MISRA.10.1"


@pytest.mark.parametrize("reference", ["MISRA.99.9", "10.2", "no rule mentioned", ""])
def test_resolve_returns_none_for_unknown_rules(reference):
    assert resolve(reference) is None


def test_catalog_entries_carry_code_examples():
    info = lookup("MISRA.11.3")

    assert "(int*)ptr" in info.non_compliant
    assert "(int*)" not in info.compliant
    assert "sprintf" in lookup("MISRA.21.6").non_compliant
    assert all(entry.compliant for entry in all_rules().values())
