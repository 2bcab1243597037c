import pytest

from misracheck.diagnostics import Diagnostic
from misracheck.errors import ConfigError
from misracheck.facts import SourceLocation
from misracheck.severity import Severity
from misracheck.suppression import (
    SourceRange,
    SuppressionDirective,
    SuppressionResolver,
    directives_from_records,
    load_suppressions,
)


def diag(line, rule_id, column=1, file="a.c"):
    return Diagnostic(SourceLocation(file, line, column), rule_id, Severity.WARNING, "m")


def test_wildcard_directive_removes_every_rule_at_location():
    diagnostics = [diag(5, "MISRA.10.1"), diag(5, "MISRA.11.3"), diag(5, "MISRA.21.6"), diag(6, "MISRA.10.1")]

    kept = SuppressionResolver().filter(diagnostics, [SuppressionDirective.at_line("a.c", 5)])

    assert kept == [diag(6, "MISRA.10.1")]


def test_star_is_a_wildcard():
    directive = SuppressionDirective.at_line("a.c", 5, "*")

    assert directive.is_wildcard
    assert SuppressionResolver().filter([diag(5, "MISRA.21.6")], [directive]) == []


def test_rule_specific_directive_only_drops_that_rule():
    diagnostics = [diag(5, "MISRA.10.1"), diag(5, "MISRA.11.3")]

    kept = SuppressionResolver().filter(diagnostics, [SuppressionDirective.at_line("a.c", 5, "MISRA.10.1")])

    assert [d.rule_id for d in kept] == ["MISRA.11.3"]


def test_overlapping_category_and_rule_directives_form_a_union():
    diagnostics = [diag(3, "MISRA.10.1"), diag(3, "MISRA.10.4"), diag(4, "MISRA.11.3"), diag(9, "MISRA.11.3")]
    directives = [
        SuppressionDirective(SourceRange("a.c", 1, 5), "MISRA.10.*"),
        SuppressionDirective(SourceRange("a.c", 3, 4), "MISRA.11.3"),
    ]

    kept = SuppressionResolver().filter(diagnostics, directives)

    assert kept == [diag(9, "MISRA.11.3")]


def test_directives_never_add_and_respect_file_and_range():
    diagnostics = [diag(5, "MISRA.10.1", file="b.c"), diag(2, "MISRA.10.1")]
    directives = [SuppressionDirective(SourceRange("a.c", 3, 8))]

    assert SuppressionResolver().filter(diagnostics, directives) == diagnostics
    assert SuppressionResolver().filter([], directives) == []


def test_column_bounds_narrow_the_range():
    source_range = SourceRange("a.c", 5, 7, start_column=10, end_column=4)

    assert not source_range.contains(SourceLocation("a.c", 5, 9))
    assert source_range.contains(SourceLocation("a.c", 5, 10))
    assert source_range.contains(SourceLocation("a.c", 6, 1))
    assert source_range.contains(SourceLocation("a.c", 7, 4))
    assert not source_range.contains(SourceLocation("a.c", 7, 5))


def test_directives_from_records():
    directives = directives_from_records(
        [
            {"file": "a.c", "line": 8, "rule": "MISRA.10.1"},
            {"file": "a.c", "start_line": 10, "end_line": 20},
        ]
    )

    assert directives[0] == SuppressionDirective(SourceRange("a.c", 8, 8), "MISRA.10.1")
    assert directives[1].range.end_line == 20
    assert directives[1].is_wildcard


@pytest.mark.parametrize(
    "record",
    [
        {"line": 3},
        {"file": "a.c"},
        {"file": "a.c", "start_line": 5, "end_line": 2},
        {"file": "a.c", "line": "3"},
        {"file": "a.c", "line": 3, "rule": 10.1},
        "a.c:3",
    ],
)
def test_bad_records_raise_config_error(record):
    with pytest.raises(ConfigError):
        directives_from_records([record])


def test_load_suppressions_from_side_file(tmp_path):
    side_file = tmp_path / "suppressions.yml"
    side_file.write_text(
        """
suppressions:
  - file: multi_misra_violation.c
    line: 16
    rule: MISRA.21.6
  - file: multi_misra_violation.c
    start_line: 1
    end_line: 4
        """.strip(),
        encoding="utf-8",
    )

    directives = load_suppressions(side_file)

    assert len(directives) == 2
    assert directives[0].rule_id == "MISRA.21.6"
    assert load_suppressions(tmp_path / "missing.yml") == []


def test_null_end_line_defaults_to_start_line():
    (directive,) = directives_from_records([{"file": "a.c", "line": 3, "end_line": None}])

    assert directive.range == SourceRange("a.c", 3, 3)


def test_record_rule_references_resolve_to_catalog_ids():
    directives = directives_from_records(
        [
            {"file": "a.c", "line": 5, "rule": "MISRA-C-2012-10.1"},
            {"file": "a.c", "line": 6, "rule": "21.6"},
            {"file": "a.c", "line": 7, "rule": "MISRA.11.*"},
        ]
    )

    assert [directive.rule_id for directive in directives] == ["MISRA.10.1", "MISRA.21.6", "MISRA.11.*"]
    kept = SuppressionResolver().filter([diag(5, "MISRA.10.1"), diag(6, "MISRA.21.6")], directives)
    assert kept == []
