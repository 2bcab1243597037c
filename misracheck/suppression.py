"""Suppression directives and the resolver that applies them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence

import yaml

from .diagnostics import Diagnostic
from .errors import ConfigError
from .facts import SourceLocation
from .rules.catalog import resolve
from .utils import read_yaml_file

logger = logging.getLogger(__name__)

WILDCARD = "*"


@dataclass(frozen=True)
class SourceRange:
    """Inclusive line range in one file, optionally narrowed by columns."""

    file: str
    start_line: int
    end_line: int
    start_column: Optional[int] = None
    end_column: Optional[int] = None

    def contains(self, location: SourceLocation) -> bool:
        if location.file != self.file:
            return False
        if not self.start_line <= location.line <= self.end_line:
            return False
        if self.start_column is not None and location.line == self.start_line and location.column < self.start_column:
            return False
        if self.end_column is not None and location.line == self.end_line and location.column > self.end_column:
            return False
        return True


@dataclass(frozen=True)
class SuppressionDirective:
    """Suppress diagnostics inside ``range`` for ``rule_id``.

    ``rule_id`` of ``None`` or ``"*"`` suppresses every rule. Shell-style
    patterns such as ``MISRA.10.*`` cover a whole category.
    """

    range: SourceRange
    rule_id: Optional[str] = None

    @classmethod
    def at_line(cls, file: str, line: int, rule_id: Optional[str] = None) -> "SuppressionDirective":
        return cls(SourceRange(file, line, line), rule_id)

    @property
    def is_wildcard(self) -> bool:
        return self.rule_id is None or self.rule_id == WILDCARD

    def applies_to(self, diagnostic: Diagnostic) -> bool:
        if not self.range.contains(diagnostic.location):
            return False
        if self.is_wildcard:
            return True
        return fnmatchcase(diagnostic.rule_id, self.rule_id)


class SuppressionResolver:
    """Filter diagnostics through a set of directives."""

    def filter(
        self,
        diagnostics: Iterable[Diagnostic],
        directives: Sequence[SuppressionDirective],
    ) -> List[Diagnostic]:
        kept: List[Diagnostic] = []
        suppressed = 0
        for diagnostic in diagnostics:
            if any(directive.applies_to(diagnostic) for directive in directives):
                suppressed += 1
                continue
            kept.append(diagnostic)
        if suppressed:
            logger.debug("Suppressed %d diagnostic(s)", suppressed)
        return kept


# ----------------------------------------------------------------------
# Side-file decoding
# ----------------------------------------------------------------------
def _int_field(record: Mapping[str, Any], key: str, default: Optional[int] = None) -> Optional[int]:
    value = record.get(key, default)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"Suppression field {key!r} must be an integer, got {value!r}")
    return value


def directive_from_record(record: Mapping[str, Any]) -> SuppressionDirective:
    if not isinstance(record, Mapping):
        raise ConfigError(f"Suppression entry must be a mapping, got {record!r}")
    file = record.get("file")
    if not isinstance(file, str) or not file:
        raise ConfigError(f"Suppression entry is missing 'file': {dict(record)!r}")
    line = _int_field(record, "line")
    start_line = _int_field(record, "start_line", line)
    if start_line is None:
        raise ConfigError(f"Suppression entry for {file} needs 'line' or 'start_line'")
    end_line = _int_field(record, "end_line")
    if end_line is None:
        end_line = start_line
    if end_line < start_line:
        raise ConfigError(f"Suppression range for {file} ends before it starts")
    rule_id = record.get("rule")
    if rule_id is not None and not isinstance(rule_id, str):
        raise ConfigError(f"Suppression 'rule' must be a string, got {rule_id!r}")
    if rule_id is not None and not any(char in rule_id for char in "*?["):
        rule_id = resolve(rule_id) or rule_id
    return SuppressionDirective(
        SourceRange(
            file=file,
            start_line=start_line,
            end_line=end_line,
            start_column=_int_field(record, "start_column"),
            end_column=_int_field(record, "end_column"),
        ),
        rule_id,
    )


def directives_from_records(records: Iterable[Mapping[str, Any]]) -> List[SuppressionDirective]:
    return [directive_from_record(record) for record in records]


def load_suppressions(path: Path) -> List[SuppressionDirective]:
    """Read directives from a YAML/JSON side file; a missing file yields none."""

    try:
        data = read_yaml_file(Path(path))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse suppressions in {path}: {exc}") from exc
    if data is None:
        return []
    if isinstance(data, Mapping):
        data = data.get("suppressions") or []
    if not isinstance(data, list):
        raise ConfigError(f"Suppressions in {path} must be a list")
    directives = directives_from_records(data)
    logger.debug("Loaded %d suppression directive(s) from %s", len(directives), path)
    return directives
