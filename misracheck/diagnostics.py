"""Diagnostic records, the deduplicating sink and per-run reports."""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .facts import SourceLocation
from .severity import Severity

INTERNAL_ERROR_RULE = "INTERNAL.malformed-fact"


@dataclass(frozen=True)
class Diagnostic:
    """One reported rule violation.

    Two diagnostics compare equal when they share location and rule id;
    severity and message do not take part in equality.
    """

    location: SourceLocation
    rule_id: str
    severity: Severity = field(compare=False)
    message: str = field(compare=False)

    @property
    def key(self) -> Tuple[str, int, int, str]:
        return (self.location.file, self.location.line, self.location.column, self.rule_id)

    def to_dict(self) -> Dict[str, object]:
        return {
            "rule": self.rule_id,
            "severity": self.severity.value,
            "message": self.message,
            "location": self.location.to_dict(),
        }


class DiagnosticSink:
    """Collect diagnostics, dropping exact (location, rule id) duplicates."""

    def __init__(self) -> None:
        self._seen: Set[Diagnostic] = set()
        self._diagnostics: List[Diagnostic] = []

    def add(self, diagnostic: Diagnostic) -> bool:
        """Add ``diagnostic``; return ``False`` when it was a duplicate."""

        if diagnostic in self._seen:
            return False
        self._seen.add(diagnostic)
        self._diagnostics.append(diagnostic)
        return True

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    def finalize(self) -> List[Diagnostic]:
        """Return the diagnostics ordered by (file, line, column, rule id)."""

        return sorted(self._diagnostics, key=lambda diagnostic: diagnostic.key)

    def __len__(self) -> int:
        return len(self._diagnostics)


@dataclass
class Summary:
    """Aggregate diagnostic counts by severity."""

    error: int = 0
    warning: int = 0
    note: int = 0

    def increment(self, severity: Severity) -> None:
        attr = severity.value.lower()
        setattr(self, attr, getattr(self, attr) + 1)

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @property
    def total(self) -> int:
        return self.error + self.warning + self.note


@dataclass
class AnalysisReport:
    """Bundle the finalized diagnostics of a run with their summary."""

    summary: Summary = field(default_factory=Summary)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    files: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.summary.error == 0 and self.summary.warning == 0

    @property
    def highest_severity(self) -> Optional[Severity]:
        if not self.diagnostics:
            return None
        return max((diagnostic.severity for diagnostic in self.diagnostics), key=lambda severity: severity.rank)

    def add_diagnostic(self, diagnostic: Diagnostic) -> None:
        self.summary.increment(diagnostic.severity)
        self.diagnostics.append(diagnostic)

    def for_rule(self, rule_id: str) -> List[Diagnostic]:
        return [diagnostic for diagnostic in self.diagnostics if diagnostic.rule_id == rule_id]

    def to_dict(self) -> Dict[str, object]:
        return {
            "summary": self.summary.to_dict(),
            "files": list(self.files),
            "diagnostics": [diagnostic.to_dict() for diagnostic in self.diagnostics],
            "passed": self.passed,
        }
