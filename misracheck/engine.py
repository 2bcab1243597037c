"""Single-pass traversal engine that dispatches rules over fact graphs."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from .diagnostics import INTERNAL_ERROR_RULE, AnalysisReport, Diagnostic, DiagnosticSink
from .errors import MalformedFact
from .facts import FactGraph, Node, preorder
from .registry import RuleRegistry
from .rules import Rule
from .severity import Severity
from .suppression import SuppressionDirective, SuppressionResolver

logger = logging.getLogger(__name__)


class TraversalEngine:
    """Walk fact graphs once, evaluating every active rule at each node.

    Rules run in registration order at each node; the active-rule set is
    fixed for the duration of one :meth:`collect` call.
    """

    def __init__(self, registry: RuleRegistry, resolver: Optional[SuppressionResolver] = None) -> None:
        self._registry = registry
        self._resolver = resolver or SuppressionResolver()

    def collect(self, roots: Iterable[Node]) -> List[Diagnostic]:
        """Return raw, pre-suppression diagnostics in traversal order."""

        rules = self._registry.active_rules()
        buffer: List[Diagnostic] = []
        for root in roots:
            for node in preorder(root):
                self._evaluate(node, rules, buffer)
        return buffer

    def analyze(
        self,
        graph: FactGraph,
        directives: Sequence[SuppressionDirective] = (),
    ) -> List[Diagnostic]:
        """Collect, suppress and finalize diagnostics for one file."""

        raw = self.collect(graph.roots)
        sink = DiagnosticSink()
        sink.extend(self._resolver.filter(raw, directives))
        diagnostics = sink.finalize()
        logger.debug("%s: %d raw, %d reported", graph.path, len(raw), len(diagnostics))
        return diagnostics

    def _evaluate(self, node: Node, rules: Sequence[Rule], buffer: List[Diagnostic]) -> None:
        for rule in rules:
            try:
                if not rule.matches(node):
                    continue
                message = rule.explain(node)
            except MalformedFact as exc:
                # Remaining rules are skipped for this node only; traversal continues.
                logger.warning("Malformed fact at %s while evaluating %s: %s", node.location, rule.id, exc)
                buffer.append(
                    Diagnostic(
                        location=node.location,
                        rule_id=INTERNAL_ERROR_RULE,
                        severity=Severity.ERROR,
                        message=f"Internal error evaluating {rule.id}: {exc}",
                    )
                )
                return
            buffer.append(
                Diagnostic(
                    location=node.location,
                    rule_id=rule.id,
                    severity=self._registry.severity_for(rule),
                    message=message,
                )
            )


def analyze_all(
    graphs: Iterable[FactGraph],
    registry: RuleRegistry,
    directives: Sequence[SuppressionDirective] = (),
) -> AnalysisReport:
    """Analyze each graph in turn and merge the results into one report."""

    engine = TraversalEngine(registry)
    report = AnalysisReport()
    collected: List[Diagnostic] = []
    for graph in graphs:
        collected.extend(engine.analyze(graph, directives))
        report.files.append(graph.path)
    for diagnostic in sorted(collected, key=lambda diagnostic: diagnostic.key):
        report.add_diagnostic(diagnostic)
    logger.info(
        "Analyzed %d file(s): %d diagnostic(s)",
        len(report.files),
        report.summary.total,
    )
    return report
