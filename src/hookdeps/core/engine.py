"""
Orchestration Engine for Dependency Analysis.

This module provides the `AnalysisEngine`, the driver of the pure transform
``Scope[] -> Diagnostic[]``. For every scope, in input order:

1.  **Classification & Graph Construction**: `CaptureGraphBuilder` lowers the
    snapshot into an integer-indexed `CaptureGraph`, classifying bindings via the
    `BindingClassifier`. Unresolved identifiers are reported as `UnresolvedBinding`.
2.  **Reachability**: `ReachabilityEngine` computes the may-change and untracked
    sets of every node.
3.  **Verification**: `DependencyVerifier` checks every memoized computation and
    effect scope.
4.  **Reporting**: `DiagnosticsReporter` wraps the concatenated findings.

Scopes never share mutable state; each gets its own classifier, graph and
fixpoint, and results are merged by concatenation only.
"""

import logging
from typing import Iterable, List, Optional

from hookdeps.analysis.capture_graph import CaptureGraphBuilder
from hookdeps.analysis.classifier import BindingClassifier
from hookdeps.analysis.reachability import ReachabilityEngine
from hookdeps.analysis.reporter import DiagnosticsReporter
from hookdeps.analysis.verifier import DependencyVerifier
from hookdeps.config import AnalyzerConfig
from hookdeps.core.model import AnalysisResult, Diagnostic, ScopeSnapshot
from hookdeps.enums import FindingKind, Severity

logger = logging.getLogger(__name__)


class AnalysisEngine:
  """
  The main analysis unit.

  Attributes:
      config (AnalyzerConfig): Policy settings.
      reporter (DiagnosticsReporter): Result collector.
  """

  def __init__(self, config: Optional[AnalyzerConfig] = None):
    """
    Initializes the Engine.

    Args:
        config: Analyzer configuration. Defaults are used if omitted.
    """
    self.config = config or AnalyzerConfig()
    self.reporter = DiagnosticsReporter()

  def analyze(self, scopes: Iterable[ScopeSnapshot]) -> AnalysisResult:
    """
    Analyzes a sequence of scopes.

    Args:
        scopes: Scope snapshots in the order their diagnostics should appear.

    Returns:
        AnalysisResult: Concatenated diagnostics of every scope.

    Raises:
        GraphError: If a snapshot is structurally inconsistent.
    """
    diagnostics: List[Diagnostic] = []
    count = 0
    for snapshot in scopes:
      diagnostics.extend(self.analyze_scope(snapshot))
      count += 1

    result = self.reporter.collect(diagnostics, scopes_analyzed=count)
    logger.debug("Analyzed %d scopes, %d diagnostics", count, len(result.diagnostics))
    return result

  def analyze_scope(self, snapshot: ScopeSnapshot) -> List[Diagnostic]:
    """
    Runs the full pipeline on one scope.

    Args:
        snapshot: The scope to analyze.

    Returns:
        The scope's diagnostics: unresolved free names first, then the findings of
        each memoized computation and effect in declaration order.
    """
    classifier = BindingClassifier()
    graph = CaptureGraphBuilder(classifier).build(snapshot)
    reachability = ReachabilityEngine().compute(graph)

    for cycle in graph.cycles:
      logger.debug(
        "Scope '%s': mutually recursive closures %s",
        snapshot.id,
        ", ".join(graph.node(i).name for i in cycle),
      )

    pure = [n.name for n in graph.closures() if classifier.classify_closure(n.id, n.role, reachability)]
    if pure:
      logger.debug("Scope '%s': LocalPure closures %s", snapshot.id, ", ".join(pure))

    diagnostics: List[Diagnostic] = []
    for issue in classifier.issues:
      where = f" (referenced by '{issue.referenced_by}')" if issue.referenced_by else ""
      diagnostics.append(
        Diagnostic(
          kind=FindingKind.UNRESOLVED_BINDING,
          severity=Severity.INFO,
          subject_name=issue.name,
          scope_id=snapshot.id,
          rationale=f"'{issue.name}'{where} has no resolvable declaration; it is treated as reactive",
          computation=issue.referenced_by,
          location=self._location_of(snapshot, issue.referenced_by),
        )
      )

    verifier = DependencyVerifier(
      external_severity=self.config.external_mutation_severity,
      flag_redundant=self.config.flag_redundant_memoization,
    )
    diagnostics.extend(verifier.verify(graph, reachability))
    return diagnostics

  @staticmethod
  def _location_of(snapshot: ScopeSnapshot, closure_name: Optional[str]) -> Optional[str]:
    if closure_name is None:
      return None
    for closure in snapshot.closures:
      if closure.name == closure_name:
        return closure.location
    return None


def analyze(scopes: Iterable[ScopeSnapshot], config: Optional[AnalyzerConfig] = None) -> AnalysisResult:
  """
  Convenience wrapper around `AnalysisEngine.analyze`.

  Args:
      scopes: Scope snapshots to analyze.
      config: Optional configuration.

  Returns:
      AnalysisResult: The diagnostics.
  """
  return AnalysisEngine(config).analyze(scopes)
