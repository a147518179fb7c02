"""
Dependency List Verification.

This module provides the `DependencyVerifier`, which compares the declared
dependency list of every memoized computation and effect scope against the
reachability fixpoint.

For a computation ``m`` the *required* names are the outermost names it references
directly that are reachable-reactive: a reactive binding it reads, or a closure it
references that transitively captures one. A referenced closure is required as a
whole; its internal bindings never are.

Memoized computations and effects share the missing-dependency check but differ
elsewhere:

*   An omitted list is a `NoDependencyList` finding for a memoized computation and
    legal ("run every invocation") for an effect.
*   `UnnecessaryDependency` and `RedundantMemoization` apply to memoized
    computations only. An effect may list a dependency purely as a re-run trigger.
*   `UnstableEffectDependency` applies to effects only: a listed closure that is
    recreated on every invocation makes the effect run every time.
"""

import logging
from typing import List, Optional, Set

from hookdeps.analysis.capture_graph import CaptureGraph, GraphNode
from hookdeps.analysis.reachability import Reachability
from hookdeps.core.model import Diagnostic, root_identifier
from hookdeps.enums import ClosureRole, DeclarationForm, FindingKind, OriginKind, Severity

logger = logging.getLogger(__name__)

_UNNECESSARY_REASONS = {
  OriginKind.PROCESS_WIDE_CONSTANT: "is a process-wide constant and can never differ between invocations",
  OriginKind.REFERENCE_CELL: (
    "is a reference cell whose identity is stable across invocations; "
    "reading its content never requires recomputation"
  ),
  OriginKind.EXTERNAL_MUTABLE: (
    "is declared outside any re-invoked scope; its mutations are not observed at invocation "
    "boundaries, so listing it cannot make the computation fresh"
  ),
}

_SETTER_REASON = (
  "is a state setter whose identity is stable across invocations; "
  "calling it never requires recomputation"
)


class DependencyVerifier:
  """
  Checks declared dependency lists against reachable reactive sets.

  Attributes:
      external_severity (Severity): Severity of `UntrackedExternalMutation` findings.
      flag_redundant (bool): Whether to report `RedundantMemoization`.
  """

  def __init__(self, external_severity: Severity = Severity.INFO, flag_redundant: bool = True):
    """
    Initializes the verifier.

    Args:
        external_severity: Severity for reads of externally mutated bindings.
        flag_redundant: If False, `RedundantMemoization` is never reported.
    """
    self.external_severity = external_severity
    self.flag_redundant = flag_redundant

  def verify(self, graph: CaptureGraph, reachability: Reachability) -> List[Diagnostic]:
    """
    Verifies every memoized computation and effect scope of a graph.

    Args:
        graph: The scope's capture graph.
        reachability: Fixpoint result for the same graph.

    Returns:
        Diagnostics in declaration order of the computations.
    """
    findings: List[Diagnostic] = []
    for node in graph.checked_closures():
      findings.extend(self.verify_computation(graph, reachability, node))
    return findings

  def required_names(self, graph: CaptureGraph, reachability: Reachability, node: GraphNode) -> List[str]:
    """
    Returns the outermost reachable-reactive names referenced by a computation.

    Args:
        graph: The capture graph.
        reachability: Fixpoint result.
        node: The memoized computation or effect.

    Returns:
        Names in first-reference order.
    """
    return [graph.node(t).name for t in graph.successors(node.id) if reachability.is_reactive(t)]

  def verify_computation(self, graph: CaptureGraph, reachability: Reachability, node: GraphNode) -> List[Diagnostic]:
    """
    Verifies one memoized computation or effect scope.

    Args:
        graph: The capture graph.
        reachability: Fixpoint result.
        node: A closure node with role `memoized` or `effect`.

    Returns:
        The computation's findings, in the documented order.
    """
    closure = node.closure
    is_effect = closure.role == ClosureRole.EFFECT
    declared = closure.declared_dependencies
    out: List[Diagnostic] = []

    def emit(kind: FindingKind, severity: Severity, subject: str, rationale: str) -> None:
      out.append(
        Diagnostic(
          kind=kind,
          severity=severity,
          subject_name=subject,
          scope_id=graph.scope_id,
          rationale=rationale,
          computation=node.name,
          location=closure.location,
        )
      )

    if declared is None:
      if not is_effect:
        emit(
          FindingKind.NO_DEPENDENCY_LIST,
          Severity.WARNING,
          node.name,
          f"'{node.name}' has no dependency list, so it is recreated on every invocation "
          "and the memoization is a no-op",
        )
    else:
      self._check_declared(graph, reachability, node, declared, is_effect, emit)

    self._check_untracked(graph, reachability, node, emit)
    return out

  def _check_declared(self, graph, reachability, node, declared, is_effect, emit) -> None:
    required = self.required_names(graph, reachability, node)
    required_set = set(required)
    declared_roots = [root_identifier(entry) for entry in declared]
    declared_root_set = set(declared_roots)
    kind_label = "effect" if is_effect else "memoized computation"

    # 1. Missing
    for name in required:
      if name in declared_root_set:
        continue
      emit(
        FindingKind.MISSING_DEPENDENCY,
        Severity.ERROR,
        name,
        f"{kind_label} '{node.name}' {self._describe_requirement(graph, reachability, name)} "
        f"but '{name}' is not in its dependency list",
      )

    # 2. Declared entries
    seen: Set[str] = set()
    for entry, root in zip(declared, declared_roots):
      if entry in seen:
        emit(
          FindingKind.DUPLICATE_DEPENDENCY,
          Severity.WARNING,
          entry,
          f"'{entry}' is listed more than once in the dependencies of '{node.name}'",
        )
        continue
      seen.add(entry)

      target = graph.lookup(root)
      if is_effect and self._recreated_fresh(reachability, target):
        emit(
          FindingKind.UNSTABLE_EFFECT_DEPENDENCY,
          Severity.WARNING,
          entry,
          f"'{entry}' is recreated on every invocation, so effect '{node.name}' re-runs every time "
          "without any change in application state",
        )
        continue

      if root in required_set:
        continue

      if target is None or target.origin_kind == OriginKind.UNRESOLVED:
        emit(
          FindingKind.UNRESOLVED_BINDING,
          Severity.INFO,
          entry,
          f"declared dependency '{entry}' of '{node.name}' does not resolve to any declaration",
        )
        continue

      if is_effect:
        continue

      reason = self._unnecessary_reason(graph, reachability, node, target)
      emit(FindingKind.UNNECESSARY_DEPENDENCY, Severity.WARNING, entry, f"'{entry}' {reason}")

    # 3. Redundant memoization
    if is_effect or not self.flag_redundant or not declared:
      return
    targets = [graph.lookup(root) for root in declared_roots]
    if all(self._recreated_fresh(reachability, t) for t in targets):
      names = ", ".join(dict.fromkeys(declared_roots))
      emit(
        FindingKind.REDUNDANT_MEMOIZATION,
        Severity.WARNING,
        node.name,
        f"every dependency of '{node.name}' ({names}) is recreated on each invocation, "
        "so the cache key changes every time and memoization saves nothing",
      )

  def _recreated_fresh(self, reachability: Reachability, target: Optional[GraphNode]) -> bool:
    if target is None or not target.is_closure:
      return False
    if target.role == ClosureRole.FUNCTION:
      return True
    return (
      target.role == ClosureRole.DERIVED
      and target.closure.fresh_object
      and not reachability.is_reactive(target.id)
    )

  def _check_untracked(self, graph, reachability, node, emit) -> None:
    direct = graph.successors(node.id)
    for binding_id in sorted(reachability.untracked(node.id)):
      name = graph.node(binding_id).name
      via = self._first_carrier(graph, reachability, direct, binding_id)
      path = "directly" if via is None else f"through '{via}'"
      emit(
        FindingKind.UNTRACKED_EXTERNAL_MUTATION,
        self.external_severity,
        name,
        f"'{node.name}' reads '{name}' {path}; it is reassigned outside any invocation and "
        "no dependency list can observe that change",
      )

  def _first_carrier(self, graph, reachability, direct, binding_id) -> Optional[str]:
    if binding_id in direct:
      return None
    for t in direct:
      if binding_id in reachability.untracked(t):
        return graph.node(t).name
    return None

  def _describe_requirement(self, graph: CaptureGraph, reachability: Reachability, name: str) -> str:
    target = graph.lookup(name)
    if target.is_closure:
      inner = sorted(graph.node(i).name for i in reachability.may_change(target.id) if i != target.id)
      captured = f" and captures {', '.join(inner)}" if inner else ""
      if target.closure.reassigned:
        return f"reads '{name}', which is reassigned after its declaration{captured},"
      return f"references '{name}', which is recreated on every invocation{captured},"
    if target.origin_kind == OriginKind.STATE_CELL:
      return f"reads state cell '{name}', whose value may differ on every invocation,"
    if target.origin_kind == OriginKind.PARAMETER:
      return f"reads parameter '{name}', which may differ on every invocation,"
    return f"reads '{name}', which has no resolvable declaration and is treated as reactive,"

  def _unnecessary_reason(
    self, graph: CaptureGraph, reachability: Reachability, node: GraphNode, target: GraphNode
  ) -> str:
    if target.is_closure:
      if reachability.is_reactive(target.id):
        return f"may change but '{node.name}' never references it, so it only causes pointless recomputation"
      if target.role == ClosureRole.MEMOIZED:
        return "is a memoized value that never changes"
      return (
        "is LocalPure: it is recreated every invocation but always behaves identically, "
        "so calling it is safe without listing it"
      )

    if target.declaration == DeclarationForm.STATE_SETTER:
      return _SETTER_REASON
    if target.origin_kind in _UNNECESSARY_REASONS:
      return _UNNECESSARY_REASONS[target.origin_kind]
    return f"may change but '{node.name}' never reads it, so it only causes pointless recomputation"
