"""
Tests for AnalysisEngine.

Verifies:
1. The six reference scenarios.
2. Soundness and minimality of clean results.
3. Idempotence and monotonicity.
4. Unresolved identifiers and configurable severities.
5. Scope isolation and ordering.
"""

import pytest

from hookdeps import analyze
from hookdeps.analysis.capture_graph import CaptureGraphBuilder
from hookdeps.analysis.reachability import ReachabilityEngine
from hookdeps.config import AnalyzerConfig
from hookdeps.core.engine import AnalysisEngine
from hookdeps.core.model import Binding, Closure, ScopeSnapshot
from hookdeps.enums import FindingKind, Severity
from hookdeps.errors import GraphError


def snapshot(bindings, closures, scope_id="Comp"):
  return ScopeSnapshot(id=scope_id, bindings=bindings, closures=closures)


def kinds(result):
  return [(d.kind, d.subject_name) for d in result.diagnostics]


# --- Reference scenarios ---


def test_scenario_missing_state_cell():
  scope = snapshot(
    [Binding(name="count", declaration="state_cell")],
    [Closure(name="m", role="memoized", free_names=["count"], declared_dependencies=[])],
  )
  assert kinds(analyze([scope])) == [(FindingKind.MISSING_DEPENDENCY, "count")]


def test_scenario_stable_captures_need_nothing():
  scope = snapshot(
    [Binding(name="box", declaration="reference_cell"), Binding(name="LIMIT", declaration="module")],
    [Closure(name="m", role="memoized", free_names=["box", "LIMIT"], declared_dependencies=[])],
  )
  assert analyze([scope]).diagnostics == []


def test_scenario_local_pure_closure_is_safe():
  scope = snapshot(
    [Binding(name="LIMIT", declaration="module")],
    [
      Closure(name="clamp", free_names=["LIMIT"]),
      Closure(name="m", role="memoized", free_names=["clamp"], declared_dependencies=[]),
    ],
  )
  assert analyze([scope]).diagnostics == []


def test_scenario_missing_names_the_closure_not_the_cell():
  scope = snapshot(
    [Binding(name="count", declaration="state_cell")],
    [
      Closure(name="show", free_names=["count"]),
      Closure(name="m", role="memoized", free_names=["show"], declared_dependencies=[]),
    ],
  )
  assert kinds(analyze([scope])) == [(FindingKind.MISSING_DEPENDENCY, "show")]


def test_scenario_unreferenced_parameter_is_unnecessary():
  scope = snapshot(
    [Binding(name="p", declaration="parameter")],
    [Closure(name="m", role="memoized", free_names=[], declared_dependencies=["p"])],
  )
  assert kinds(analyze([scope])) == [(FindingKind.UNNECESSARY_DEPENDENCY, "p")]


def test_scenario_omitted_list_effect_vs_memo():
  effect_scope = snapshot(
    [Binding(name="count", declaration="state_cell")],
    [Closure(name="e", role="effect", free_names=["count"], declared_dependencies=None)],
  )
  memo_scope = snapshot(
    [Binding(name="count", declaration="state_cell")],
    [Closure(name="m", role="memoized", free_names=["count"], declared_dependencies=None)],
  )
  assert analyze([effect_scope]).diagnostics == []
  assert kinds(analyze([memo_scope])) == [(FindingKind.NO_DEPENDENCY_LIST, "m")]


# --- Properties ---

PROPERTY_SCOPE = snapshot(
  [
    Binding(name="count", declaration="state_cell"),
    Binding(name="step", declaration="parameter"),
    Binding(name="box", declaration="reference_cell"),
    Binding(name="LIMIT", declaration="module"),
  ],
  [
    Closure(name="show", free_names=["count", "LIMIT"]),
    Closure(name="clamp", free_names=["LIMIT"]),
    Closure(name="a", role="memoized", free_names=["show", "step", "box"], declared_dependencies=["show", "step"]),
    Closure(name="b", role="memoized", free_names=["clamp", "count"], declared_dependencies=["count"]),
    Closure(name="c", role="effect", free_names=["a", "b", "box"], declared_dependencies=["a", "b", "box"]),
  ],
)


def test_soundness_and_minimality_of_clean_scope():
  result = analyze([PROPERTY_SCOPE])
  assert result.diagnostics == []

  graph = CaptureGraphBuilder().build(PROPERTY_SCOPE)
  reach = ReachabilityEngine().compute(graph)
  for node in graph.checked_closures():
    declared = set(node.closure.declared_dependencies)
    reachable_reactive = {graph.node(t).name for t in graph.successors(node.id) if reach.is_reactive(t)}
    # Soundness: nothing reactive left uncovered.
    assert reachable_reactive <= declared
    # Minimality: every declared name is reactive, unless the computation is an effect.
    if not node.closure.is_effect:
      assert declared <= reachable_reactive


def test_idempotence():
  engine = AnalysisEngine()
  scope = snapshot(
    [Binding(name="count", declaration="state_cell"), Binding(name="box", declaration="reference_cell")],
    [Closure(name="m", role="memoized", free_names=["count"], declared_dependencies=["box"])],
  )
  first = engine.analyze([scope])
  second = engine.analyze([scope])
  assert first == second
  assert kinds(first) == [(FindingKind.MISSING_DEPENDENCY, "count"), (FindingKind.UNNECESSARY_DEPENDENCY, "box")]


def test_monotonicity_adding_a_reactive_capture():
  base = snapshot(
    [Binding(name="count", declaration="state_cell"), Binding(name="step", declaration="parameter")],
    [Closure(name="m", role="memoized", free_names=["count"], declared_dependencies=["count"])],
  )
  grown = snapshot(
    base.bindings,
    [Closure(name="m", role="memoized", free_names=["count", "step"], declared_dependencies=["count"])],
  )

  def missing(result):
    return {d.subject_name for d in result.diagnostics if d.kind == FindingKind.MISSING_DEPENDENCY}

  before, after = missing(analyze([base])), missing(analyze([grown]))
  assert before <= after
  assert after == {"step"}


# --- Unresolved & policy ---


def test_unresolved_free_name_is_reported_and_reactive():
  scope = snapshot(
    [],
    [Closure(name="m", role="memoized", free_names=["mystery"], declared_dependencies=[], location="x.py:4")],
  )
  result = analyze([scope])

  assert kinds(result) == [(FindingKind.UNRESOLVED_BINDING, "mystery"), (FindingKind.MISSING_DEPENDENCY, "mystery")]
  unresolved = result.diagnostics[0]
  assert unresolved.severity == Severity.INFO
  assert unresolved.computation == "m"
  assert unresolved.location == "x.py:4"
  assert "treated as reactive" in unresolved.rationale


def test_external_mutable_defaults_to_info():
  scope = snapshot(
    [Binding(name="CACHE", declaration="module", reassigned=True)],
    [Closure(name="m", role="memoized", free_names=["CACHE"], declared_dependencies=[])],
  )
  result = analyze([scope])
  assert kinds(result) == [(FindingKind.UNTRACKED_EXTERNAL_MUTATION, "CACHE")]
  assert not result.has_errors


@pytest.mark.parametrize("severity", ["warning", "error"])
def test_external_mutable_severity_is_configurable(severity):
  scope = snapshot(
    [Binding(name="CACHE", declaration="module", reassigned=True)],
    [Closure(name="m", role="memoized", free_names=["CACHE"], declared_dependencies=[])],
  )
  result = analyze([scope], AnalyzerConfig(external_mutation_severity=severity))
  assert result.diagnostics[0].severity == Severity(severity)


def test_redundant_memoization_config():
  scope = snapshot(
    [],
    [
      Closure(name="f", free_names=[]),
      Closure(name="m", role="memoized", free_names=["f"], declared_dependencies=["f"]),
    ],
  )
  flagged = analyze([scope])
  silenced = analyze([scope], AnalyzerConfig(flag_redundant_memoization=False))

  assert FindingKind.REDUNDANT_MEMOIZATION in [d.kind for d in flagged.diagnostics]
  assert FindingKind.REDUNDANT_MEMOIZATION not in [d.kind for d in silenced.diagnostics]


# --- Scopes ---


def test_scopes_are_isolated_and_ordered():
  first = snapshot(
    [Binding(name="count", declaration="state_cell")],
    [Closure(name="m", role="memoized", free_names=["count"], declared_dependencies=[])],
    scope_id="First",
  )
  # Same names, different declarations: classification never leaks across scopes.
  second = snapshot(
    [Binding(name="count", declaration="module")],
    [Closure(name="m", role="memoized", free_names=["count"], declared_dependencies=[])],
    scope_id="Second",
  )
  result = AnalysisEngine().analyze([first, second])

  assert result.scopes_analyzed == 2
  assert [(d.scope_id, d.kind) for d in result.diagnostics] == [("First", FindingKind.MISSING_DEPENDENCY)]


def test_inconsistent_scope_raises():
  scope = snapshot([], [Closure(name="m"), Closure(name="m")])
  with pytest.raises(GraphError):
    analyze([scope])


def test_empty_input():
  result = analyze([])
  assert result.diagnostics == []
  assert result.scopes_analyzed == 0
