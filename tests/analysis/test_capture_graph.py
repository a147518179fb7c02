"""
Tests for CaptureGraphBuilder.
"""

import pytest

from hookdeps.analysis.capture_graph import CaptureGraphBuilder, find_closure_cycles
from hookdeps.analysis.classifier import BindingClassifier
from hookdeps.core.model import Binding, Closure, ScopeSnapshot
from hookdeps.enums import OriginKind
from hookdeps.errors import GraphError


def build(bindings, closures, classifier=None):
  snapshot = ScopeSnapshot(id="Comp", bindings=bindings, closures=closures)
  return CaptureGraphBuilder(classifier).build(snapshot)


def edge_names(graph, name):
  return [graph.node(t).name for t in graph.successors(graph.lookup(name).id)]


def test_bindings_then_closures_get_stable_ids():
  graph = build(
    [Binding(name="count", declaration="state_cell"), Binding(name="box", declaration="reference_cell")],
    [Closure(name="show", free_names=["count"]), Closure(name="read", free_names=["box"])],
  )

  assert [n.name for n in graph.nodes] == ["count", "box", "show", "read"]
  assert [n.id for n in graph.nodes] == [0, 1, 2, 3]
  assert graph.node(0).origin_kind == OriginKind.STATE_CELL
  assert graph.node(1).origin_kind == OriginKind.REFERENCE_CELL
  assert graph.node(2).is_closure
  assert graph.node(2).origin_kind is None


def test_edges_follow_first_reference_order_without_duplicates():
  graph = build(
    [Binding(name="a", declaration="state_cell"), Binding(name="b", declaration="parameter")],
    [Closure(name="f", free_names=["b", "a", "b"])],
  )
  assert edge_names(graph, "f") == ["b", "a"]
  assert graph.edge_count == 2


def test_closure_to_closure_edges():
  graph = build(
    [Binding(name="count", declaration="state_cell")],
    [
      Closure(name="inner", free_names=["count"]),
      Closure(name="outer", role="memoized", free_names=["inner"], declared_dependencies=[]),
    ],
  )
  assert edge_names(graph, "outer") == ["inner"]
  assert edge_names(graph, "inner") == ["count"]


def test_unresolved_name_becomes_synthetic_binding():
  classifier = BindingClassifier()
  graph = build([], [Closure(name="f", free_names=["ghost"]), Closure(name="g", free_names=["ghost"])], classifier)

  ghost = graph.lookup("ghost")
  assert ghost.origin_kind == OriginKind.UNRESOLVED
  assert edge_names(graph, "g") == ["ghost"]
  # One node and one issue, even with two referencing closures.
  assert [n.name for n in graph.nodes].count("ghost") == 1
  assert [i.name for i in classifier.issues] == ["ghost"]
  assert classifier.issues[0].referenced_by == "f"


def test_self_reference_is_dropped():
  graph = build([], [Closure(name="loop", free_names=["loop"])])
  assert edge_names(graph, "loop") == []
  assert graph.cycles == []


def test_closure_shadows_same_named_binding():
  graph = build(
    [Binding(name="value", declaration="module")],
    [Closure(name="value", role="derived", free_names=[])],
  )
  assert len(graph.nodes) == 1
  assert graph.lookup("value").is_closure


def test_module_function_captures():
  graph = build(
    [
      Binding(name="REGISTRY", declaration="module", reassigned=True),
      Binding(name="lookup", declaration="module", captures=["REGISTRY", "lookup", "len"]),
    ],
    [],
  )
  # Self reference and unknown names are ignored.
  assert edge_names(graph, "lookup") == ["REGISTRY"]


def test_duplicate_closure_names_rejected():
  with pytest.raises(GraphError, match="duplicate closure name 'f'"):
    build([], [Closure(name="f"), Closure(name="f")])


def test_duplicate_binding_names_rejected():
  with pytest.raises(GraphError) as excinfo:
    build([Binding(name="x", declaration="parameter"), Binding(name="x", declaration="state_cell")], [])
  assert excinfo.value.scope_id == "Comp"


def test_mutual_recursion_cycle_detected():
  graph = build(
    [],
    [
      Closure(name="even", free_names=["odd"]),
      Closure(name="odd", free_names=["even"]),
      Closure(name="other", free_names=["even"]),
    ],
  )
  even, odd = graph.lookup("even").id, graph.lookup("odd").id
  assert graph.cycles == [tuple(sorted((even, odd)))]
  assert find_closure_cycles(graph) == graph.cycles


def test_lookup_unknown_name():
  graph = build([], [])
  assert graph.lookup("nothing") is None
  assert list(graph.closures()) == []
  assert list(graph.checked_closures()) == []
