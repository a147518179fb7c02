"""
Capture Graph Construction.

This module lowers a `ScopeSnapshot` into a `CaptureGraph`: an arena of nodes
(bindings and closures) addressed by stable integer ids, and directed
"references" edges between them.

Edge kinds:

*   ``closure -> binding``: the closure body reads the binding.
*   ``closure -> closure``: the closure body calls or reads another closure.
*   ``binding -> binding``: a module-level function reads another module-level
    binding. These edges only carry untracked external mutation.

Free names are resolved against the scope's closures first, then its bindings.
A name with no declaration becomes a synthetic unresolved binding. Cycles among
closures (mutual recursion) are detected and recorded; the reachability fixpoint
resolves them.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from hookdeps.analysis.classifier import BindingClassifier
from hookdeps.core.model import Binding, Closure, ScopeSnapshot
from hookdeps.enums import ClosureRole, DeclarationForm, OriginKind
from hookdeps.errors import GraphError

logger = logging.getLogger(__name__)

_MODULE_ORIGINS = (OriginKind.PROCESS_WIDE_CONSTANT, OriginKind.EXTERNAL_MUTABLE)


@dataclass
class GraphNode:
  """
  A binding or closure in the capture graph.
  """

  id: int
  """Arena index."""

  name: str
  """Identifier the node is bound to."""

  origin_kind: Optional[OriginKind] = None
  """Classified origin kind for bindings, None for closures."""

  closure: Optional[Closure] = None
  """The source closure, for closure nodes."""

  declaration: Optional[DeclarationForm] = None
  """Declaration form of binding nodes."""

  @property
  def is_closure(self) -> bool:
    return self.closure is not None

  @property
  def role(self) -> Optional[ClosureRole]:
    return self.closure.role if self.closure else None


@dataclass
class CaptureGraph:
  """
  Integer-indexed reference graph of one scope.
  """

  scope_id: str
  """Identifier of the analysed scope."""

  nodes: List[GraphNode] = field(default_factory=list)
  """Nodes ordered by id."""

  edges: Dict[int, Tuple[int, ...]] = field(default_factory=dict)
  """Outgoing edges per node id, in first-reference order."""

  names: Dict[str, int] = field(default_factory=dict)
  """Name table used for resolving declared dependencies."""

  cycles: List[Tuple[int, ...]] = field(default_factory=list)
  """Strongly connected groups of closures (mutual recursion)."""

  def node(self, node_id: int) -> GraphNode:
    return self.nodes[node_id]

  def lookup(self, name: str) -> Optional[GraphNode]:
    """
    Resolves a name to its node.

    Args:
        name: Identifier to look up.

    Returns:
        The node, or None if the scope declares nothing with that name.
    """
    node_id = self.names.get(name)
    return self.nodes[node_id] if node_id is not None else None

  def successors(self, node_id: int) -> Tuple[int, ...]:
    return self.edges.get(node_id, ())

  def closures(self) -> Iterator[GraphNode]:
    """Yields closure nodes in declaration order."""
    return (n for n in self.nodes if n.is_closure)

  def checked_closures(self) -> Iterator[GraphNode]:
    """Yields memoized computations and effect scopes in declaration order."""
    return (n for n in self.nodes if n.closure is not None and n.closure.is_checked)

  @property
  def edge_count(self) -> int:
    return sum(len(targets) for targets in self.edges.values())


class CaptureGraphBuilder:
  """
  Builds a `CaptureGraph` from a `ScopeSnapshot`.

  The builder classifies bindings as it allocates them, so the classifier's
  unresolved-identifier issues are complete once `build` returns.
  """

  def __init__(self, classifier: Optional[BindingClassifier] = None):
    """
    Initializes the builder.

    Args:
        classifier: Classifier used for binding nodes. A fresh one is created if omitted.
    """
    self.classifier = classifier or BindingClassifier()

  def build(self, snapshot: ScopeSnapshot) -> CaptureGraph:
    """
    Lowers a snapshot into a capture graph.

    Args:
        snapshot: The scope to lower. It is not modified.

    Returns:
        The populated graph.

    Raises:
        GraphError: If two closures or two bindings share a name.
    """
    graph = CaptureGraph(scope_id=snapshot.id)

    closure_names = self._check_unique(snapshot.id, [c.name for c in snapshot.closures], "closure")
    self._check_unique(snapshot.id, [b.name for b in snapshot.bindings], "binding")

    # 1. Allocate bindings (closures shadow same-named bindings)
    module_bindings: List[Tuple[int, Binding]] = []
    for binding in snapshot.bindings:
      if binding.name in closure_names:
        logger.debug("Binding '%s' shadowed by closure in scope '%s'", binding.name, snapshot.id)
        continue
      node = self._add_node(
        graph, binding.name, origin_kind=self.classifier.classify(binding), declaration=binding.declaration
      )
      if binding.declaration == DeclarationForm.MODULE and binding.captures:
        module_bindings.append((node.id, binding))

    # 2. Allocate closures
    for closure in snapshot.closures:
      self._add_node(graph, closure.name, closure=closure)

    # 3. Module function captures
    for node_id, binding in module_bindings:
      targets = [graph.names[n] for n in binding.captures if n in graph.names and n != binding.name]
      graph.edges[node_id] = tuple(t for t in dict.fromkeys(targets) if graph.nodes[t].origin_kind in _MODULE_ORIGINS)

    # 4. Closure references
    for closure in snapshot.closures:
      source_id = graph.names[closure.name]
      targets: List[int] = []
      for name in closure.free_names:
        if name == closure.name:
          continue  # recursion
        if name not in graph.names:
          synthetic = Binding(name=name, declaration=DeclarationForm.UNRESOLVED, declaring_scope_id=snapshot.id)
          self._add_node(
            graph,
            name,
            origin_kind=self.classifier.classify(synthetic, referenced_by=closure.name),
            declaration=DeclarationForm.UNRESOLVED,
          )
        targets.append(graph.names[name])
      graph.edges[source_id] = tuple(dict.fromkeys(targets))

    graph.cycles = find_closure_cycles(graph)

    logger.debug(
      "Scope '%s': %d nodes, %d edges, %d cycles",
      snapshot.id,
      len(graph.nodes),
      graph.edge_count,
      len(graph.cycles),
    )
    return graph

  def _add_node(
    self,
    graph: CaptureGraph,
    name: str,
    origin_kind: Optional[OriginKind] = None,
    closure: Optional[Closure] = None,
    declaration: Optional[DeclarationForm] = None,
  ) -> GraphNode:
    node = GraphNode(
      id=len(graph.nodes), name=name, origin_kind=origin_kind, closure=closure, declaration=declaration
    )
    graph.nodes.append(node)
    graph.names[name] = node.id
    return node

  def _check_unique(self, scope_id: str, names: List[str], what: str) -> set:
    seen = set()
    for name in names:
      if name in seen:
        raise GraphError(scope_id, f"duplicate {what} name '{name}'")
      seen.add(name)
    return seen


def find_closure_cycles(graph: CaptureGraph) -> List[Tuple[int, ...]]:
  """
  Finds strongly connected groups of closures (Tarjan's algorithm).

  Only closure-to-closure edges are followed. Groups of a single closure are not
  reported since self references are dropped during construction.

  Args:
      graph: The capture graph.

  Returns:
      List of cycles, each a tuple of closure ids sorted ascending, ordered by
      their smallest member.
  """
  index: Dict[int, int] = {}
  low: Dict[int, int] = {}
  on_stack: Dict[int, bool] = {}
  stack: List[int] = []
  cycles: List[Tuple[int, ...]] = []
  counter = [0]

  def closure_successors(node_id: int) -> List[int]:
    return [t for t in graph.successors(node_id) if graph.nodes[t].is_closure]

  def strongconnect(v: int) -> None:
    index[v] = low[v] = counter[0]
    counter[0] += 1
    stack.append(v)
    on_stack[v] = True

    for w in closure_successors(v):
      if w not in index:
        strongconnect(w)
        low[v] = min(low[v], low[w])
      elif on_stack.get(w):
        low[v] = min(low[v], index[w])

    if low[v] == index[v]:
      component = []
      while True:
        w = stack.pop()
        on_stack[w] = False
        component.append(w)
        if w == v:
          break
      if len(component) > 1:
        cycles.append(tuple(sorted(component)))

  for node in graph.closures():
    if node.id not in index:
      strongconnect(node.id)

  return sorted(cycles)
