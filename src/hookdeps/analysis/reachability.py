"""
Reachability Fixpoint.

Computes, for every node of a `CaptureGraph`, the set of may-change nodes reachable
through its outgoing edges. Two sets are tracked independently:

*   **may_change**: reactive seeds (state cells, parameters, unresolved names and
    reassigned locals). These drive dependency-list requirements.
*   **untracked**: `ExternalMutable` bindings. They can change, but no invocation
    boundary observes the change, so they never become required dependencies.

Reference cells are not seeds: their identity is stable and reading their content
never forces re-evaluation.

The computation is a worklist fixpoint over monotonically growing sets. Each node's
sets only ever gain members from a finite universe, so it terminates; cycles
(mutual recursion) need no special handling beyond re-queuing predecessors.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Set

from hookdeps.analysis.capture_graph import CaptureGraph
from hookdeps.analysis.classifier import is_reactive
from hookdeps.enums import OriginKind

logger = logging.getLogger(__name__)


@dataclass
class Reachability:
  """
  Fixpoint result for one capture graph.
  """

  reactive: Dict[int, FrozenSet[int]] = field(default_factory=dict)
  external: Dict[int, FrozenSet[int]] = field(default_factory=dict)
  iterations: int = 0

  def may_change(self, node_id: int) -> FrozenSet[int]:
    """Reactive node ids reachable from `node_id` (including itself if it is a seed)."""
    return self.reactive.get(node_id, frozenset())

  def untracked(self, node_id: int) -> FrozenSet[int]:
    """`ExternalMutable` binding ids reachable from `node_id`."""
    return self.external.get(node_id, frozenset())

  def is_reactive(self, node_id: int) -> bool:
    return bool(self.may_change(node_id))


class ReachabilityEngine:
  """
  Runs the reachability fixpoint over a capture graph.
  """

  def compute(self, graph: CaptureGraph) -> Reachability:
    """
    Computes reachable reactive and untracked sets for every node.

    Args:
        graph: The capture graph. It is read, never modified.

    Returns:
        The populated `Reachability`.
    """
    reactive: List[Set[int]] = [set() for _ in graph.nodes]
    external: List[Set[int]] = [set() for _ in graph.nodes]
    predecessors: List[List[int]] = [[] for _ in graph.nodes]

    # 1. Seeds
    for node in graph.nodes:
      if node.is_closure:
        if node.closure.reassigned:
          reactive[node.id].add(node.id)
      elif is_reactive(node.origin_kind):
        reactive[node.id].add(node.id)
      elif node.origin_kind == OriginKind.EXTERNAL_MUTABLE:
        external[node.id].add(node.id)

    for source, targets in graph.edges.items():
      for target in targets:
        predecessors[target].append(source)

    # 2. Fixpoint
    worklist = deque(n.id for n in graph.nodes)
    queued = set(worklist)
    iterations = 0

    while worklist:
      node_id = worklist.popleft()
      queued.discard(node_id)
      iterations += 1

      before = (len(reactive[node_id]), len(external[node_id]))
      for target in graph.successors(node_id):
        reactive[node_id] |= reactive[target]
        external[node_id] |= external[target]

      if (len(reactive[node_id]), len(external[node_id])) != before:
        for pred in predecessors[node_id]:
          if pred not in queued:
            worklist.append(pred)
            queued.add(pred)

    logger.debug("Scope '%s': reachability fixpoint after %d visits", graph.scope_id, iterations)

    return Reachability(
      reactive={i: frozenset(s) for i, s in enumerate(reactive)},
      external={i: frozenset(s) for i, s in enumerate(external)},
      iterations=iterations,
    )
