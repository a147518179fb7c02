"""
Binding Classification.

This module provides the `BindingClassifier`, the first stage of the pipeline.
It assigns every binding an `OriginKind` from its declaration form and declaring
scope, which is all the analyzer ever needs to know about whether a value may
differ between invocations of a re-invoked scope.

Classification rules:

1.  **State cells** and **parameters** are reactive.
2.  **Reference cells** (and state setters) have invocation-stable identity.
3.  **Module bindings** are `ProcessWideConstant` unless reassigned anywhere, in
    which case they are `ExternalMutable` (reactive but untracked).
4.  **Unresolved** identifiers are reported and treated as reactive.
5.  **Local closures** are `LocalPure` once the reachability fixpoint shows they
    capture nothing reactive; otherwise they inherit reactivity from their captures.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from hookdeps.core.model import Binding
from hookdeps.enums import REACTIVE_ORIGINS, ClosureRole, DeclarationForm, OriginKind

if TYPE_CHECKING:
  from hookdeps.analysis.reachability import Reachability

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnresolvedIssue:
  """
  Record of an identifier with no resolvable declaration.
  """

  name: str
  scope_id: str
  referenced_by: Optional[str] = None


class BindingClassifier:
  """
  Maps declaration forms to origin kinds.

  The classifier is stateless apart from the list of unresolved identifiers it
  has seen, which the engine turns into `UnresolvedBinding` diagnostics.

  Attributes:
      issues (List[UnresolvedIssue]): Unresolved identifiers, in classification order.
  """

  def __init__(self) -> None:
    """Initializes the classifier with no recorded issues."""
    self.issues: List[UnresolvedIssue] = []

  def classify(self, binding: Binding, referenced_by: Optional[str] = None) -> OriginKind:
    """
    Returns the origin kind of a binding.

    Args:
        binding: The binding to classify.
        referenced_by: Name of the closure that led to the lookup (for reporting).

    Returns:
        The `OriginKind` of the binding.
    """
    form = binding.declaration

    if form == DeclarationForm.STATE_CELL:
      return OriginKind.STATE_CELL
    if form in (DeclarationForm.REFERENCE_CELL, DeclarationForm.STATE_SETTER):
      return OriginKind.REFERENCE_CELL
    if form == DeclarationForm.PARAMETER:
      return OriginKind.PARAMETER
    if form == DeclarationForm.MODULE:
      # Reassignment in any branch is enough; no attempt is made to refine.
      return OriginKind.EXTERNAL_MUTABLE if binding.reassigned else OriginKind.PROCESS_WIDE_CONSTANT

    if form == DeclarationForm.LOCAL:
      # Locals are represented by closure nodes; a bare local binding reaching
      # this point has no body we can inspect.
      logger.debug("Local binding '%s' without closure body treated as unresolved", binding.name)

    self.issues.append(UnresolvedIssue(binding.name, binding.declaring_scope_id, referenced_by))
    return OriginKind.UNRESOLVED

  def classify_closure(self, closure_id: int, role: ClosureRole, reachability: "Reachability") -> Optional[OriginKind]:
    """
    Classifies a local closure after the reachability fixpoint.

    Args:
        closure_id: Arena id of the closure node.
        role: The closure's role in its scope.
        reachability: Fixpoint result for the scope.

    Returns:
        `OriginKind.LOCAL_PURE` for a plain closure with no reachable reactive binding,
        otherwise None (the closure inherits reactivity from its captures).
    """
    if role not in (ClosureRole.FUNCTION, ClosureRole.DERIVED):
      return None
    if reachability.is_reactive(closure_id):
      return None
    return OriginKind.LOCAL_PURE


def is_reactive(kind: Optional[OriginKind]) -> bool:
  """
  Checks whether an origin kind seeds reactivity.

  Args:
      kind: Origin kind, or None for closures.

  Returns:
      True for `StateCell`, `Parameter` and `Unresolved`.
  """
  return kind in REACTIVE_ORIGINS
