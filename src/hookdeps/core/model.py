"""
Boundary Data Model.

This module defines the Pydantic models exchanged at the edges of the analyzer:

1.  **Input**: `Binding`, `Closure` and `ScopeSnapshot` describe one re-invoked scope
    after reference resolution. Frontends (JSON documents, Python source) produce them.
2.  **Output**: `Diagnostic` and `AnalysisResult` carry the verifier's findings.

The analysis stages never mutate these objects. Internally they are lowered into the
integer-indexed `CaptureGraph` (see `hookdeps.analysis.capture_graph`).
"""

from collections import Counter
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from hookdeps.enums import ClosureRole, DeclarationForm, FindingKind, Severity


def root_identifier(expression: str) -> str:
  """
  Returns the leading identifier of a dependency expression.

  Args:
      expression: A dependency entry such as ``ref.current`` or ``props["x"]``.

  Returns:
      The root name (``ref``, ``props``).
  """
  text = expression.strip()
  for i, ch in enumerate(text):
    if ch in ".[(":
      return text[:i].strip()
  return text


class Binding(BaseModel):
  """
  An identifier visible in a re-invoked scope.
  """

  model_config = ConfigDict(frozen=True)

  name: str = Field(..., description="The identifier.")
  declaration: DeclarationForm = Field(..., description="How the binding is introduced.")
  declaring_scope_id: str = Field("<module>", description="Scope that owns the declaration.")
  reassigned: bool = Field(False, description="True if assigned anywhere besides its declaration.")
  captures: List[str] = Field(
    default_factory=list,
    description="Module-level names read by a module-level function binding.",
  )


class Closure(BaseModel):
  """
  A function or value created inside a re-invoked scope.
  """

  model_config = ConfigDict(frozen=True)

  name: str = Field(..., description="Name the closure is bound to in its scope.")
  role: ClosureRole = Field(ClosureRole.FUNCTION, description="Plain, derived, memoized or effect.")
  free_names: List[str] = Field(default_factory=list, description="Free identifiers of the body.")
  declared_dependencies: Optional[List[str]] = Field(
    None,
    description="Declared dependency expressions, or None when the list is omitted.",
  )
  reassigned: bool = Field(False, description="True if rebound after its declaration (e.g. nonlocal).")
  fresh_object: bool = Field(
    False,
    description="True for a derived value built by a call or literal, a new object on every invocation.",
  )
  location: Optional[str] = Field(None, description="Source position ('file:line') if known.")

  @property
  def is_memoized(self) -> bool:
    """True for memoized computations."""
    return self.role == ClosureRole.MEMOIZED

  @property
  def is_effect(self) -> bool:
    """True for effect scopes."""
    return self.role == ClosureRole.EFFECT

  @property
  def is_checked(self) -> bool:
    """True if the closure carries a dependency list subject to verification."""
    return self.role in (ClosureRole.MEMOIZED, ClosureRole.EFFECT)


class ScopeSnapshot(BaseModel):
  """
  Static snapshot of one re-invoked scope and everything visible from it.
  """

  id: str = Field(..., description="Unique scope identifier.")
  bindings: List[Binding] = Field(default_factory=list)
  closures: List[Closure] = Field(default_factory=list)
  source: Optional[str] = Field(None, description="Originating file, if any.")


class AnalysisInput(BaseModel):
  """
  Top-level document accepted by the JSON frontend.
  """

  scopes: List[ScopeSnapshot] = Field(default_factory=list)


class Diagnostic(BaseModel):
  """
  A single finding about one scope.
  """

  model_config = ConfigDict(frozen=True)

  kind: FindingKind
  severity: Severity
  subject_name: str = Field(..., description="The dependency, binding or computation concerned.")
  scope_id: str
  rationale: str = Field(..., description="Human readable explanation.")
  computation: Optional[str] = Field(None, description="Memoized computation or effect the finding belongs to.")
  location: Optional[str] = Field(None, description="Source position of the computation.")


class AnalysisResult(BaseModel):
  """
  Ordered diagnostics of one analyzer run.
  """

  diagnostics: List[Diagnostic] = Field(default_factory=list)
  scopes_analyzed: int = 0

  @property
  def has_errors(self) -> bool:
    """
    Check whether any finding is fatal.

    Returns:
        True if at least one diagnostic has `Severity.ERROR`.
    """
    return any(d.severity == Severity.ERROR for d in self.diagnostics)

  def count(self, severity: Severity) -> int:
    """Number of diagnostics with the given severity."""
    return sum(1 for d in self.diagnostics if d.severity == severity)

  def kinds(self) -> Dict[FindingKind, int]:
    """Histogram of finding kinds."""
    return dict(Counter(d.kind for d in self.diagnostics))

  def by_scope(self) -> Dict[str, List[Diagnostic]]:
    """
    Groups diagnostics by scope, preserving order.

    Returns:
        Mapping of scope id to its diagnostics.
    """
    grouped: Dict[str, List[Diagnostic]] = {}
    for diag in self.diagnostics:
      grouped.setdefault(diag.scope_id, []).append(diag)
    return grouped
