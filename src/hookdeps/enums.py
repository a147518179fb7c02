"""
Enumerations for hookdeps.

This module defines the vocabulary shared by every analysis stage: how a
binding was declared, which origin kind it was classified as, the role a
closure plays inside its re-invoked scope, and the kinds and severities of
the findings the verifier produces.
"""

from enum import Enum


class DeclarationForm(str, Enum):
  """
  Syntactic origin of a binding, as reported by a frontend.

  The classifier maps each form (plus the reassignment flag) to an `OriginKind`.
  """

  STATE_CELL = "state_cell"  # x = use_state(...)
  STATE_SETTER = "state_setter"  # setter half of a state-cell constructor
  REFERENCE_CELL = "reference_cell"  # r = use_ref(...)
  PARAMETER = "parameter"
  MODULE = "module"  # module/process scope
  LOCAL = "local"  # plain local, represented by a closure node
  UNRESOLVED = "unresolved"


class OriginKind(str, Enum):
  """
  Classification of a binding by where (not how) it is declared.
  """

  STATE_CELL = "StateCell"
  REFERENCE_CELL = "ReferenceCell"
  PARAMETER = "Parameter"
  PROCESS_WIDE_CONSTANT = "ProcessWideConstant"
  EXTERNAL_MUTABLE = "ExternalMutable"
  LOCAL_PURE = "LocalPure"
  UNRESOLVED = "Unresolved"  # no declaration found, treated as reactive


class ClosureRole(str, Enum):
  """
  Role of a closure node in its re-invoked scope.
  """

  FUNCTION = "function"
  DERIVED = "derived"
  MEMOIZED = "memoized"
  EFFECT = "effect"


class FindingKind(str, Enum):
  """
  Kinds of diagnostics emitted by the verifier and the engine.
  """

  MISSING_DEPENDENCY = "MissingDependency"
  UNNECESSARY_DEPENDENCY = "UnnecessaryDependency"
  REDUNDANT_MEMOIZATION = "RedundantMemoization"
  NO_DEPENDENCY_LIST = "NoDependencyList"
  UNTRACKED_EXTERNAL_MUTATION = "UntrackedExternalMutation"
  UNRESOLVED_BINDING = "UnresolvedBinding"
  DUPLICATE_DEPENDENCY = "DuplicateDependency"
  UNSTABLE_EFFECT_DEPENDENCY = "UnstableEffectDependency"


class Severity(str, Enum):
  """
  Diagnostic severity. Ordered from most to least severe.
  """

  ERROR = "error"
  WARNING = "warning"
  INFO = "info"

  @property
  def rank(self) -> int:
    """Sort rank, 0 being the most severe."""
    return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}

REACTIVE_ORIGINS = frozenset({OriginKind.STATE_CELL, OriginKind.PARAMETER, OriginKind.UNRESOLVED})
"""Origin kinds whose value may differ between invocations of the owning scope."""
