"""
Explain Command Handler.

Prints what a finding kind means and how to resolve it.
"""

from typing import Dict

from rich.panel import Panel

from hookdeps.enums import FindingKind
from hookdeps.utils.console import console, log_error

FINDING_DESCRIPTIONS: Dict[FindingKind, str] = {
  FindingKind.NO_DEPENDENCY_LIST: (
    "A memoized computation was declared without a dependency list. It is recomputed on every "
    "invocation of the enclosing scope, so the memoization has no effect. Add the list of values "
    "the computation reads."
  ),
  FindingKind.MISSING_DEPENDENCY: (
    "A memoized computation or effect reads a value that may differ on every invocation (state, "
    "parameters, or a closure that reads them) but does not list it. The cached result will keep "
    "using the stale value. Add the name to the dependency list."
  ),
  FindingKind.UNNECESSARY_DEPENDENCY: (
    "A memoized computation lists a value that can never change between invocations (a reference "
    "cell, a state setter, a module constant, or a closure that reads only such values). Remove it "
    "from the dependency list."
  ),
  FindingKind.REDUNDANT_MEMOIZATION: (
    "Every dependency of a memoized computation is a local function or object recreated on each "
    "invocation, so the key changes every time and the cache never hits. Memoize those values or move "
    "them inside the computation."
  ),
  FindingKind.UNRESOLVED_BINDING: (
    "A name read by a closure has no declaration the analyzer can resolve. It is treated as "
    "reactive, so dependency lists are checked conservatively."
  ),
  FindingKind.DUPLICATE_DEPENDENCY: "The same entry appears more than once in a dependency list.",
  FindingKind.UNSTABLE_EFFECT_DEPENDENCY: (
    "An effect lists a local function or object that is recreated on every invocation, so the "
    "effect runs every time without any change in application state. Memoize the value or move it "
    "inside the effect."
  ),
  FindingKind.UNTRACKED_EXTERNAL_MUTATION: (
    "A computation reads a module-level binding that is reassigned outside any invocation. Changes "
    "to it never trigger recomputation and listing it does not help. Move the value into state or "
    "a reference cell."
  ),
}


def handle_explain(kind: str) -> int:
  """
  Prints the description of a finding kind.

  Args:
      kind: The finding kind value (e.g. ``MissingDependency``).

  Returns:
      int: 0 on success, 1 if the kind is unknown.
  """
  try:
    finding = FindingKind(kind)
  except ValueError:
    log_error(f"Unknown finding kind: {kind}")
    return 1

  console.print(Panel(FINDING_DESCRIPTIONS[finding], title=finding.value, expand=False))
  return 0
