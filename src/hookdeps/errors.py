"""
Exception hierarchy for hookdeps.

Analysis findings are never raised; they are returned as diagnostics.
Exceptions are reserved for input that cannot be analysed at all.
"""


class HookdepsError(Exception):
  """Base class for all hookdeps errors."""


class InputError(HookdepsError):
  """
  Raised when an input document or source file cannot be turned into scope snapshots.
  """


class GraphError(HookdepsError):
  """
  Raised when a scope snapshot is structurally inconsistent (e.g. two closures share a name).
  """

  def __init__(self, scope_id: str, message: str):
    self.scope_id = scope_id
    super().__init__(f"Scope '{scope_id}': {message}")
