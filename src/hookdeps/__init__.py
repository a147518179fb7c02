"""
hookdeps Package.

A static analyzer for the dependency lists of memoized computations and effects
inside repeatedly re-invoked scopes (components and hooks). It reports declared
dependency lists that are unsound (a value that may change is missing) or not
minimal (a value that can never change is listed).

Usage
-----

Python Source
^^^^^^^^^^^^^

.. code-block:: python

    import hookdeps
    result = hookdeps.check_source(code)
    for diag in result.diagnostics:
        print(diag.kind.value, diag.subject_name, diag.rationale)

Reference Graph (AST-free)
^^^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from hookdeps import AnalysisEngine, ScopeSnapshot, Binding, Closure

    scope = ScopeSnapshot(
        id="Counter",
        bindings=[Binding(name="count", declaration="state_cell")],
        closures=[Closure(name="label", role="memoized", free_names=["count"], declared_dependencies=[])],
    )
    result = AnalysisEngine().analyze([scope])
"""

from typing import Optional

from hookdeps.config import AnalyzerConfig
from hookdeps.core.engine import AnalysisEngine, analyze
from hookdeps.core.model import AnalysisResult, Binding, Closure, Diagnostic, ScopeSnapshot
from hookdeps.enums import ClosureRole, DeclarationForm, FindingKind, OriginKind, Severity
from hookdeps.frontends.python_hooks import PythonHooksFrontend

__version__ = "0.1.0"


def check_source(code: str, filename: str = "<string>", config: Optional[AnalyzerConfig] = None) -> AnalysisResult:
  """
  Analyzes Python hooks source code.

  Args:
      code (str): Python source containing components or custom hooks.
      filename (str): Name used in locations.
      config (AnalyzerConfig, optional): Analyzer configuration.

  Returns:
      AnalysisResult: Diagnostics for every component and hook in the source.

  Raises:
      InputError: If the source cannot be parsed.
  """
  config = config or AnalyzerConfig()
  scopes = PythonHooksFrontend(config).extract(code, filename=filename)
  return AnalysisEngine(config).analyze(scopes)


__all__ = [
  "AnalysisEngine",
  "AnalysisResult",
  "AnalyzerConfig",
  "Binding",
  "Closure",
  "ClosureRole",
  "DeclarationForm",
  "Diagnostic",
  "FindingKind",
  "OriginKind",
  "PythonHooksFrontend",
  "ScopeSnapshot",
  "Severity",
  "__version__",
  "analyze",
  "check_source",
]
