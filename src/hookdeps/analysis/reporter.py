"""
Diagnostics Reporting.

Renders verifier findings as structured results: an `AnalysisResult` model,
a deterministic JSON document, or a Rich table for the CLI.
"""

import json
from typing import Dict, Iterable, List

from rich.markup import escape
from rich.table import Table

from hookdeps.core.model import AnalysisResult, Diagnostic
from hookdeps.enums import Severity

_SEVERITY_STYLE = {
  Severity.ERROR: "bold red",
  Severity.WARNING: "yellow",
  Severity.INFO: "dim cyan",
}

_SEVERITY_ICON = {
  Severity.ERROR: "❌",
  Severity.WARNING: "⚠️ ",
  Severity.INFO: "ℹ️ ",
}


class DiagnosticsReporter:
  """
  Collects and renders diagnostics. Never drops or reorders a finding.
  """

  def collect(self, diagnostics: Iterable[Diagnostic], scopes_analyzed: int = 0) -> AnalysisResult:
    """
    Wraps diagnostics into an `AnalysisResult`.

    Args:
        diagnostics: Findings in analysis order.
        scopes_analyzed: Number of scopes the findings were drawn from.

    Returns:
        The result container.
    """
    return AnalysisResult(diagnostics=list(diagnostics), scopes_analyzed=scopes_analyzed)

  def to_records(self, result: AnalysisResult) -> List[Dict[str, object]]:
    """Serializes diagnostics to plain dictionaries (enum values as strings)."""
    return [d.model_dump(mode="json") for d in result.diagnostics]

  def to_json(self, result: AnalysisResult) -> str:
    """
    Serializes the result as a JSON list.

    Args:
        result: The analysis result.

    Returns:
        JSON text with stable key order and indentation.
    """
    return json.dumps(self.to_records(result), indent=2)

  def summary(self, result: AnalysisResult) -> Dict[str, int]:
    """
    Counts diagnostics per severity.

    Returns:
        Mapping of severity value to count, always containing every severity.
    """
    return {sev.value: result.count(sev) for sev in Severity}

  def render_table(self, result: AnalysisResult, title: str = "Dependency Diagnostics") -> Table:
    """
    Builds a Rich table of the diagnostics.

    Args:
        result: The analysis result.
        title: Table title.

    Returns:
        A `rich.table.Table` ready for `console.print`.
    """
    table = Table(title=title)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Kind", style="cyan")
    table.add_column("Scope", style="bold blue")
    table.add_column("Computation", style="bold magenta")
    table.add_column("Subject", style="bold")
    table.add_column("Rationale", style="dim")

    for diag in result.diagnostics:
      severity = f"[{_SEVERITY_STYLE[diag.severity]}]{_SEVERITY_ICON[diag.severity]} {diag.severity.value}[/]"
      scope = diag.scope_id if not diag.location else f"{diag.scope_id} ({diag.location})"
      table.add_row(
        severity,
        diag.kind.value,
        escape(scope),
        escape(diag.computation or "-"),
        escape(diag.subject_name),
        escape(diag.rationale),
      )

    return table
