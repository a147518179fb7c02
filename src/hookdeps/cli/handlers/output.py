"""
Shared Result Output.

Prints an `AnalysisResult` either as a Rich table with a summary line, or as
pure JSON on stdout, and maps it to the process exit code.
"""

from typing import Optional

from hookdeps.analysis.reporter import DiagnosticsReporter
from hookdeps.core.model import AnalysisResult
from hookdeps.enums import Severity
from hookdeps.utils.console import console, log_info, log_success, log_warning

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_UNREADABLE = 2


def exit_code_for(result: AnalysisResult, strict: bool = False) -> int:
  """
  Maps diagnostics to an exit code.

  Args:
      result: The analysis result.
      strict: If True, warnings fail as well.

  Returns:
      int: 1 if any error (or warning under strict) exists, else 0.
  """
  if result.has_errors:
    return EXIT_FINDINGS
  if strict and result.count(Severity.WARNING) > 0:
    return EXIT_FINDINGS
  return EXIT_OK


def emit_result(
  result: AnalysisResult,
  json_mode: bool = False,
  strict: bool = False,
  reporter: Optional[DiagnosticsReporter] = None,
) -> int:
  """
  Prints the result and computes the exit code.

  Args:
      result: The analysis result.
      json_mode: If True, output JSON to stdout and suppress Rich output.
      strict: Strict exit code policy.
      reporter: Reporter used for rendering.

  Returns:
      int: Exit code.
  """
  reporter = reporter or DiagnosticsReporter()

  if json_mode:
    # Pure JSON on stdout for piping.
    print(reporter.to_json(result))
    return exit_code_for(result, strict)

  if result.diagnostics:
    console.print(reporter.render_table(result))

  counts = reporter.summary(result)
  summary = (
    f"{result.scopes_analyzed} scopes analyzed: "
    f"{counts['error']} errors, {counts['warning']} warnings, {counts['info']} info"
  )

  code = exit_code_for(result, strict)
  if code != EXIT_OK:
    log_warning(summary)
  elif result.diagnostics:
    log_info(summary)
  else:
    log_success(summary)
  return code
