"""
Verify Command Handler.

Analyzes a reference-resolved JSON scope document produced by an external
frontend.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError
from rich.markup import escape

from hookdeps.cli.handlers.output import EXIT_UNREADABLE, emit_result
from hookdeps.config import AnalyzerConfig
from hookdeps.core.engine import AnalysisEngine
from hookdeps.errors import HookdepsError
from hookdeps.frontends.json_loader import load_document
from hookdeps.utils.console import log_error


def handle_verify(
  document: Path,
  json_mode: bool = False,
  strict: Optional[bool] = None,
  settings: Optional[Dict[str, Any]] = None,
) -> int:
  """
  Verifies the scopes of a JSON document.

  Args:
      document: Path to the JSON document.
      json_mode: If True, output JSON to stdout.
      strict: Strict override.
      settings: ``--config`` overrides.

  Returns:
      int: Exit code.
  """
  try:
    config = AnalyzerConfig.load(strict=strict, overrides=settings, search_path=document.parent)
  except ValidationError as e:
    log_error(f"Invalid configuration: {escape(str(e))}")
    return EXIT_UNREADABLE

  try:
    scopes = load_document(document)
    result = AnalysisEngine(config).analyze(scopes)
  except HookdepsError as e:
    log_error(escape(str(e)))
    return EXIT_UNREADABLE

  return emit_result(result, json_mode=json_mode, strict=config.strict)
