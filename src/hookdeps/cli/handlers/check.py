"""
Check Command Handler.

Runs the Python hooks frontend over a file or a directory tree and verifies
every component and custom hook it finds.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from rich.markup import escape

from hookdeps.cli.handlers.output import EXIT_UNREADABLE, emit_result
from hookdeps.config import AnalyzerConfig
from hookdeps.core.engine import AnalysisEngine
from hookdeps.core.model import ScopeSnapshot
from hookdeps.errors import HookdepsError
from hookdeps.frontends.python_hooks import PythonHooksFrontend
from hookdeps.utils.console import log_error, log_info


def handle_check(
  path: Path,
  json_mode: bool = False,
  strict: Optional[bool] = None,
  settings: Optional[Dict[str, Any]] = None,
) -> int:
  """
  Analyzes Python sources.

  Args:
      path: Input source file or directory.
      json_mode: If True, output JSON to stdout and suppress Rich logs.
      strict: Strict override (None keeps the configured value).
      settings: ``--config`` overrides.

  Returns:
      int: Exit code (0 clean, 1 findings, 2 unreadable input).
  """
  if not path.exists():
    log_error(f"Path not found: {path}")
    return EXIT_UNREADABLE

  search_dir = path if path.is_dir() else path.parent
  try:
    config = AnalyzerConfig.load(strict=strict, overrides=settings, search_path=search_dir)
  except ValidationError as e:
    log_error(f"Invalid configuration: {escape(str(e))}")
    return EXIT_UNREADABLE

  files = [path] if path.is_file() else sorted(path.rglob("*.py"))
  if not json_mode:
    log_info(f"Checking {len(files)} files...")

  frontend = PythonHooksFrontend(config)
  scopes: List[ScopeSnapshot] = []
  failed = 0

  for f in files:
    try:
      scopes.extend(frontend.extract_file(f))
    except HookdepsError as e:
      # Parse failures are reported even in JSON mode.
      log_error(escape(str(e)))
      failed += 1

  try:
    result = AnalysisEngine(config).analyze(scopes)
  except HookdepsError as e:
    log_error(escape(str(e)))
    return EXIT_UNREADABLE

  code = emit_result(result, json_mode=json_mode, strict=config.strict)
  return EXIT_UNREADABLE if failed else code
