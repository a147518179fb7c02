"""
Main Entry Point for the hookdeps CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `hookdeps.cli.commands`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from hookdeps.config import parse_cli_key_values
from hookdeps.cli import commands
from hookdeps.enums import FindingKind
from hookdeps import __version__


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 clean, 1 findings above threshold, 2 unreadable input).
  """
  parser = argparse.ArgumentParser(description="hookdeps: Dependency list checker for hooks-style scopes")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: CHECK ---
  cmd_check = subparsers.add_parser("check", help="Analyze Python components and hooks")
  cmd_check.add_argument("path", type=Path, help="Input source file or directory")
  cmd_check.add_argument("--json", action="store_true", help="Print diagnostics as JSON to stdout")
  cmd_check.add_argument(
    "--strict",
    action="store_true",
    default=None,
    help="Fail on warnings as well as errors (Overrides config)",
  )
  cmd_check.add_argument(
    "--config",
    nargs="*",
    help="Analyzer settings in key=value format (e.g. external_mutation_severity=warning)",
  )

  # --- Command: VERIFY ---
  cmd_verify = subparsers.add_parser("verify", help="Analyze a JSON scope document")
  cmd_verify.add_argument("document", type=Path, help="Path to the JSON document")
  cmd_verify.add_argument("--json", action="store_true", help="Print diagnostics as JSON to stdout")
  cmd_verify.add_argument(
    "--strict",
    action="store_true",
    default=None,
    help="Fail on warnings as well as errors (Overrides config)",
  )
  cmd_verify.add_argument(
    "--config",
    nargs="*",
    help="Analyzer settings in key=value format",
  )

  # --- Command: EXPLAIN ---
  cmd_explain = subparsers.add_parser("explain", help="Describe a finding kind")
  cmd_explain.add_argument("kind", choices=[k.value for k in FindingKind], help="Finding kind")

  args = parser.parse_args(argv)

  if args.command == "check":
    settings = parse_cli_key_values(args.config)
    return commands.handle_check(args.path, args.json, args.strict, settings)

  elif args.command == "verify":
    settings = parse_cli_key_values(args.config)
    return commands.handle_verify(args.document, args.json, args.strict, settings)

  elif args.command == "explain":
    return commands.handle_explain(args.kind)

  return 0


if __name__ == "__main__":
  sys.exit(main())
