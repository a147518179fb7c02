"""
CLI Command Handlers Facade.

Re-exports handlers from `hookdeps.cli.handlers` so that the dispatcher and
tests have a single import point.
"""

from hookdeps.cli.handlers.check import handle_check
from hookdeps.cli.handlers.verify import handle_verify
from hookdeps.cli.handlers.explain import handle_explain, FINDING_DESCRIPTIONS
from hookdeps.cli.handlers.output import emit_result, exit_code_for

__all__ = [
  "handle_check",
  "handle_verify",
  "handle_explain",
  "FINDING_DESCRIPTIONS",
  "emit_result",
  "exit_code_for",
]
