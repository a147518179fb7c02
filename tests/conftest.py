"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Console isolation so CLI output can be inspected and never mixes with JSON on stdout.
"""

import sys
from pathlib import Path

import pytest

# Add src to path so we can import 'hookdeps' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from hookdeps.utils.console import make_capture_console, reset_console, set_console


@pytest.fixture(autouse=True)
def capture_console():
  """
  Routes Rich output and logging to an in-memory console for every test.

  Yields:
      The recording Console; call ``export_text()`` to read what was printed.
  """
  recorder = make_capture_console()
  set_console(recorder)
  yield recorder
  reset_console()


