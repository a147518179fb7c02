"""
Entry point for module execution (``python -m hookdeps``).

This module delegates execution to the CLI handler in ``hookdeps.cli.__main__``.
"""

import sys
from hookdeps.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
