"""Package entry point.

This module enables running the project with:

    python -m servedir [options] [file]
"""

from __future__ import annotations

import sys

from servedir.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
