"""Allow ``python -m harness_electron``."""

import sys

from harness_electron.cli import main

if __name__ == "__main__":
    sys.exit(main())
