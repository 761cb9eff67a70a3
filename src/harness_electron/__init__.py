"""harness-electron: a single-shot CLI that drives Electron windows over CDP."""

import logging

__version__ = "0.1.0"

PACKAGE_NAME = "harness-electron"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["PACKAGE_NAME", "__version__"]
