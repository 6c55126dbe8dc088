"""
lint-overlay: mypy as a graph-visitor overlay on build targets.

The package describes type-check actions per target and leaves their
execution to a host. Keep import time light: submodules are imported on use.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
