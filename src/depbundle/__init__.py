"""depbundle: Multi-platform dependency resolution, lock files, and bundles."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
