"""Project Lockfile --- Reproducible, Auditable Bundles.

This package implements the ``project.lock.json`` lockfile format. The
lockfile captures every resolved package of a bundle run: its version,
content integrity hash, file list, and, per target platform, the selected
dependencies and assemblies.

The package is split into focused submodules:

- ``models``: Data classes (``LockFileLibrary``, ``LockFileFrameworkGroup``).
- ``integrity``: Streaming SHA-512 hashing.
- ``lockfile``: The ``Lockfile`` class with library management, integrity
  verification, and deterministic serialization.
- ``operations``: Deserialization (``from_dict``, ``from_json``, ``read``),
  validation, and diffing.
- ``builder``: ``LockFileBuilder``, which turns a merged library registry
  into lockfile entries.

All public names are re-exported here so that imports like
``from depbundle.core.lockfile import Lockfile`` work.
"""

from depbundle.core.lockfile.builder import (
    LIBRARY_EXTENSION,
    LockFileBuilder,
    contract_path,
)
from depbundle.core.lockfile.integrity import compute_sha, compute_sha_bytes
from depbundle.core.lockfile.lockfile import LOCKFILE_NAME, Lockfile
from depbundle.core.lockfile.models import LockFileFrameworkGroup, LockFileLibrary

# Attach operations to Lockfile as methods/classmethods
from depbundle.core.lockfile import operations as _ops

Lockfile.from_dict = classmethod(_ops._from_dict)
Lockfile.from_json = classmethod(_ops._from_json)
Lockfile.read = classmethod(_ops._read)
Lockfile.validate = _ops._validate
Lockfile.diff = _ops._diff

__all__ = [
    "LIBRARY_EXTENSION",
    "LOCKFILE_NAME",
    "LockFileBuilder",
    "LockFileFrameworkGroup",
    "LockFileLibrary",
    "Lockfile",
    "compute_sha",
    "compute_sha_bytes",
    "contract_path",
]
