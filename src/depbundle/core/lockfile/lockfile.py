"""Lockfile core class --- library management, integrity, and serialization.

The ``Lockfile`` class is the central data structure representing a
``project.lock.json`` file. It provides:

- **Library management:** add, get, count, and list libraries.
- **Integrity:** SHA-512 content hashing and verification.
- **Serialization:** deterministic ``to_dict``, ``to_json``, and ``write``.

Determinism guarantee: ``to_json()`` and ``to_dict()`` produce deterministic
output --- libraries are ordered by name then version, dictionary keys are
sorted, and no timestamps are embedded. Two lockfiles with the same content
always produce byte-identical JSON.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any, BinaryIO

from depbundle.core.dependency.models import Version
from depbundle.core.lockfile.integrity import compute_sha
from depbundle.core.lockfile.models import LockFileLibrary

LOCKFILE_NAME = "project.lock.json"


def _library_sort_key(key: tuple[str, str]) -> tuple[str, Any, str]:
    name, version = key
    try:
        parsed: Any = Version(version)._key()
    except ValueError:
        parsed = ()
    return (name.lower(), parsed, version)


class Lockfile:
    """Project lockfile --- the deterministic record of a bundle's packages.

    Holds one ``LockFileLibrary`` per (name, version), each with its
    content hash, file list, and one framework group per platform it was
    resolved for.

    Example::

        lf = Lockfile(builder.build(registry))
        lf.write(Path("project.lock.json"))
    """

    LOCKFILE_VERSION: int = 1
    GENERATED_BY: str = "depbundle"

    def __init__(self, libraries: Iterable[LockFileLibrary] = ()) -> None:
        self._libraries: dict[tuple[str, str], LockFileLibrary] = {}
        for library in libraries:
            self.add_library(library)

    # -- Library management -------------------------------------------------

    def add_library(self, library: LockFileLibrary) -> None:
        """Add a library entry, replacing any entry with the same (name, version)."""
        self._libraries[library.key] = library

    def get_library(self, name: str, version: str | None = None) -> LockFileLibrary | None:
        """Retrieve a library by name and, optionally, version.

        Without a version, the lowest-sorting version of *name* is returned.
        """
        if version is not None:
            return self._libraries.get((name, version))
        for key in sorted(self._libraries, key=_library_sort_key):
            if key[0] == name:
                return self._libraries[key]
        return None

    @property
    def library_count(self) -> int:
        return len(self._libraries)

    @property
    def libraries(self) -> list[LockFileLibrary]:
        """Libraries ordered by name then version."""
        return [
            self._libraries[key]
            for key in sorted(self._libraries, key=_library_sort_key)
        ]

    # -- Integrity ----------------------------------------------------------

    @staticmethod
    def compute_integrity(stream: BinaryIO) -> str:
        """Compute the base64 SHA-512 of a package content stream."""
        return compute_sha(stream)

    def verify_integrity(self, name: str, version: str, stream: BinaryIO) -> bool:
        """Check package content against its lockfile hash.

        Returns:
            True if the computed hash matches the entry; False if the entry
            is missing or the hash differs.
        """
        library = self._libraries.get((name, version))
        if library is None:
            return False
        return compute_sha(stream) == library.sha

    # -- Serialization ------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dict matching the lockfile schema."""
        return {
            "lockfile_version": self.LOCKFILE_VERSION,
            "generated_by": self.GENERATED_BY,
            "libraries": [lib.to_dict() for lib in self.libraries],
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to a deterministic JSON string."""
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True) + "\n"

    def write(self, path: Path) -> None:
        """Write the lockfile to disk, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(), encoding="utf-8")
