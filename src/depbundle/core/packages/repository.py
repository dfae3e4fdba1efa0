"""Filesystem package repository.

Layout::

    <root>/<name>/<version>/<name>.<version>.pkg

Version directories whose names do not parse are skipped with a warning.
Loaded packages are cached; the cache is guarded by a lock so one
repository can serve concurrent walks.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from depbundle.core.dependency.models import Version
from depbundle.core.packages.archive import ArchivePackage, archive_file_name
from depbundle.core.packages.base import PackageContent, PackageRepository

logger = logging.getLogger(__name__)


class DirectoryPackageRepository(PackageRepository):
    """Locate ``ArchivePackage`` files under a packages root directory."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)
        self._cache: dict[tuple[str, Version], PackageContent | None] = {}
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    def _package_dir(self, name: str) -> Path | None:
        direct = self._root / name
        if direct.is_dir():
            return direct
        if not self._root.is_dir():
            return None
        lowered = name.lower()
        for child in sorted(self._root.iterdir()):
            if child.is_dir() and child.name.lower() == lowered:
                return child
        return None

    def versions(self, name: str) -> list[Version]:
        package_dir = self._package_dir(name)
        if package_dir is None:
            return []
        found: list[Version] = []
        for child in package_dir.iterdir():
            if not child.is_dir():
                continue
            try:
                found.append(Version(child.name))
            except ValueError:
                logger.warning("Skipping non-version directory: %s", child)
        return sorted(found)

    def load(self, name: str, version: Version) -> PackageContent | None:
        key = (name.lower(), version)
        with self._lock:
            if key in self._cache:
                return self._cache[key]

        package: PackageContent | None = None
        package_dir = self._package_dir(name)
        if package_dir is not None:
            version_dir = self._find_version_dir(package_dir, version)
            if version_dir is not None:
                archive = version_dir / archive_file_name(package_dir.name, version_dir.name)
                if archive.is_file():
                    package = ArchivePackage(archive)
                else:
                    logger.warning("Package directory without archive: %s", version_dir)

        with self._lock:
            self._cache[key] = package
        return package

    @staticmethod
    def _find_version_dir(package_dir: Path, version: Version) -> Path | None:
        for child in package_dir.iterdir():
            if not child.is_dir():
                continue
            try:
                if Version(child.name) == version:
                    return child
            except ValueError:
                continue
        return None
