"""Package-content provider boundary.

The engine never fetches packages. It consumes a ``PackageRepository``
that can locate already-available ``PackageContent`` by name and version
range. ``PackageContent`` exposes a package's raw declared data for every
platform it supports; the engine selects per-platform variants itself.

``StaticPackage`` and ``MemoryPackageRepository`` hold everything in memory
and are used when packages are produced by other tooling rather than read
from disk.
"""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from depbundle.core.dependency.models import (
    LibraryIdentity,
    PackageDependency,
    Version,
    VersionRange,
)
from depbundle.core.platform import TargetPlatform, group_by_platform

logger = logging.getLogger(__name__)

LIBRARY_FOLDER = "lib"

PlatformVariants = list[tuple["TargetPlatform | None", list]]


@dataclass(frozen=True)
class FrameworkAssemblyReference:
    """A reference to an assembly supplied by the platform itself.

    Attributes:
        name: Assembly name (e.g. "System.Net.Http").
        supported_platforms: Platforms the reference is declared for. Empty
            means no platform was declared.
    """

    name: str
    supported_platforms: tuple[TargetPlatform, ...] = ()


def assembly_reference_variants(files: Iterable[str]) -> PlatformVariants:
    """Derive assembly-reference variants from package file paths.

    ``lib/<platform>/<file>`` is tagged with the parsed platform folder;
    ``lib/<file>`` is untagged. Deeper paths and files outside ``lib/``
    are not assembly references. Folder names that do not parse as a
    platform are kept as opaque tags.
    """
    items: list[tuple[TargetPlatform | None, str]] = []
    for path in files:
        parts = path.replace("\\", "/").split("/")
        if not parts or parts[0].lower() != LIBRARY_FOLDER:
            continue
        if len(parts) == 2:
            items.append((None, path))
        elif len(parts) == 3:
            try:
                tag = TargetPlatform.parse(parts[1])
            except ValueError:
                logger.debug("Unrecognized platform folder %r in %s", parts[1], path)
                tag = TargetPlatform(parts[1])
            items.append((tag, path))
    return group_by_platform(items)


def framework_assembly_variants(
    references: Iterable[FrameworkAssemblyReference],
) -> PlatformVariants:
    """Group framework assembly references by each declared platform.

    A reference declared for several platforms appears in each of their
    groups; references declaring none form the untagged group.
    """
    items: list[tuple[TargetPlatform | None, FrameworkAssemblyReference]] = []
    for ref in references:
        if not ref.supported_platforms:
            items.append((None, ref))
        for platform in ref.supported_platforms:
            items.append((platform, ref))
    return group_by_platform(items)


# ---------------------------------------------------------------------------
# PackageContent
# ---------------------------------------------------------------------------


class PackageContent(ABC):
    """Read-only view of one package's content and declared metadata."""

    @property
    @abstractmethod
    def identity(self) -> LibraryIdentity:
        """The package's (name, version)."""

    @abstractmethod
    def get_files(self) -> list[str]:
        """Every file path contained in the package, verbatim."""

    @abstractmethod
    def open_content_stream(self) -> BinaryIO:
        """Open the package's raw bytes for hashing or copying."""

    @abstractmethod
    def get_dependency_set_variants(self) -> PlatformVariants:
        """``[(platform | None, [PackageDependency])]`` in declaration order."""

    @abstractmethod
    def get_framework_assembly_variants(self) -> PlatformVariants:
        """``[(platform | None, [FrameworkAssemblyReference])]``."""

    @abstractmethod
    def get_assembly_reference_variants(self) -> PlatformVariants:
        """``[(platform | None, [path])]`` of assembly files."""

    @abstractmethod
    def get_named_reference_set_variants(self) -> PlatformVariants:
        """``[(platform | None, [assembly file name])]`` reference restrictions."""

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def version(self) -> Version | None:
        return self.identity.version


@dataclass
class StaticPackage(PackageContent):
    """A package whose content and metadata are held in memory.

    Attributes:
        package_identity: The package's identity.
        files: File paths contained in the package.
        content: Raw package bytes (what gets hashed).
        dependency_sets: Dependency-set variants.
        framework_assemblies: Framework assembly references.
        reference_sets: Named reference-set variants.
    """

    package_identity: LibraryIdentity
    files: list[str] = field(default_factory=list)
    content: bytes = b""
    dependency_sets: list[tuple[TargetPlatform | None, list[PackageDependency]]] = field(
        default_factory=list
    )
    framework_assemblies: list[FrameworkAssemblyReference] = field(default_factory=list)
    reference_sets: list[tuple[TargetPlatform | None, list[str]]] = field(
        default_factory=list
    )

    @property
    def identity(self) -> LibraryIdentity:
        return self.package_identity

    def get_files(self) -> list[str]:
        return list(self.files)

    def open_content_stream(self) -> BinaryIO:
        return io.BytesIO(self.content)

    def get_dependency_set_variants(self) -> PlatformVariants:
        return [(tag, list(deps)) for tag, deps in self.dependency_sets]

    def get_framework_assembly_variants(self) -> PlatformVariants:
        return framework_assembly_variants(self.framework_assemblies)

    def get_assembly_reference_variants(self) -> PlatformVariants:
        return assembly_reference_variants(self.files)

    def get_named_reference_set_variants(self) -> PlatformVariants:
        return [(tag, list(names)) for tag, names in self.reference_sets]


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class PackageRepository(ABC):
    """Locates package content by name and version range."""

    @property
    def root(self) -> Path | None:
        """Filesystem root of the repository, if it has one."""
        return None

    @abstractmethod
    def versions(self, name: str) -> list[Version]:
        """All available versions of *name*, ascending."""

    @abstractmethod
    def load(self, name: str, version: Version) -> PackageContent | None:
        """Load a specific package version, or None if absent."""

    def find(self, name: str, version_range: VersionRange) -> PackageContent | None:
        """Return the lowest available version satisfying *version_range*."""
        for version in self.versions(name):
            if version_range.satisfies(version):
                return self.load(name, version)
        return None


class MemoryPackageRepository(PackageRepository):
    """A repository over in-memory ``PackageContent`` objects.

    Thread safety: lookups are read-only after construction and may be
    shared across concurrent walks.
    """

    def __init__(self, packages: Iterable[PackageContent] = ()) -> None:
        self._packages: dict[str, dict[Version, PackageContent]] = {}
        for package in packages:
            self.add(package)

    def add(self, package: PackageContent) -> None:
        if package.version is None:
            raise ValueError(f"Package {package.name!r} has no version")
        self._packages.setdefault(package.name.lower(), {})[package.version] = package

    def versions(self, name: str) -> list[Version]:
        return sorted(self._packages.get(name.lower(), {}))

    def load(self, name: str, version: Version) -> PackageContent | None:
        return self._packages.get(name.lower(), {}).get(version)
