"""Package-content providers.

Submodules:
    base        -- PackageContent / PackageRepository interfaces, in-memory implementations
    archive     -- ArchivePackage: zip archive with a package.yaml manifest
    repository  -- DirectoryPackageRepository over ``<root>/<name>/<version>/``
"""

from depbundle.core.packages.archive import ArchivePackage, archive_file_name
from depbundle.core.packages.base import (
    FrameworkAssemblyReference,
    MemoryPackageRepository,
    PackageContent,
    PackageRepository,
    StaticPackage,
)
from depbundle.core.packages.repository import DirectoryPackageRepository

__all__ = [
    "ArchivePackage",
    "DirectoryPackageRepository",
    "FrameworkAssemblyReference",
    "MemoryPackageRepository",
    "PackageContent",
    "PackageRepository",
    "StaticPackage",
    "archive_file_name",
]
