"""Dependency graphs: walking, per-platform contexts, and cross-platform merging.

Submodules:
    models    -- Version, VersionRange, PackageDependency, LibraryIdentity,
                 LibraryKind, LibraryDescription
    context   -- ResolutionContext (one frozen graph per platform)
    walker    -- DependencyWalker (breadth-first walk for one platform)
    registry  -- LibraryRegistry (identity -> contexts arena)
"""

from depbundle.core.dependency.context import (
    ResolutionContext,
    format_missing_dependencies,
)
from depbundle.core.dependency.models import (
    LibraryDescription,
    LibraryIdentity,
    LibraryKind,
    PackageDependency,
    Version,
    VersionRange,
)
from depbundle.core.dependency.registry import LibraryRegistry, RegistryEntry
from depbundle.core.dependency.walker import DependencyWalker

__all__ = [
    "DependencyWalker",
    "LibraryDescription",
    "LibraryIdentity",
    "LibraryKind",
    "LibraryRegistry",
    "PackageDependency",
    "RegistryEntry",
    "ResolutionContext",
    "Version",
    "VersionRange",
    "format_missing_dependencies",
]
