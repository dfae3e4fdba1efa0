"""Resolution contexts: one frozen dependency graph per target platform."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from depbundle.core.dependency.models import (
    LibraryDescription,
    LibraryIdentity,
    LibraryKind,
)
from depbundle.core.platform import TargetPlatform


def format_missing_dependencies(
    unresolved: list[LibraryDescription], platform: TargetPlatform
) -> str:
    """Format unresolved nodes as one multi-line report message."""
    lines = [f"Unable to locate the following dependencies for {platform}:"]
    for library in unresolved:
        requested = library.requested
        lines.append(f"    {requested if requested is not None else library.identity}")
    return "\n".join(lines)


@dataclass(frozen=True, eq=False)
class ResolutionContext:
    """The complete dependency graph computed for one target platform.

    Created once per platform per bundle run by ``DependencyWalker.walk``
    and immutable afterwards; safe to hand between threads.

    Attributes:
        platform: The platform the graph was computed for.
        root: Identity of the walk's root.
        libraries: Identity -> node, in discovery (breadth-first) order.
        packages_root: Filesystem root of the package repository, if any.
    """

    platform: TargetPlatform
    root: LibraryIdentity
    libraries: Mapping[LibraryIdentity, LibraryDescription] = field(default_factory=dict)
    packages_root: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "libraries", MappingProxyType(dict(self.libraries)))

    def get(self, identity: LibraryIdentity) -> LibraryDescription | None:
        return self.libraries.get(identity)

    def of_kind(self, kind: LibraryKind) -> list[LibraryDescription]:
        return [lib for lib in self.libraries.values() if lib.kind is kind]

    @property
    def packages(self) -> list[LibraryDescription]:
        return self.of_kind(LibraryKind.PACKAGE)

    @property
    def projects(self) -> list[LibraryDescription]:
        return self.of_kind(LibraryKind.PROJECT)

    @property
    def unresolved(self) -> list[LibraryDescription]:
        return [lib for lib in self.libraries.values() if not lib.resolved]

    @property
    def has_unresolved(self) -> bool:
        return any(not lib.resolved for lib in self.libraries.values())

    def missing_dependencies_warning(self) -> str:
        """Every unresolved identity and the platform, as one message."""
        return format_missing_dependencies(self.unresolved, self.platform)
