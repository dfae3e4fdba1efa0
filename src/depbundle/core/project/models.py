"""Project model.

A ``Project`` is the parsed form of a ``project.yaml`` manifest: its name
and version, the platforms it targets, its common and platform-specific
dependencies, an optional web root, and lifecycle scripts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from depbundle.core.dependency.models import PackageDependency, Version
from depbundle.core.platform import TargetPlatform, select


@dataclass(frozen=True)
class ManifestWarning:
    """A non-fatal problem found while reading a manifest.

    Attributes:
        message: Human-readable description.
        path: Manifest file path.
        line: 1-based line number.
        column: 1-based column number.
    """

    message: str
    path: str
    line: int
    column: int


@dataclass
class Project:
    """A project being bundled, or one referenced by it.

    Attributes:
        name: Project name (defaults to the directory name).
        version: Project version.
        project_directory: Directory containing the manifest.
        webroot: Web root folder relative to the project directory, if any.
        dependencies: Dependencies shared by every target platform.
        platform_dependencies: Per-platform dependency blocks in declaration
            order; the keys are the project's declared platforms.
        scripts: Lifecycle scripts keyed by stage name.
    """

    name: str
    version: Version
    project_directory: Path
    webroot: str | None = None
    dependencies: list[PackageDependency] = field(default_factory=list)
    platform_dependencies: dict[TargetPlatform, list[PackageDependency]] = field(
        default_factory=dict
    )
    scripts: dict[str, list[str]] = field(default_factory=dict)

    @property
    def declared_platforms(self) -> list[TargetPlatform]:
        return list(self.platform_dependencies)

    def declares(self, platform: TargetPlatform) -> bool:
        return platform in self.platform_dependencies

    def dependencies_for(self, platform: TargetPlatform) -> list[PackageDependency]:
        """Common dependencies followed by the block selected for *platform*."""
        specific = select(platform, self.platform_dependencies.items()) or []
        return list(self.dependencies) + list(specific)
