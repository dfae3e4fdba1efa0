"""Lockfile data models --- LockFileLibrary and LockFileFrameworkGroup.

Defines the core data structures of the ``project.lock.json`` lockfile
format. These are pure data holders (dataclasses) with no business logic,
making them safe to import without circular-dependency concerns.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from depbundle.core.dependency.models import PackageDependency

# ---------------------------------------------------------------------------
# Integrity hash format: base64 of a SHA-512 digest (88 characters)
# ---------------------------------------------------------------------------

_SHA_RE = re.compile(r"^[A-Za-z0-9+/]{86}==$")


# ---------------------------------------------------------------------------
# LockFileFrameworkGroup: per (library, platform) selection
# ---------------------------------------------------------------------------


@dataclass
class LockFileFrameworkGroup:
    """What one library contributes to one target platform.

    Exactly one instance exists per (library, requested platform) pair.

    Attributes:
        target_platform: Full platform name (e.g. "DNX,Version=v4.5.1").
        dependencies: Dependency set selected for the platform.
        framework_assemblies: Platform-supplied assembly names.
        runtime_assemblies: Package paths of assemblies loaded at runtime.
        compile_time_assemblies: Package paths of assemblies compiled against.
    """

    target_platform: str
    dependencies: list[PackageDependency] = field(default_factory=list)
    framework_assemblies: list[str] = field(default_factory=list)
    runtime_assemblies: list[str] = field(default_factory=list)
    compile_time_assemblies: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "targetPlatform": self.target_platform,
            "dependencies": [
                {"name": d.name, "versionRange": d.version_range.raw}
                for d in self.dependencies
            ],
            "frameworkAssemblies": list(self.framework_assemblies),
            "runtimeAssemblies": list(self.runtime_assemblies),
            "compileTimeAssemblies": list(self.compile_time_assemblies),
        }


# ---------------------------------------------------------------------------
# LockFileLibrary: a single entry in the lockfile
# ---------------------------------------------------------------------------


@dataclass
class LockFileLibrary:
    """A single package entry in the lockfile.

    Attributes:
        name: Package name.
        version: Resolved version string.
        sha: Base64 SHA-512 of the package content.
        files: Every file path in the package, verbatim.
        framework_groups: One group per platform the package was
            referenced under, in the order the platforms were resolved.
    """

    name: str
    version: str
    sha: str
    files: list[str] = field(default_factory=list)
    framework_groups: list[LockFileFrameworkGroup] = field(default_factory=list)

    @property
    def key(self) -> tuple[str, str]:
        return (self.name, self.version)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "sha": self.sha,
            "files": list(self.files),
            "frameworkGroups": [g.to_dict() for g in self.framework_groups],
        }
