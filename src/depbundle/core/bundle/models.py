"""Bundle emission plan.

``BundleRoot`` is the aggregate the orchestrator fills in while merging
resolution contexts, and that emission consumes. Its members describe what
goes into the output tree::

    <output>/
        approot/
            packages/<name>/<version>/   package archives
            src/<project>/               project sources and lock file
            runtimes/<runtime>/          embedded runtimes
        <wwwroot_out>/                   the web root, if any
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from depbundle.core.dependency.context import ResolutionContext
from depbundle.core.dependency.models import LibraryIdentity
from depbundle.core.packages.base import PackageContent
from depbundle.core.project.models import Project

APP_ROOT_NAME = "approot"
PACKAGES_FOLDER = "packages"
SOURCE_FOLDER = "src"
RUNTIMES_FOLDER = "runtimes"


@dataclass
class BundlePackage:
    """A package to copy into ``approot/packages``."""

    package: PackageContent

    @property
    def identity(self) -> LibraryIdentity:
        return self.package.identity


@dataclass
class BundleProject:
    """A project to copy into ``approot/src``.

    Attributes:
        project: The project.
        wwwroot: Web root folder (relative to the project directory). Only
            set for the project being bundled.
        wwwroot_out: Output folder name for the web root.
    """

    project: Project
    wwwroot: str | None = None
    wwwroot_out: str | None = None

    @property
    def name(self) -> str:
        return self.project.name


@dataclass
class BundleRuntime:
    """A runtime to copy into ``approot/runtimes``."""

    name: str
    path: Path


@dataclass
class BundleRoot:
    """Everything one bundle run emits.

    Attributes:
        project: The project being bundled.
        output_path: Output root directory.
        configuration: Build configuration name.
        overwrite: Clear ``output_path`` before emitting.
        no_source: Skip copying project sources.
        packages: Packages in registry order.
        projects: Projects in registry order; the bundled project first
            when it was walked.
        runtimes: Runtimes in request order.
        library_contexts: Contexts each library was discovered in.
    """

    project: Project
    output_path: Path
    configuration: str = "Debug"
    overwrite: bool = False
    no_source: bool = False
    packages: list[BundlePackage] = field(default_factory=list)
    projects: list[BundleProject] = field(default_factory=list)
    runtimes: list[BundleRuntime] = field(default_factory=list)
    library_contexts: dict[LibraryIdentity, list[ResolutionContext]] = field(
        default_factory=dict
    )

    @property
    def app_root(self) -> Path:
        return self.output_path / APP_ROOT_NAME

    @property
    def packages_path(self) -> Path:
        return self.app_root / PACKAGES_FOLDER

    @property
    def source_path(self) -> Path:
        return self.app_root / SOURCE_FOLDER

    @property
    def runtimes_path(self) -> Path:
        return self.app_root / RUNTIMES_FOLDER

    def project_path(self, name: str) -> Path:
        return self.source_path / name
