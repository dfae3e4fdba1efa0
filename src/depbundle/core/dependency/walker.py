"""Per-platform dependency walking.

``DependencyWalker`` performs one resolution pass for one target platform:
a breadth-first traversal from the root project, locating every dependency
(projects first, then packages) and selecting each package's dependency set
for the platform through the compatibility resolver.

Missing dependencies never halt the walk. They become ``UNRESOLVED`` nodes
and are reported through ``missing_dependencies_warning``.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from depbundle.cancellation import CancellationToken
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
from depbundle.core.platform import TargetPlatform, select

if TYPE_CHECKING:
    from depbundle.core.packages.base import PackageRepository
    from depbundle.core.project.resolver import ProjectResolver

logger = logging.getLogger(__name__)


class DependencyWalker:
    """Build the transitive dependency graph of a root for one platform.

    Each identity is enqueued at most once, so the walk terminates on any
    graph, cyclic or not. Lookups are cached per (name, range).

    Args:
        platform: The walk's target platform.
        repository: Package-content provider. Read-only; may be shared.
        projects: Resolver for project references (and the root).
        cancellation: Checked between nodes.
    """

    def __init__(
        self,
        platform: TargetPlatform,
        repository: PackageRepository,
        projects: ProjectResolver,
        cancellation: CancellationToken | None = None,
    ) -> None:
        self._platform = platform
        self._repository = repository
        self._projects = projects
        self._cancellation = cancellation or CancellationToken()
        self._located: dict[tuple[str, str], tuple[LibraryDescription, list[PackageDependency]]] = {}
        self._libraries: dict[LibraryIdentity, LibraryDescription] = {}

    @property
    def platform(self) -> TargetPlatform:
        return self._platform

    @property
    def libraries(self) -> list[LibraryDescription]:
        """Every node discovered by the last walk, in discovery order."""
        return list(self._libraries.values())

    def walk(self, root_name: str, root_version: Version) -> ResolutionContext:
        """Walk from (root_name, root_version) and return the frozen context.

        Raises:
            OperationCancelledError: If cancellation is requested mid-walk.
        """
        self._libraries = {}
        root, root_deps = self._locate(
            PackageDependency(root_name, VersionRange.exact(root_version))
        )
        queue: deque[tuple[LibraryDescription, list[PackageDependency]]] = deque()
        queue.append((root, root_deps))
        seen: set[LibraryIdentity] = {root.identity}

        while queue:
            self._cancellation.raise_if_cancelled()
            node, declared = queue.popleft()

            edges: list[LibraryIdentity] = []
            for dep in declared:
                child, child_deps = self._locate(dep)
                edges.append(child.identity)
                if child.identity not in seen:
                    seen.add(child.identity)
                    queue.append((child, child_deps))

            self._libraries[node.identity] = LibraryDescription(
                identity=node.identity,
                kind=node.kind,
                dependencies=tuple(dict.fromkeys(edges)),
                resolved=node.resolved,
                requested=node.requested,
                source=node.source,
            )

        logger.debug(
            "Walked %s for %s: %d libraries, %d unresolved",
            root.identity, self._platform, len(self._libraries),
            sum(1 for lib in self._libraries.values() if not lib.resolved),
        )
        return ResolutionContext(
            platform=self._platform,
            root=root.identity,
            libraries=dict(self._libraries),
            packages_root=self._repository.root,
        )

    def missing_dependencies_warning(self) -> str:
        """All unresolved nodes of the last walk, formatted for reporting."""
        unresolved = [lib for lib in self._libraries.values() if not lib.resolved]
        return format_missing_dependencies(unresolved, self._platform)

    # -- Lookup -------------------------------------------------------------

    def _locate(
        self, dep: PackageDependency
    ) -> tuple[LibraryDescription, list[PackageDependency]]:
        """Locate *dep* as a project, then a package, else mark it unresolved.

        Returns the node (edges not yet filled) and its declared
        dependencies for this walk's platform.
        """
        key = (dep.name.lower(), dep.version_range.raw)
        cached = self._located.get(key)
        if cached is not None:
            return cached

        located: tuple[LibraryDescription, list[PackageDependency]]
        project = self._projects.find(dep.name)
        if project is not None and dep.version_range.satisfies(project.version):
            located = (
                LibraryDescription(
                    identity=LibraryIdentity(project.name, project.version),
                    kind=LibraryKind.PROJECT,
                    requested=dep,
                    source=project,
                ),
                project.dependencies_for(self._platform),
            )
        else:
            package = self._repository.find(dep.name, dep.version_range)
            if package is not None:
                deps = select(self._platform, package.get_dependency_set_variants()) or []
                located = (
                    LibraryDescription(
                        identity=package.identity,
                        kind=LibraryKind.PACKAGE,
                        requested=dep,
                        source=package,
                    ),
                    list(deps),
                )
            else:
                logger.debug("Unable to locate %s for %s", dep, self._platform)
                located = (
                    LibraryDescription(
                        identity=LibraryIdentity(dep.name, dep.version_range.min_version),
                        kind=LibraryKind.UNRESOLVED,
                        resolved=False,
                        requested=dep,
                    ),
                    [],
                )

        self._located[key] = located
        return located
