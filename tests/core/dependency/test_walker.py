"""Tests for DependencyWalker: traversal, per-platform selection, unresolved nodes."""

from __future__ import annotations

from pathlib import Path

import pytest

from depbundle.cancellation import CancellationToken
from depbundle.core.dependency import (
    DependencyWalker,
    LibraryIdentity,
    LibraryKind,
    PackageDependency,
    Version,
)
from depbundle.core.packages import MemoryPackageRepository
from depbundle.core.platform import TargetPlatform
from depbundle.core.project import Project, ProjectResolver
from depbundle.exceptions import OperationCancelledError

from tests.helpers import make_package, platform

DNX451 = TargetPlatform.parse("dnx451")
DNXCORE50 = TargetPlatform.parse("dnxcore50")


def make_project(
    name: str = "App",
    dependencies: list[tuple[str, str]] | None = None,
    platforms: dict[str, list[tuple[str, str]]] | None = None,
) -> Project:
    return Project(
        name=name,
        version=Version("1.0.0"),
        project_directory=Path("/nonexistent") / name,
        dependencies=[PackageDependency.parse(n, r) for n, r in (dependencies or [])],
        platform_dependencies={
            platform(short): [PackageDependency.parse(n, r) for n, r in deps]
            for short, deps in (platforms or {"dnx451": []}).items()
        },
    )


def walk(project: Project, repository: MemoryPackageRepository, target=DNX451, **kwargs):
    walker = DependencyWalker(target, repository, ProjectResolver([], [project]), **kwargs)
    return walker, walker.walk(project.name, project.version)


class TestTraversal:
    """Breadth-first discovery from the root project."""

    def test_root_is_project(self) -> None:
        project = make_project()
        _, context = walk(project, MemoryPackageRepository())
        assert context.root == LibraryIdentity("App", Version("1.0.0"))
        assert context.get(context.root).kind is LibraryKind.PROJECT
        assert context.get(context.root).source is project

    def test_transitive_packages_in_bfs_order(self) -> None:
        repo = MemoryPackageRepository([
            make_package("A", "1.0.0", dependency_sets=[(None, [("C", "1.0.0")])]),
            make_package("B", "1.0.0"),
            make_package("C", "1.0.0"),
        ])
        project = make_project(dependencies=[("A", "1.0.0"), ("B", "1.0.0")])
        _, context = walk(project, repo)
        assert [lib.name for lib in context.libraries.values()] == ["App", "A", "B", "C"]
        assert context.get(context.root).dependencies == (
            LibraryIdentity("A", Version("1.0.0")),
            LibraryIdentity("B", Version("1.0.0")),
        )

    def test_lowest_satisfying_version_chosen(self) -> None:
        repo = MemoryPackageRepository([
            make_package("A", "1.0.0"),
            make_package("A", "1.5.0"),
            make_package("A", "2.0.0"),
        ])
        project = make_project(dependencies=[("A", "1.2")])
        _, context = walk(project, repo)
        assert LibraryIdentity("A", Version("1.5.0")) in context.libraries

    def test_cycle_terminates(self) -> None:
        """A -> B -> A is walked once per identity."""
        repo = MemoryPackageRepository([
            make_package("A", "1.0.0", dependency_sets=[(None, [("B", "1.0.0")])]),
            make_package("B", "1.0.0", dependency_sets=[(None, [("A", "1.0.0")])]),
        ])
        project = make_project(dependencies=[("A", "1.0.0")])
        _, context = walk(project, repo)
        assert len(context.libraries) == 3
        b = context.get(LibraryIdentity("B", Version("1.0.0")))
        assert b.dependencies == (LibraryIdentity("A", Version("1.0.0")),)

    def test_diamond_deduplicated(self) -> None:
        repo = MemoryPackageRepository([
            make_package("A", "1.0.0", dependency_sets=[(None, [("D", "1.0.0")])]),
            make_package("B", "1.0.0", dependency_sets=[(None, [("D", "1.0.0")])]),
            make_package("D", "1.0.0"),
        ])
        project = make_project(dependencies=[("A", "1.0.0"), ("B", "1.0.0")])
        _, context = walk(project, repo)
        assert [lib.name for lib in context.libraries.values()].count("D") == 1

    def test_packages_root_recorded(self) -> None:
        _, context = walk(make_project(), MemoryPackageRepository())
        assert context.packages_root is None


class TestPlatformSelection:
    """Dependency sets and project blocks are selected for the walk's platform."""

    def test_package_dependency_set_per_platform(self) -> None:
        repo = MemoryPackageRepository([
            make_package(
                "A", "1.0.0",
                dependency_sets=[
                    ("net45", [("Desktop", "1.0.0")]),
                    ("dnxcore50", [("Core", "1.0.0")]),
                ],
            ),
            make_package("Desktop", "1.0.0"),
            make_package("Core", "1.0.0"),
        ])
        project = make_project(
            dependencies=[("A", "1.0.0")],
            platforms={"dnx451": [], "dnxcore50": []},
        )
        _, desktop = walk(project, repo, DNX451)
        _, core = walk(project, repo, DNXCORE50)
        assert {lib.name for lib in desktop.packages} == {"A", "Desktop"}
        assert {lib.name for lib in core.packages} == {"A", "Core"}

    def test_project_platform_block(self) -> None:
        repo = MemoryPackageRepository([make_package("Http", "4.0.0")])
        project = make_project(platforms={"dnx451": [("Http", "4.0.0")], "dnxcore50": []})
        _, desktop = walk(project, repo, DNX451)
        _, core = walk(project, repo, DNXCORE50)
        assert [lib.name for lib in desktop.packages] == ["Http"]
        assert core.packages == []

    def test_project_reference(self) -> None:
        lib = make_project("Lib", dependencies=[("A", "1.0.0")])
        app = make_project("App", dependencies=[("Lib", "")])
        repo = MemoryPackageRepository([make_package("A", "1.0.0")])
        walker = DependencyWalker(DNX451, repo, ProjectResolver([], [app, lib]))
        context = walker.walk("App", app.version)
        assert [p.name for p in context.projects] == ["App", "Lib"]
        assert [p.name for p in context.packages] == ["A"]


class TestUnresolved:
    """Missing dependencies degrade to unresolved nodes."""

    def test_missing_dependency_recorded(self) -> None:
        project = make_project(dependencies=[("Missing", "2.0.0")])
        walker, context = walk(project, MemoryPackageRepository())
        missing = context.get(LibraryIdentity("Missing", Version("2.0.0")))
        assert missing is not None
        assert missing.kind is LibraryKind.UNRESOLVED
        assert missing.resolved is False
        assert context.has_unresolved

    def test_walk_continues_past_missing(self) -> None:
        repo = MemoryPackageRepository([make_package("B", "1.0.0")])
        project = make_project(dependencies=[("Missing", "1.0"), ("B", "1.0.0")])
        _, context = walk(project, repo)
        assert [lib.name for lib in context.packages] == ["B"]

    def test_missing_without_minimum_has_no_version(self) -> None:
        project = make_project(dependencies=[("Missing", "")])
        _, context = walk(project, MemoryPackageRepository())
        assert LibraryIdentity("Missing", None) in context.libraries

    def test_warning_lists_identity_and_platform(self) -> None:
        project = make_project(dependencies=[("Missing", "2.0.0")])
        walker, context = walk(project, MemoryPackageRepository())
        message = walker.missing_dependencies_warning()
        assert message == context.missing_dependencies_warning()
        assert "DNX,Version=v4.5.1" in message
        assert "Missing >= 2.0.0" in message


class TestCancellation:
    def test_cancelled_walk_raises(self) -> None:
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            walk(make_project(), MemoryPackageRepository(), cancellation=token)
