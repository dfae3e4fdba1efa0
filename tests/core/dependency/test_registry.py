"""Tests for LibraryRegistry: cross-platform deduplication and context lists."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from depbundle.core.dependency import (
    LibraryDescription,
    LibraryIdentity,
    LibraryKind,
    LibraryRegistry,
    ResolutionContext,
    Version,
)
from depbundle.core.platform import TargetPlatform

NET45 = TargetPlatform.parse("net45")
DNX451 = TargetPlatform.parse("dnx451")
DNXCORE50 = TargetPlatform.parse("dnxcore50")


def ident(name: str, version: str | None = "1.0.0") -> LibraryIdentity:
    return LibraryIdentity(name, Version(version) if version else None)


def node(name: str, version: str | None = "1.0.0", kind=LibraryKind.PACKAGE) -> LibraryDescription:
    return LibraryDescription(
        identity=ident(name, version),
        kind=kind,
        resolved=kind is not LibraryKind.UNRESOLVED,
    )


def context(platform: TargetPlatform, *nodes: LibraryDescription) -> ResolutionContext:
    root = nodes[0].identity if nodes else ident("App")
    return ResolutionContext(platform, root, {n.identity: n for n in nodes})


class TestRegister:
    """Every identity appears once; contexts are kept in registration order."""

    def test_identity_merged_across_contexts(self) -> None:
        registry = LibraryRegistry()
        c1 = context(DNX451, node("A"), node("B"))
        c2 = context(DNXCORE50, node("A"))
        registry.register(c1)
        registry.register(c2)
        assert len(registry.packages()) == 2
        assert registry.contexts_for(ident("A")) == [c1, c2]
        assert registry.contexts_for(ident("B")) == [c1]

    def test_different_versions_are_different_entries(self) -> None:
        registry = LibraryRegistry()
        registry.register(context(DNX451, node("A", "1.0.0")))
        registry.register(context(DNXCORE50, node("A", "2.0.0")))
        assert len(registry.packages()) == 2

    def test_projects_merged_by_name(self) -> None:
        """Two project nodes with the same name are one emission unit."""
        registry = LibraryRegistry()
        registry.register(context(DNX451, node("App", "1.0.0", LibraryKind.PROJECT)))
        registry.register(context(DNXCORE50, node("App", "1.0.1", LibraryKind.PROJECT)))
        assert len(registry.projects()) == 1
        assert len(registry.projects()[0].contexts) == 2

    def test_unresolved_tracked_separately(self) -> None:
        registry = LibraryRegistry()
        registry.register(context(DNX451, node("Missing", None, LibraryKind.UNRESOLVED)))
        assert registry.packages() == []
        assert [e.identity.name for e in registry.unresolved()] == ["Missing"]

    def test_entry_platforms_distinct(self) -> None:
        registry = LibraryRegistry()
        registry.register(context(DNX451, node("A")))
        registry.register(context(DNX451, node("A")))
        registry.register(context(NET45, node("A")))
        entry = registry.packages()[0]
        assert len(entry.contexts) == 3
        assert entry.platforms == [DNX451, NET45]

    def test_all_libraries_yields_packages_then_projects(self) -> None:
        registry = LibraryRegistry()
        registry.register(
            context(DNX451, node("App", kind=LibraryKind.PROJECT), node("A"))
        )
        names = [identity.name for identity, _ in registry.all_libraries()]
        assert names == ["A", "App"]

    def test_contexts_for_unknown_identity(self) -> None:
        assert LibraryRegistry().contexts_for(ident("Nope")) == []

    def test_context_libraries_are_read_only(self) -> None:
        c = context(DNX451, node("A"))
        with pytest.raises(TypeError):
            c.libraries[ident("B")] = node("B")  # type: ignore[index]

    def test_packages_root_defaults_to_none(self) -> None:
        assert context(DNX451, node("A")).packages_root is None
        c = ResolutionContext(DNX451, ident("A"), {}, Path("/pkgs"))
        assert c.packages_root == Path("/pkgs")


class TestConcurrentRegistration:
    def test_parallel_register_keeps_every_context(self) -> None:
        """Registration from many threads never loses a context."""
        registry = LibraryRegistry()
        contexts = [context(DNX451, node("Shared"), node(f"L{i}")) for i in range(50)]
        threads = [threading.Thread(target=registry.register, args=(c,)) for c in contexts]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(registry.contexts_for(ident("Shared"))) == 50
        assert len(registry.packages()) == 51
