"""Cross-platform library deduplication.

The ``LibraryRegistry`` is the arena that merges every ``ResolutionContext``
of a bundle run. Each library identity gets exactly one entry, and the
entry remembers the contexts that discovered it, in registration order.
One entry referenced from N platforms later produces N lock-file framework
groups.

Projects are merged by name rather than identity: two project nodes with
the same name from different contexts are the same emission unit.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass, field

from depbundle.core.dependency.context import ResolutionContext
from depbundle.core.dependency.models import (
    LibraryDescription,
    LibraryIdentity,
    LibraryKind,
)
from depbundle.core.platform import TargetPlatform


@dataclass
class RegistryEntry:
    """One deduplicated library and the contexts that reference it.

    Attributes:
        library: The node as first discovered. Its ``source`` is the
            content handle used later for hashing and file listing.
        contexts: Every context that discovered the library, in
            registration order.
    """

    library: LibraryDescription
    contexts: list[ResolutionContext] = field(default_factory=list)

    @property
    def identity(self) -> LibraryIdentity:
        return self.library.identity

    @property
    def kind(self) -> LibraryKind:
        return self.library.kind

    @property
    def platforms(self) -> list[TargetPlatform]:
        """Distinct platforms this library was referenced under, in order."""
        return list(dict.fromkeys(c.platform for c in self.contexts))


class LibraryRegistry:
    """Append-only arena of libraries keyed by identity (projects by name).

    ``register`` is serialized with a lock so contexts produced by
    concurrent walks can be handed over from any thread. Entries are only
    appended to, never replaced.
    """

    def __init__(self) -> None:
        self._entries: dict[LibraryIdentity, RegistryEntry] = {}
        self._projects: dict[str, RegistryEntry] = {}
        self._contexts: list[ResolutionContext] = []
        self._lock = threading.Lock()

    def register(self, context: ResolutionContext) -> None:
        """Merge every node of *context* into the registry."""
        with self._lock:
            self._contexts.append(context)
            for library in context.libraries.values():
                if library.kind is LibraryKind.PROJECT:
                    entry = self._projects.get(library.name)
                    if entry is None:
                        entry = RegistryEntry(library)
                        self._projects[library.name] = entry
                else:
                    entry = self._entries.get(library.identity)
                    if entry is None:
                        entry = RegistryEntry(library)
                        self._entries[library.identity] = entry
                entry.contexts.append(context)

    # -- Queries ------------------------------------------------------------

    @property
    def contexts(self) -> list[ResolutionContext]:
        """Registered contexts, in registration order."""
        return list(self._contexts)

    def all_libraries(self) -> Iterator[tuple[LibraryIdentity, list[ResolutionContext]]]:
        """Yield ``(identity, contexts)`` for every entry, packages then projects."""
        for entry in self.entries():
            yield entry.identity, list(entry.contexts)

    def entries(self) -> list[RegistryEntry]:
        return list(self._entries.values()) + list(self._projects.values())

    def packages(self) -> list[RegistryEntry]:
        return [e for e in self._entries.values() if e.kind is LibraryKind.PACKAGE]

    def unresolved(self) -> list[RegistryEntry]:
        return [e for e in self._entries.values() if e.kind is LibraryKind.UNRESOLVED]

    def projects(self) -> list[RegistryEntry]:
        return list(self._projects.values())

    def contexts_for(self, identity: LibraryIdentity) -> list[ResolutionContext]:
        entry = self._entries.get(identity)
        if entry is None:
            entry = self._projects.get(identity.name)
            if entry is None or entry.identity != identity:
                return []
        return list(entry.contexts)

    def __len__(self) -> int:
        return len(self._entries) + len(self._projects)
