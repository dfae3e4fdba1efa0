"""Versions, version ranges, dependency edges, and library graph nodes.

This module provides the foundational value types for dependency walking:

- ``Version`` -- ``major.minor[.patch[.revision]][-prerelease]``, totally
  ordered. A pre-release sorts below the matching release.
- ``VersionRange`` -- a declared range: a bare minimum (``1.0.0``),
  interval notation (``[1.0,2.0)``, ``(,3.0]``), an exact pin (``[1.0]``),
  or ``*`` / empty for any version.
- ``PackageDependency`` -- a (name, range) edge as declared in metadata.
- ``LibraryIdentity`` -- the (name, version) key of a resolved library.
- ``LibraryDescription`` -- a frozen graph node produced by a walk.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

_VERSION_RE = re.compile(
    r"^(?P<release>\d+(?:\.\d+){0,3})"
    r"(?:-(?P<pre>[0-9A-Za-z\-.]+))?$"
)

_RELEASE_WIDTH = 4


@functools.total_ordering
class Version:
    """A package version as authored, ordered by release then pre-release.

    Equality ignores trailing zero components (``1.0`` == ``1.0.0``) and
    pre-release case; ``str()`` returns the text exactly as authored.
    """

    __slots__ = ("raw", "release", "prerelease")

    def __init__(self, raw: str) -> None:
        m = _VERSION_RE.match(raw.strip())
        if not m:
            raise ValueError(f"Invalid version: {raw!r}")
        self.raw = raw.strip()
        parts = tuple(int(p) for p in m.group("release").split("."))
        self.release: tuple[int, ...] = parts + (0,) * (_RELEASE_WIDTH - len(parts))
        self.prerelease: str = m.group("pre") or ""

    @classmethod
    def parse(cls, raw: str) -> Version:
        return cls(raw)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def _key(self) -> tuple[tuple[int, ...], int, str]:
        # Releases (1) sort above pre-releases (0) of the same numbers.
        return (self.release, 0 if self.prerelease else 1, self.prerelease.lower())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"Version({self.raw!r})"


# ---------------------------------------------------------------------------
# VersionRange
# ---------------------------------------------------------------------------

_INTERVAL_RE = re.compile(
    r"^(?P<open>[\[(])\s*(?P<min>[^,\])]*?)\s*"
    r"(?:(?P<comma>,)\s*(?P<max>[^\])]*?)\s*)?(?P<close>[\])])$"
)


@dataclass(frozen=True)
class VersionRange:
    """A declared version requirement.

    Attributes:
        raw: The range as authored (empty string means any version).
        min_version: Lower bound, or None for unbounded.
        max_version: Upper bound, or None for unbounded.
        include_min: Whether the lower bound is inclusive.
        include_max: Whether the upper bound is inclusive.
    """

    raw: str
    min_version: Version | None = None
    max_version: Version | None = None
    include_min: bool = True
    include_max: bool = False

    @classmethod
    def parse(cls, text: str | None) -> VersionRange:
        """Parse a range string.

        Raises:
            ValueError: If the text is not a valid range.
        """
        if text is not None and not isinstance(text, str):
            raise ValueError(f"Version range must be a string, got {type(text).__name__}")
        raw = (text or "").strip()
        if raw in ("", "*"):
            return cls(raw)

        if raw[0] not in "[(":
            return cls(raw, min_version=Version(raw), include_min=True)

        m = _INTERVAL_RE.match(raw)
        if not m:
            raise ValueError(f"Invalid version range: {raw!r}")
        low = m.group("min") or ""
        high = m.group("max") or ""
        include_min = m.group("open") == "["
        include_max = m.group("close") == "]"

        if not m.group("comma"):
            # "[1.0]" is an exact pin; anything else without a comma is invalid.
            if not (include_min and include_max and low):
                raise ValueError(f"Invalid version range: {raw!r}")
            pinned = Version(low)
            return cls(raw, pinned, pinned, True, True)

        if not low and not high:
            raise ValueError(f"Invalid version range: {raw!r}")
        return cls(
            raw,
            Version(low) if low else None,
            Version(high) if high else None,
            include_min,
            include_max,
        )

    @classmethod
    def exact(cls, version: Version) -> VersionRange:
        return cls(f"[{version}]", version, version, True, True)

    @property
    def is_any(self) -> bool:
        return self.min_version is None and self.max_version is None

    def satisfies(self, version: Version) -> bool:
        """Return True if *version* falls inside this range."""
        if self.min_version is not None:
            if version < self.min_version:
                return False
            if not self.include_min and version == self.min_version:
                return False
        if self.max_version is not None:
            if version > self.max_version:
                return False
            if not self.include_max and version == self.max_version:
                return False
        return True

    def display(self) -> str:
        """Human-readable form used in warnings (``>= 1.0.0``)."""
        if self.is_any:
            return ""
        if self.min_version is not None and self.min_version == self.max_version:
            return f"= {self.min_version}"
        parts: list[str] = []
        if self.min_version is not None:
            parts.append(f"{'>=' if self.include_min else '>'} {self.min_version}")
        if self.max_version is not None:
            parts.append(f"{'<=' if self.include_max else '<'} {self.max_version}")
        return ", ".join(parts)

    def __str__(self) -> str:
        return self.raw


# ---------------------------------------------------------------------------
# Edges and nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PackageDependency:
    """A declared dependency edge: "requires *name* within *version_range*"."""

    name: str
    version_range: VersionRange = field(default_factory=lambda: VersionRange(""))

    @classmethod
    def parse(cls, name: str, version_range: str | None = None) -> PackageDependency:
        return cls(name, VersionRange.parse(version_range))

    def __str__(self) -> str:
        shown = self.version_range.display()
        return f"{self.name} {shown}" if shown else self.name


@dataclass(frozen=True)
class LibraryIdentity:
    """The (name, version) key that uniquely identifies a library.

    ``version`` is None only for unresolved dependencies whose declared
    range has no lower bound.
    """

    name: str
    version: Version | None = None

    def __str__(self) -> str:
        return f"{self.name} {self.version}" if self.version is not None else self.name


class LibraryKind(Enum):
    """What a graph node turned out to be when it was located."""

    PROJECT = "project"
    PACKAGE = "package"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class LibraryDescription:
    """A node of a resolved dependency graph.

    Produced once by a walk and never mutated afterwards.

    Attributes:
        identity: The library's (name, version) key.
        kind: Project, package, or unresolved.
        dependencies: Identities of the direct dependencies selected for
            the walk's platform, in declaration order.
        resolved: False when the library could not be located.
        requested: The declared dependency that led to this node.
        source: Content handle (``PackageContent`` for packages,
            ``Project`` for projects, None when unresolved). Excluded from
            equality.
    """

    identity: LibraryIdentity
    kind: LibraryKind
    dependencies: tuple[LibraryIdentity, ...] = ()
    resolved: bool = True
    requested: PackageDependency | None = None
    source: Any = field(default=None, compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.identity.name
