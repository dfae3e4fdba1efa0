"""Property-based tests for hashing, variant selection, and lockfile determinism.

Verifies that:
- Hashing is deterministic and independent of stream chunking.
- Variant selection is stable: equally specific variants resolve to the
  first one declared, whatever else is in the list.
- Building the lockfile twice from the same registry yields byte-identical
  JSON, with exactly one group per distinct referencing platform.
"""
from __future__ import annotations

import io

from hypothesis import given, settings
from hypothesis import strategies as st

from depbundle.core.dependency import (
    LibraryDescription,
    LibraryKind,
    LibraryRegistry,
    ResolutionContext,
)
from depbundle.core.lockfile import LockFileBuilder, Lockfile, compute_sha, compute_sha_bytes
from depbundle.core.platform import TargetPlatform, select

from tests.helpers import make_package

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

PLATFORMS = [
    TargetPlatform.parse(p)
    for p in ("net40", "net45", "net451", "dnx451", "dnxcore50", "portable-net45+win8")
]

platforms = st.sampled_from(PLATFORMS)

package_names = st.text(
    alphabet=st.sampled_from("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz."),
    min_size=1,
    max_size=12,
).filter(lambda s: not s.startswith(".") and not s.endswith("."))

versions = st.from_regex(r"[0-9]{1,2}\.[0-9]{1,2}\.[0-9]{1,2}", fullmatch=True)


@st.composite
def registry_strategy(draw: st.DrawFn) -> LibraryRegistry:
    """A registry of 1-4 platform walks over a shared pool of packages."""
    names = draw(st.lists(package_names, min_size=1, max_size=6, unique_by=str.lower))
    pool = [
        make_package(name, draw(versions), files=[f"lib/net45/{name}.dll"])
        for name in names
    ]
    registry = LibraryRegistry()
    for target in draw(st.lists(platforms, min_size=1, max_size=4)):
        chosen = draw(st.lists(
            st.sampled_from(pool), min_size=1, max_size=len(pool), unique_by=lambda p: p.name
        ))
        nodes = {
            p.identity: LibraryDescription(p.identity, LibraryKind.PACKAGE, source=p)
            for p in chosen
        }
        registry.register(ResolutionContext(target, chosen[0].identity, nodes))
    return registry


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------


class TestHashing:
    @given(block=st.binary(min_size=1, max_size=512), repeats=st.integers(1, 300))
    @settings(max_examples=30)
    def test_stream_and_bytes_agree(self, block: bytes, repeats: int) -> None:
        """Content spanning several read chunks hashes the same as one buffer."""
        content = block * repeats
        assert compute_sha(io.BytesIO(content)) == compute_sha_bytes(content)

    @given(a=st.binary(max_size=64), b=st.binary(max_size=64))
    def test_distinct_content_distinct_hash(self, a: bytes, b: bytes) -> None:
        assert (compute_sha_bytes(a) == compute_sha_bytes(b)) == (a == b)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


class TestSelectionStability:
    @given(
        target=platforms,
        tag=platforms,
        others=st.lists(st.one_of(st.none(), platforms), max_size=5),
    )
    def test_first_of_equal_variants_wins(self, target, tag, others) -> None:
        """Duplicating the winning tag never changes which payload is chosen."""
        variants = [(t, f"other{i}") for i, t in enumerate(others)]
        variants += [(tag, "first"), (tag, "second")]
        chosen = select(target, variants)
        assert chosen != "second"

    @given(target=platforms, tags=st.lists(st.one_of(st.none(), platforms), max_size=6))
    def test_selection_is_deterministic(self, target, tags) -> None:
        variants = [(t, i) for i, t in enumerate(tags)]
        assert select(target, variants) == select(target, list(variants))


# ---------------------------------------------------------------------------
# Lockfile building
# ---------------------------------------------------------------------------


class TestLockfileDeterminism:
    @given(registry=registry_strategy())
    @settings(max_examples=50)
    def test_rebuild_is_byte_identical(self, registry: LibraryRegistry) -> None:
        first = Lockfile(LockFileBuilder().build(registry)).to_json()
        second = Lockfile(LockFileBuilder(max_workers=3).build(registry)).to_json()
        assert first == second

    @given(registry=registry_strategy())
    @settings(max_examples=50)
    def test_one_group_per_distinct_platform(self, registry: LibraryRegistry) -> None:
        """N referencing platforms yield N framework groups, in first-seen order."""
        libraries = LockFileBuilder().build(registry)
        assert len(libraries) == len(registry.packages())
        for library, entry in zip(libraries, registry.packages()):
            assert [g.target_platform for g in library.framework_groups] == [
                str(p) for p in entry.platforms
            ]

    @given(registry=registry_strategy())
    @settings(max_examples=30)
    def test_round_trip(self, registry: LibraryRegistry) -> None:
        lockfile = Lockfile(LockFileBuilder().build(registry))
        assert Lockfile.from_json(lockfile.to_json()).to_json() == lockfile.to_json()
