"""Compatibility resolution: choosing the declared variant for a platform.

Packages declare several variants of the same data (dependency sets,
assembly folders, reference sets), each tagged with the platform it was
authored for, or with no tag at all. Given a target platform, this module
picks the single variant that applies.

Partial order
-------------
A variant tag ``T`` *applies* to a target ``P`` when:

- ``T`` is ``None`` (no specific platform): ``P`` is any full,
  non-restricted platform. Portable and core targets are excluded so that
  full-surface shims never leak onto restricted platforms.
- ``T`` is portable: every member of ``P`` (``P`` itself when not
  portable) is satisfied by at least one member of ``T``.
- otherwise: every member of ``P`` has ``T``'s family, or a family declared
  compatible with it in the catalog, at a version ``>= T.version``.

Specificity metric
------------------
Among applicable tags, the smallest ``specificity`` key wins::

    (rank, negated tag version, portable member count)

with rank 0 for the same family, 1 for a compatible family, 2 for portable
tags, and 3 for untagged variants. A higher tag version is closer to the
target and therefore narrower. Equal keys keep the first declared variant.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TypeVar

from depbundle.core.platform.catalog import family_for
from depbundle.core.platform.models import TargetPlatform

T = TypeVar("T")
Variant = tuple["TargetPlatform | None", T]

_VERSION_WIDTH = 4

_RANK_SAME_FAMILY = 0
_RANK_COMPATIBLE_FAMILY = 1
_RANK_PORTABLE = 2
_RANK_UNSPECIFIED = 3


def _padded(version: tuple[int, ...]) -> tuple[int, ...]:
    return tuple(version) + (0,) * (_VERSION_WIDTH - len(version))


def _targets_of(target: TargetPlatform) -> tuple[TargetPlatform, ...]:
    return target.members if target.is_portable else (target,)


def _satisfies(target: TargetPlatform, tag: TargetPlatform) -> bool:
    """Check a single non-portable target against a single non-portable tag."""
    if _padded(target.version) < _padded(tag.version):
        return False
    if target.identifier.lower() == tag.identifier.lower():
        return not tag.profile or tag.profile.lower() == target.profile.lower()
    compatible = {c.lower() for c in family_for(target.identifier).compatible_with}
    return tag.identifier.lower() in compatible


def is_compatible(target: TargetPlatform, tag: TargetPlatform | None) -> bool:
    """Return True if a variant tagged *tag* applies to *target*."""
    if tag is None:
        return not target.is_restricted

    targets = _targets_of(target)
    if not targets:
        return False

    if tag.is_portable:
        members = tag.members
        return all(any(_satisfies(t, m) for m in members) for t in targets)
    return all(_satisfies(t, tag) for t in targets)


def specificity(
    target: TargetPlatform, tag: TargetPlatform | None
) -> tuple[int, tuple[int, ...], int]:
    """Return the specificity key of an applicable *tag* (lower is narrower)."""
    if tag is None:
        return (_RANK_UNSPECIFIED, (), 0)
    if tag.is_portable:
        return (_RANK_PORTABLE, (), len(tag.members))
    negated = tuple(-v for v in _padded(tag.version))
    same_family = all(
        t.identifier.lower() == tag.identifier.lower() for t in _targets_of(target)
    )
    rank = _RANK_SAME_FAMILY if same_family else _RANK_COMPATIBLE_FAMILY
    return (rank, negated, 0)


def select_variant(
    target: TargetPlatform, variants: Iterable[Variant[T]]
) -> Variant[T] | None:
    """Return the most specific applicable ``(tag, payload)`` pair, or None.

    Ties on specificity keep the first declared variant.
    """
    best: Variant[T] | None = None
    best_key: tuple[int, tuple[int, ...], int] | None = None
    for tag, payload in variants:
        if not is_compatible(target, tag):
            continue
        key = specificity(target, tag)
        if best_key is None or key < best_key:
            best, best_key = (tag, payload), key
    return best


def select(target: TargetPlatform, variants: Iterable[Variant[T]]) -> T | None:
    """Return the payload of the best-matching variant for *target*.

    None means no variant applies; callers treat that as "no constraint".
    """
    chosen = select_variant(target, variants)
    return chosen[1] if chosen is not None else None


def group_by_platform(
    items: Iterable[tuple[TargetPlatform | None, T]],
) -> list[tuple[TargetPlatform | None, list[T]]]:
    """Group individually tagged items into variants.

    Groups appear in the order their tag was first seen, and items keep
    their declaration order within a group.
    """
    groups: dict[TargetPlatform | None, list[T]] = {}
    for tag, item in items:
        groups.setdefault(tag, []).append(item)
    return list(groups.items())


def distinct_platforms(platforms: Sequence[TargetPlatform]) -> list[TargetPlatform]:
    """Deduplicate platforms preserving first occurrence."""
    return list(dict.fromkeys(platforms))
