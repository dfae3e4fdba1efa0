"""Tests for the compatibility resolver: applicability, specificity, selection."""

from __future__ import annotations

from depbundle.core.platform import (
    TargetPlatform,
    distinct_platforms,
    group_by_platform,
    is_compatible,
    select,
    select_variant,
)

from tests.helpers import platform


class TestIsCompatible:
    """The partial order between targets and variant tags."""

    def test_same_family_higher_version(self) -> None:
        assert is_compatible(platform("net46"), platform("net45"))

    def test_same_family_lower_version(self) -> None:
        assert not is_compatible(platform("net40"), platform("net45"))

    def test_compatible_family(self) -> None:
        """DNX consumes .NETFramework assets."""
        assert is_compatible(platform("dnx451"), platform("net45"))

    def test_compatibility_is_directional(self) -> None:
        assert not is_compatible(platform("net45"), platform("dnx451"))

    def test_unrelated_family(self) -> None:
        assert not is_compatible(platform("dnxcore50"), platform("net45"))

    def test_untagged_applies_to_full_platforms(self) -> None:
        assert is_compatible(platform("net45"), None)
        assert is_compatible(platform("dnx451"), None)

    def test_untagged_excluded_for_core(self) -> None:
        """'No specific platform' never applies to a restricted core target."""
        assert not is_compatible(platform("dnxcore50"), None)

    def test_untagged_excluded_for_portable(self) -> None:
        assert not is_compatible(platform("portable-net45+win8"), None)

    def test_portable_tag_covers_member(self) -> None:
        assert is_compatible(platform("net45"), platform("portable-net45+win8"))

    def test_portable_target_needs_every_member(self) -> None:
        """A portable target matches a tag only if all its members do."""
        target = platform("portable-net45+win8")
        assert not is_compatible(target, platform("net45"))
        assert is_compatible(target, platform("portable-net45+win8+wp8"))


class TestSelect:
    """Most specific applicable variant wins; ties keep declaration order."""

    def test_no_applicable_variant_returns_none(self) -> None:
        variants = [(platform("net45"), "net")]
        assert select(platform("dnxcore50"), variants) is None

    def test_same_family_beats_compatible_family(self) -> None:
        variants = [(platform("net45"), "net"), (platform("dnx451"), "dnx")]
        assert select(platform("dnx451"), variants) == "dnx"

    def test_higher_version_is_more_specific(self) -> None:
        variants = [(platform("net40"), "40"), (platform("net45"), "45")]
        assert select(platform("net46"), variants) == "45"

    def test_tagged_beats_untagged(self) -> None:
        variants = [(None, "any"), (platform("net45"), "net")]
        assert select(platform("net45"), variants) == "net"

    def test_specific_tag_beats_portable(self) -> None:
        variants = [(platform("portable-net45+win8"), "pcl"), (platform("net45"), "net")]
        assert select(platform("net45"), variants) == "net"

    def test_untagged_used_when_nothing_else_applies(self) -> None:
        variants = [(platform("dnxcore50"), "core"), (None, "any")]
        assert select(platform("net45"), variants) == "any"

    def test_equal_specificity_first_declared_wins(self) -> None:
        """Two equally specific variants: the first one declared is chosen."""
        variants = [(platform("net45"), "first"), (platform("net45"), "second")]
        assert select(platform("net45"), variants) == "first"

    def test_untagged_not_selected_for_restricted(self) -> None:
        variants = [(None, "shim")]
        assert select(platform("dnxcore50"), variants) is None

    def test_select_variant_returns_tag(self) -> None:
        tag = platform("net45")
        assert select_variant(platform("net46"), [(tag, 1)]) == (tag, 1)


class TestGrouping:
    """Grouping item-level declarations into variants."""

    def test_group_by_platform_preserves_first_appearance(self) -> None:
        a, b = platform("net45"), platform("dnx451")
        groups = group_by_platform([(b, 1), (a, 2), (b, 3), (None, 4)])
        assert groups == [(b, [1, 3]), (a, [2]), (None, [4])]

    def test_distinct_platforms(self) -> None:
        a, b = platform("net45"), TargetPlatform("DNX", (4, 5, 1))
        assert distinct_platforms([a, b, a, platform("dnx451")]) == [a, b]
