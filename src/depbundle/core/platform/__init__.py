"""Target platforms and platform-compatibility selection.

Submodules:
    catalog        -- PlatformFamily table (desktop / core / compatible families)
    models         -- TargetPlatform parsing and classification
    compatibility  -- Variant selection (most specific wins, first declared on ties)
"""

from depbundle.core.platform.catalog import PlatformFamily, family_for
from depbundle.core.platform.compatibility import (
    distinct_platforms,
    group_by_platform,
    is_compatible,
    select,
    select_variant,
    specificity,
)
from depbundle.core.platform.models import TargetPlatform

__all__ = [
    "PlatformFamily",
    "TargetPlatform",
    "distinct_platforms",
    "family_for",
    "group_by_platform",
    "is_compatible",
    "select",
    "select_variant",
    "specificity",
]
