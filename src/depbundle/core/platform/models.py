"""Target platform tags.

A ``TargetPlatform`` is an identifier plus a version (and an optional
profile), written either in full form (``DNX,Version=v4.5.1``) or in short
form (``dnx451``). Portable platforms (``portable-net45+win8``) carry their
member platforms in the profile.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from depbundle.core.platform.catalog import (
    PORTABLE_IDENTIFIER,
    PORTABLE_SHORT_NAME,
    family_for,
    family_for_short_name,
)

# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

_SHORT_NAME_RE = re.compile(r"^(?P<name>[A-Za-z]+)(?P<version>[0-9][0-9.]*)?$")
_FULL_VERSION_RE = re.compile(r"^v?(?P<version>\d+(?:\.\d+)*)$")


def _parse_short_version(text: str) -> tuple[int, ...]:
    """Parse the numeric suffix of a short name.

    Dotted suffixes are split on dots (``4.5.1``); undotted suffixes are
    split per digit (``451`` -> 4.5.1).
    """
    if "." in text:
        return tuple(int(p) for p in text.split(".") if p)
    return tuple(int(c) for c in text)


def _normalize_version(version: tuple[int, ...]) -> tuple[int, ...]:
    """Drop trailing zeros beyond major.minor so 4.5 and 4.5.0 compare equal."""
    parts = list(version) or [0]
    while len(parts) > 2 and parts[-1] == 0:
        parts.pop()
    while len(parts) < 2:
        parts.append(0)
    return tuple(parts)


# ---------------------------------------------------------------------------
# TargetPlatform
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TargetPlatform:
    """An identifier+version tag describing a platform a project can target.

    Attributes:
        identifier: Family identifier (e.g. "DNX", ".NETFramework").
        version: Version tuple, normalized so trailing zeros beyond
            major.minor are dropped.
        profile: Optional profile. For portable platforms this is the
            ``+``-joined list of member short names.
    """

    identifier: str
    version: tuple[int, ...] = (0, 0)
    profile: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "version", _normalize_version(tuple(self.version)))

    # -- Parsing ------------------------------------------------------------

    @classmethod
    def parse(cls, text: str) -> TargetPlatform:
        """Parse a platform from full (``DNX,Version=v4.5.1``) or short form.

        Raises:
            ValueError: If *text* is empty or malformed.
        """
        stripped = text.strip()
        if not stripped:
            raise ValueError("Empty platform name")
        if "," in stripped or "=" in stripped:
            return cls._parse_full(stripped)
        return cls._parse_short(stripped)

    @classmethod
    def _parse_full(cls, text: str) -> TargetPlatform:
        parts = [p.strip() for p in text.split(",")]
        identifier = parts[0]
        version: tuple[int, ...] = (0, 0)
        profile = ""
        for part in parts[1:]:
            key, _, value = part.partition("=")
            key = key.strip().lower()
            value = value.strip()
            if key == "version":
                m = _FULL_VERSION_RE.match(value)
                if not m:
                    raise ValueError(f"Invalid platform version: {value!r}")
                version = tuple(int(p) for p in m.group("version").split("."))
            elif key == "profile":
                profile = value
            else:
                raise ValueError(f"Unknown platform name component: {part!r}")
        if not identifier:
            raise ValueError(f"Invalid platform name: {text!r}")
        return cls(family_for(identifier).identifier, version, profile)

    @classmethod
    def _parse_short(cls, text: str) -> TargetPlatform:
        lowered = text.lower()
        if lowered.startswith(PORTABLE_SHORT_NAME + "-"):
            members = [m for m in lowered[len(PORTABLE_SHORT_NAME) + 1:].split("+") if m]
            if not members:
                raise ValueError(f"Portable platform without members: {text!r}")
            # Validate members eagerly so bad tags fail at parse time.
            for member in members:
                cls._parse_short(member)
            return cls(PORTABLE_IDENTIFIER, (0, 0), "+".join(members))

        m = _SHORT_NAME_RE.match(text)
        if not m:
            raise ValueError(f"Invalid platform short name: {text!r}")
        name = m.group("name")
        raw_version = m.group("version") or ""
        family = family_for_short_name(name)
        identifier = family.identifier if family else name
        version = _parse_short_version(raw_version) if raw_version else (0, 0)
        return cls(identifier, version)

    # -- Classification -----------------------------------------------------

    @property
    def is_portable(self) -> bool:
        return self.identifier == PORTABLE_IDENTIFIER

    @property
    def is_desktop(self) -> bool:
        """True for full desktop-class platforms."""
        return family_for(self.identifier).desktop

    @property
    def is_restricted(self) -> bool:
        """True for portable profiles and reduced-surface core platforms."""
        return self.is_portable or family_for(self.identifier).core

    @property
    def members(self) -> tuple[TargetPlatform, ...]:
        """Member platforms of a portable platform; empty otherwise."""
        if not self.is_portable or not self.profile:
            return ()
        result: list[TargetPlatform] = []
        for member in self.profile.split("+"):
            try:
                result.append(TargetPlatform._parse_short(member))
            except ValueError:
                # Numbered profiles ("Profile259") have no member list.
                continue
        return tuple(result)

    # -- Presentation -------------------------------------------------------

    @property
    def version_string(self) -> str:
        return ".".join(str(p) for p in self.version)

    @property
    def short_name(self) -> str:
        """Short form, e.g. ``dnx451`` or ``portable-net45+win8``."""
        if self.is_portable:
            return f"{PORTABLE_SHORT_NAME}-{self.profile}"
        prefix = family_for(self.identifier).short_name
        digits = "".join(str(p) for p in self.version)
        if any(p > 9 for p in self.version):
            digits = self.version_string
        return f"{prefix}{digits}"

    def __str__(self) -> str:
        text = f"{self.identifier},Version=v{self.version_string}"
        if self.profile:
            text += f",Profile={self.profile}"
        return text
