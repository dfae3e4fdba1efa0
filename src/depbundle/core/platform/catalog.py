"""Known platform families and their compatibility relationships.

The catalog is the single place that knows which platform identifiers are
desktop-class, which are restricted "core" surfaces, and which families can
consume assets declared for another family. Identifiers missing from the
catalog are treated as opaque: compatible only with themselves, neither
desktop-class nor restricted.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PlatformFamily:
    """A platform family: one identifier plus its classification.

    Attributes:
        identifier: Full identifier as written in full platform names
            (e.g. ".NETFramework").
        short_name: Prefix used in short platform names (e.g. "net").
        desktop: True for full desktop-class platforms.
        core: True for restricted, reduced-surface platforms.
        compatible_with: Identifiers of other families whose assets this
            family can consume (version-compared as usual).
    """

    identifier: str
    short_name: str
    desktop: bool = False
    core: bool = False
    compatible_with: tuple[str, ...] = ()


PORTABLE_IDENTIFIER = ".NETPortable"
PORTABLE_SHORT_NAME = "portable"

FAMILIES: tuple[PlatformFamily, ...] = (
    PlatformFamily(".NETFramework", "net", desktop=True),
    PlatformFamily("DNX", "dnx", desktop=True, compatible_with=(".NETFramework",)),
    PlatformFamily("Asp.Net", "aspnet", desktop=True, compatible_with=(".NETFramework",)),
    PlatformFamily("DNXCore", "dnxcore", core=True, compatible_with=("Asp.NetCore",)),
    PlatformFamily("Asp.NetCore", "aspnetcore", core=True),
    PlatformFamily(".NETCore", "win"),
    PlatformFamily("WindowsPhone", "wp"),
    PlatformFamily("WindowsPhoneApp", "wpa"),
    PlatformFamily("Silverlight", "sl"),
    PlatformFamily("MonoAndroid", "monoandroid"),
    PlatformFamily("MonoTouch", "monotouch"),
    PlatformFamily(PORTABLE_IDENTIFIER, PORTABLE_SHORT_NAME),
)

_BY_IDENTIFIER: dict[str, PlatformFamily] = {
    f.identifier.lower(): f for f in FAMILIES
}
_BY_SHORT_NAME: dict[str, PlatformFamily] = {
    f.short_name: f for f in FAMILIES
}


def family_for(identifier: str) -> PlatformFamily:
    """Return the catalog family for *identifier* (case-insensitive).

    Unknown identifiers yield an opaque family with no flags.
    """
    family = _BY_IDENTIFIER.get(identifier.lower())
    if family is None:
        return PlatformFamily(identifier, identifier.lower())
    return family


def family_for_short_name(short_name: str) -> PlatformFamily | None:
    """Return the catalog family registered under a short name, if any."""
    return _BY_SHORT_NAME.get(short_name.lower())
