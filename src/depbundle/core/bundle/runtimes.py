"""Locating runtime binaries to embed in a bundle.

Runtime names look like ``dnx-clr-win-x86.1.0.0``: a prefix, a flavor
(``clr``, ``mono``, ``coreclr``), an OS/architecture, and a version. The
flavor determines the platform the runtime implies.

Lookup order for a runtime ``R``:

1. ``R`` itself, as a literal path.
2. Each runtime-home segment (``DNX_HOME``, or ``~/.dnx`` followed by
   ``DNX_GLOBAL_PATH``) joined with ``runtimes/R``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from depbundle.config import RuntimeEnvironment
from depbundle.core.platform import TargetPlatform
from depbundle.exceptions import PlatformMismatchError, RuntimeNotFoundError

logger = logging.getLogger(__name__)

ACTIVE_RUNTIME_ALIAS = "active"
RUNTIME_NAME_PREFIX = "dnx-"
RUNTIMES_FOLDER = "runtimes"
DEFAULT_RUNTIME_NAME = RUNTIME_NAME_PREFIX + "clr-win-x86.*"

_DESKTOP_RUNTIME = TargetPlatform("DNX", (4, 5, 1))
_CORE_RUNTIME = TargetPlatform("DNXCore", (5, 0))

RUNTIME_FLAVOR_PLATFORMS: dict[str, TargetPlatform] = {
    "clr": _DESKTOP_RUNTIME,
    "mono": _DESKTOP_RUNTIME,
    "coreclr": _CORE_RUNTIME,
}


@dataclass(frozen=True)
class LocatedRuntime:
    """A runtime found on disk.

    Attributes:
        name: Runtime name (final path component).
        path: Directory containing the runtime.
        platform: Platform implied by the runtime's flavor.
    """

    name: str
    path: Path
    platform: TargetPlatform


def platform_for_runtime(runtime: str) -> TargetPlatform:
    """Return the platform a runtime name implies.

    Raises:
        PlatformMismatchError: If the name has no recognizable flavor.
    """
    name = Path(runtime).name.lower()
    if name.startswith(RUNTIME_NAME_PREFIX):
        name = name[len(RUNTIME_NAME_PREFIX):]
    flavor = name.split("-", 1)[0]
    platform = RUNTIME_FLAVOR_PLATFORMS.get(flavor)
    if platform is None:
        raise PlatformMismatchError(
            f"Cannot determine the target platform of runtime '{runtime}'"
        )
    return platform


def resolve_runtime_name(runtime: str, environment: RuntimeEnvironment) -> str:
    """Replace the ``active`` alias with the environment's active runtime.

    Raises:
        RuntimeNotFoundError: If the alias is used and no active runtime is set.
    """
    if runtime.lower() != ACTIVE_RUNTIME_ALIAS:
        return runtime
    if not environment.active_runtime:
        raise RuntimeNotFoundError("Cannot resolve the active runtime name", runtime)
    logger.debug("Resolved the active runtime as %s", environment.active_runtime)
    return environment.active_runtime


def probe_paths(runtime: str, environment: RuntimeEnvironment) -> list[Path]:
    """Every candidate location for *runtime*, in probing order."""
    candidates = [Path(runtime)]
    for segment in environment.search_segments():
        base = Path(os.path.expanduser(os.path.expandvars(segment.strip())))
        candidates.append(base / RUNTIMES_FOLDER / runtime)
    return candidates


def locate_runtime(runtime: str, environment: RuntimeEnvironment) -> LocatedRuntime:
    """Find *runtime* on disk.

    Raises:
        RuntimeNotFoundError: If no candidate exists; ``probed_paths``
            lists every location tried.
        PlatformMismatchError: If the runtime's flavor is unknown.
    """
    probed: list[str] = []
    for candidate in probe_paths(runtime, environment):
        probed.append(str(candidate))
        if candidate.is_dir():
            logger.debug("Located runtime %s at %s", runtime, candidate)
            return LocatedRuntime(
                name=Path(runtime).name,
                path=candidate,
                platform=platform_for_runtime(runtime),
            )
    raise RuntimeNotFoundError(f"Unable to locate runtime '{runtime}'", runtime, probed)
