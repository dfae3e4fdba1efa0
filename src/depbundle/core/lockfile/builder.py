"""Lock-file entry construction from a merged library registry.

For every package in the registry the builder hashes the package content,
lists its files, and builds one ``LockFileFrameworkGroup`` per platform the
package was referenced under:

- **dependencies** -- the dependency set selected for the platform.
- **frameworkAssemblies** -- platform assemblies compatible with the
  platform. References that declare no supported platform are dropped
  unless the platform is desktop-class: in practice "none" means the full
  desktop reference assembly, even though it could in theory mean "any".
  Doing better needs the reference-assembly list of every platform, which
  is not available.
- **runtimeAssemblies** -- assembly files compatible with the platform,
  restricted by the package's named reference set when one applies
  (case-insensitive file name match). Anything without the library binary
  extension is dropped, since some packages put stray files under ``lib/``.
- **compileTimeAssemblies** -- the contract assembly
  (``lib/contract/<name>.dll``) on non-desktop platforms when the package
  ships one and has runtime assemblies; otherwise the runtime assemblies.

Building is idempotent: the same registry state always yields the same
entries in the same order.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from depbundle.cancellation import CancellationToken
from depbundle.core.dependency.registry import LibraryRegistry, RegistryEntry
from depbundle.core.lockfile.integrity import compute_sha
from depbundle.core.lockfile.models import LockFileFrameworkGroup, LockFileLibrary
from depbundle.core.packages.base import FrameworkAssemblyReference, PackageContent
from depbundle.core.platform import TargetPlatform, select

logger = logging.getLogger(__name__)

LIBRARY_EXTENSION = ".dll"
CONTRACT_FOLDER = "lib/contract"


def contract_path(package_name: str) -> str:
    """Conventional path of a package's contract assembly."""
    return posixpath.join(CONTRACT_FOLDER, package_name + LIBRARY_EXTENSION)


def _file_name(path: str) -> str:
    return posixpath.basename(path.replace("\\", "/"))


def _has_library_extension(path: str) -> bool:
    return posixpath.splitext(_file_name(path))[1].lower() == LIBRARY_EXTENSION


def select_framework_assemblies(
    package: PackageContent, platform: TargetPlatform
) -> list[str]:
    """Framework assembly names that apply to *platform*."""
    references: list[FrameworkAssemblyReference] = (
        select(platform, package.get_framework_assembly_variants()) or []
    )
    names: list[str] = []
    for reference in references:
        if not reference.supported_platforms and not platform.is_desktop:
            continue
        if reference.name not in names:
            names.append(reference.name)
    return names


def select_runtime_assemblies(package: PackageContent, platform: TargetPlatform) -> list[str]:
    """Assembly paths that apply to *platform*."""
    candidates: list[str] | None = select(platform, package.get_assembly_reference_variants())
    if not candidates:
        return []
    references = list(candidates)

    reference_set: list[str] | None = select(
        platform, package.get_named_reference_set_variants()
    )
    if reference_set is not None:
        allowed = {name.lower() for name in reference_set}
        references = [r for r in references if _file_name(r).lower() in allowed]

    return [r for r in references if _has_library_extension(r)]


def select_compile_time_assemblies(
    package_name: str,
    files: Sequence[str],
    runtime_assemblies: Sequence[str],
    platform: TargetPlatform,
) -> list[str]:
    """Compile-time assemblies given the already-selected runtime assemblies."""
    if not runtime_assemblies:
        return []
    contract = contract_path(package_name)
    if contract in files and not platform.is_desktop:
        return [contract]
    return list(runtime_assemblies)


class LockFileBuilder:
    """Build ``LockFileLibrary`` entries from a ``LibraryRegistry``.

    Args:
        max_workers: Threads used for hashing. ``1`` hashes inline.
        cancellation: Checked between packages and between content chunks.
    """

    def __init__(
        self, max_workers: int = 1, cancellation: CancellationToken | None = None
    ) -> None:
        self._max_workers = max(1, max_workers)
        self._cancellation = cancellation or CancellationToken()

    def build(self, registry: LibraryRegistry) -> list[LockFileLibrary]:
        """One entry per package in *registry*, in registry order."""
        entries = registry.packages()
        if self._max_workers == 1 or len(entries) <= 1:
            return [self.build_entry(entry) for entry in entries]
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            # map() yields in submission order regardless of completion order.
            return list(executor.map(self.build_entry, entries))

    def build_entry(self, entry: RegistryEntry) -> LockFileLibrary:
        package = entry.library.source
        if not isinstance(package, PackageContent):
            raise TypeError(f"Registry entry {entry.identity} has no package content")
        return self.build_library(package, entry.platforms)

    def build_library(
        self, package: PackageContent, platforms: Sequence[TargetPlatform]
    ) -> LockFileLibrary:
        """Hash, list, and build one framework group per platform."""
        self._cancellation.raise_if_cancelled()
        with package.open_content_stream() as stream:
            sha = compute_sha(stream, self._cancellation)
        files = package.get_files()
        logger.debug("Hashed %s (%d files)", package.identity, len(files))

        groups: list[LockFileFrameworkGroup] = []
        for platform in dict.fromkeys(platforms):
            dependencies = select(platform, package.get_dependency_set_variants()) or []
            runtime = select_runtime_assemblies(package, platform)
            groups.append(
                LockFileFrameworkGroup(
                    target_platform=str(platform),
                    dependencies=list(dependencies),
                    framework_assemblies=select_framework_assemblies(package, platform),
                    runtime_assemblies=runtime,
                    compile_time_assemblies=select_compile_time_assemblies(
                        package.name, files, runtime, platform
                    ),
                )
            )

        return LockFileLibrary(
            name=package.name,
            version=str(package.version),
            sha=sha,
            files=files,
            framework_groups=groups,
        )
