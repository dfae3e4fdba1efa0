"""Zip-archive packages with an embedded ``package.yaml`` manifest.

Archive layout::

    Foo.1.0.0.pkg
    ├── package.yaml
    ├── lib/net45/Foo.dll
    ├── lib/contract/Foo.dll
    └── content/readme.txt

Manifest format::

    id: Foo
    version: 1.0.0
    dependencySets:
      - platform: net45            # omit for "no specific platform"
        dependencies:
          - {id: Bar, version: "[1.0,2.0)"}
    frameworkAssemblies:
      - name: System.Net.Http
        platforms: [net45]        # omit or empty for none
    references:
      - platform: net45
        files: [Foo.dll]

The content stream is the archive file itself, so the integrity hash covers
the package exactly as distributed.
"""

from __future__ import annotations

import logging
import zipfile
from functools import cached_property
from pathlib import Path
from typing import Any, BinaryIO

import yaml

from depbundle.core.dependency.models import (
    LibraryIdentity,
    PackageDependency,
    Version,
)
from depbundle.core.packages.base import (
    FrameworkAssemblyReference,
    PackageContent,
    PlatformVariants,
    assembly_reference_variants,
    framework_assembly_variants,
)
from depbundle.core.platform import TargetPlatform
from depbundle.exceptions import ManifestError

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.yaml"
ARCHIVE_EXTENSION = ".pkg"


def archive_file_name(name: str, version: Version | str) -> str:
    """Conventional archive file name: ``<name>.<version>.pkg``."""
    return f"{name}.{version}{ARCHIVE_EXTENSION}"


class ManifestLoader(yaml.SafeLoader):
    """``SafeLoader`` that keeps numeric scalars as the text authored.

    Unquoted versions such as ``1.10`` would otherwise load as the float
    ``1.1``.
    """


ManifestLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag not in ("tag:yaml.org,2002:int", "tag:yaml.org,2002:float")
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_manifest_text(text: str) -> Any:
    """Parse manifest YAML with numeric scalars kept as strings."""
    return yaml.load(text, Loader=ManifestLoader)


def _optional_platform(value: Any, source: Path) -> TargetPlatform | None:
    if value in (None, ""):
        return None
    try:
        return TargetPlatform.parse(str(value))
    except ValueError as exc:
        raise ManifestError(f"{source}: {exc}") from exc


def _as_list(value: Any, what: str, source: Path) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ManifestError(f"{source}: '{what}' must be a list")
    return value


def _entries(value: Any, what: str, source: Path) -> list[dict[str, Any]]:
    entries = _as_list(value, what, source)
    for entry in entries:
        if not isinstance(entry, dict):
            raise ManifestError(f"{source}: '{what}' entries must be mappings")
    return entries


class ArchivePackage(PackageContent):
    """A package stored as a zip archive with a ``package.yaml`` manifest.

    The manifest is parsed lazily on first access and cached.

    Raises:
        ManifestError: On access, if the archive or its manifest is invalid.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    # -- Manifest -----------------------------------------------------------

    @cached_property
    def _archive_listing(self) -> tuple[dict[str, Any], list[str]]:
        try:
            with zipfile.ZipFile(self._path) as archive:
                names = archive.namelist()
                if MANIFEST_NAME not in names:
                    raise ManifestError(f"{self._path}: missing {MANIFEST_NAME}")
                raw = archive.read(MANIFEST_NAME).decode("utf-8")
        except zipfile.BadZipFile as exc:
            raise ManifestError(f"{self._path}: not a package archive") from exc
        except UnicodeDecodeError as exc:
            raise ManifestError(f"{self._path}: {MANIFEST_NAME} is not UTF-8") from exc
        except OSError as exc:
            raise ManifestError(f"{self._path}: cannot read archive: {exc}") from exc

        try:
            manifest = load_manifest_text(raw) or {}
        except yaml.YAMLError as exc:
            raise ManifestError(f"{self._path}: invalid {MANIFEST_NAME}: {exc}") from exc
        if not isinstance(manifest, dict):
            raise ManifestError(f"{self._path}: {MANIFEST_NAME} must be a mapping")

        files = [n for n in names if n != MANIFEST_NAME and not n.endswith("/")]
        return manifest, files

    @property
    def _manifest(self) -> dict[str, Any]:
        return self._archive_listing[0]

    @cached_property
    def identity(self) -> LibraryIdentity:
        manifest = self._manifest
        name = manifest.get("id")
        version = manifest.get("version")
        if not name or version is None:
            raise ManifestError(f"{self._path}: manifest requires 'id' and 'version'")
        try:
            return LibraryIdentity(str(name), Version(str(version)))
        except ValueError as exc:
            raise ManifestError(f"{self._path}: {exc}") from exc

    # -- PackageContent -----------------------------------------------------

    def get_files(self) -> list[str]:
        return list(self._archive_listing[1])

    def open_content_stream(self) -> BinaryIO:
        return self._path.open("rb")

    def get_dependency_set_variants(self) -> PlatformVariants:
        variants: PlatformVariants = []
        entries = _entries(self._manifest.get("dependencySets"), "dependencySets", self._path)
        for entry in entries:
            tag = _optional_platform(entry.get("platform"), self._path)
            deps: list[PackageDependency] = []
            for dep in _as_list(entry.get("dependencies"), "dependencies", self._path):
                if not isinstance(dep, dict) or not dep.get("id"):
                    raise ManifestError(f"{self._path}: dependency entries require 'id'")
                version = dep.get("version")
                try:
                    deps.append(PackageDependency.parse(
                        str(dep["id"]), None if version is None else str(version)
                    ))
                except ValueError as exc:
                    raise ManifestError(f"{self._path}: {exc}") from exc
            variants.append((tag, deps))
        return variants

    @cached_property
    def _framework_assemblies(self) -> list[FrameworkAssemblyReference]:
        refs: list[FrameworkAssemblyReference] = []
        entries = _as_list(
            self._manifest.get("frameworkAssemblies"), "frameworkAssemblies", self._path
        )
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("name"):
                raise ManifestError(f"{self._path}: framework assemblies require 'name'")
            platforms = tuple(
                p
                for p in (
                    _optional_platform(v, self._path)
                    for v in _as_list(entry.get("platforms"), "platforms", self._path)
                )
                if p is not None
            )
            refs.append(FrameworkAssemblyReference(str(entry["name"]), platforms))
        return refs

    def get_framework_assembly_variants(self) -> PlatformVariants:
        return framework_assembly_variants(self._framework_assemblies)

    def get_assembly_reference_variants(self) -> PlatformVariants:
        return assembly_reference_variants(self.get_files())

    def get_named_reference_set_variants(self) -> PlatformVariants:
        variants: PlatformVariants = []
        for entry in _entries(self._manifest.get("references"), "references", self._path):
            tag = _optional_platform(entry.get("platform"), self._path)
            names = [str(n) for n in _as_list(entry.get("files"), "files", self._path)]
            variants.append((tag, names))
        return variants

    def __repr__(self) -> str:
        return f"ArchivePackage({str(self._path)!r})"
