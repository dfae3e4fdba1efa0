"""Factories shared across the depbundle test suites.

Builds in-memory packages, on-disk package archives laid out the way
``DirectoryPackageRepository`` expects, and ``project.yaml`` manifests.
"""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Any

import yaml

from depbundle.core.dependency import LibraryIdentity, PackageDependency, Version
from depbundle.core.packages import FrameworkAssemblyReference, StaticPackage
from depbundle.core.packages.archive import MANIFEST_NAME, archive_file_name
from depbundle.core.platform import TargetPlatform

# Fixed timestamp so archives written twice are byte-identical.
_ZIP_DATE = (2020, 1, 1, 0, 0, 0)


def platform(text: str) -> TargetPlatform:
    return TargetPlatform.parse(text)


def make_package(
    name: str = "Foo",
    version: str = "1.0.0",
    files: list[str] | None = None,
    content: bytes | None = None,
    dependency_sets: list[tuple[str | None, list[tuple[str, str]]]] | None = None,
    framework_assemblies: list[tuple[str, list[str]]] | None = None,
    reference_sets: list[tuple[str | None, list[str]]] | None = None,
) -> StaticPackage:
    """Convenience factory for StaticPackage instances.

    Platform tags are given as short names; ``None`` means untagged.
    Dependencies are ``(name, range)`` pairs.
    """
    return StaticPackage(
        package_identity=LibraryIdentity(name, Version(version)),
        files=list(files or []),
        content=content if content is not None else f"{name} {version}".encode(),
        dependency_sets=[
            (platform(tag) if tag else None, [PackageDependency.parse(n, r) for n, r in deps])
            for tag, deps in (dependency_sets or [])
        ],
        framework_assemblies=[
            FrameworkAssemblyReference(n, tuple(platform(p) for p in platforms))
            for n, platforms in (framework_assemblies or [])
        ],
        reference_sets=[
            (platform(tag) if tag else None, list(names))
            for tag, names in (reference_sets or [])
        ],
    )


def write_archive(
    packages_root: Path,
    name: str,
    version: str,
    files: dict[str, bytes] | list[str] | None = None,
    manifest: dict[str, Any] | None = None,
    manifest_text: str | bytes | None = None,
) -> Path:
    """Write ``<root>/<name>/<version>/<name>.<version>.pkg`` and return its path.

    ``manifest`` entries are merged over ``{id, version}``. ``manifest_text``
    is written as ``package.yaml`` verbatim instead.
    """
    if isinstance(files, list):
        files = {f: f"content of {f}".encode() for f in files}
    data: dict[str, Any] = {"id": name, "version": version}
    data.update(manifest or {})

    target_dir = packages_root / name / version
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / archive_file_name(name, version)
    with zipfile.ZipFile(target, "w") as archive:
        if manifest_text is None:
            manifest_text = yaml.safe_dump(data)
        archive.writestr(zipfile.ZipInfo(MANIFEST_NAME, _ZIP_DATE), manifest_text)
        for path, payload in sorted((files or {}).items()):
            archive.writestr(zipfile.ZipInfo(path, _ZIP_DATE), payload)
    return target


def write_project(
    directory: Path,
    name: str | None = None,
    version: str = "1.0.0",
    dependencies: dict[str, str] | None = None,
    frameworks: dict[str, dict[str, str] | None] | None = None,
    webroot: str | None = None,
    scripts: dict[str, Any] | None = None,
    extra: dict[str, Any] | None = None,
) -> Path:
    """Write ``project.yaml`` into *directory* and return the directory.

    ``frameworks`` maps a short platform name to its dependency mapping.
    """
    directory.mkdir(parents=True, exist_ok=True)
    data: dict[str, Any] = {"version": version}
    if name is not None:
        data["name"] = name
    if dependencies:
        data["dependencies"] = dict(dependencies)
    if frameworks:
        data["frameworks"] = {
            short: ({"dependencies": dict(deps)} if deps else {})
            for short, deps in frameworks.items()
        }
    if webroot is not None:
        data["webroot"] = webroot
    if scripts:
        data["scripts"] = scripts
    data.update(extra or {})
    (directory / "project.yaml").write_text(yaml.safe_dump(data, sort_keys=False))
    return directory
