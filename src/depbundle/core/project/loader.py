"""Loading ``project.yaml`` manifests.

Manifest format::

    name: MyApp                 # defaults to the directory name
    version: 1.0.0              # defaults to 1.0.0
    webroot: wwwroot
    dependencies:
      Newtonsoft.Json: 6.0.6
      MyLib: ""                 # a sibling project, any version
    frameworks:
      dnx451:
        dependencies:
          System.Net.Http: "[4.0,5.0)"
      dnxcore50: {}
    scripts:
      prebundle: ["npm install"]
      postbundle: "echo done"

Unknown top-level keys are reported as ``ManifestWarning`` entries with
their line and column; malformed values raise ``ManifestError``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from depbundle.core.dependency.models import PackageDependency, Version
from depbundle.core.packages.archive import load_manifest_text
from depbundle.core.platform import TargetPlatform
from depbundle.core.project.models import ManifestWarning, Project
from depbundle.exceptions import ManifestError

logger = logging.getLogger(__name__)

PROJECT_FILE_NAME = "project.yaml"
DEFAULT_PROJECT_VERSION = "1.0.0"

_KNOWN_KEYS = frozenset(
    {"name", "version", "description", "webroot", "dependencies", "frameworks", "scripts"}
)


def normalize_project_dir(path: Path | str) -> Path:
    """Resolve *path* to an absolute project directory.

    A path to a file (typically the manifest itself) resolves to its parent.
    """
    candidate = Path(path).expanduser()
    if candidate.is_file():
        candidate = candidate.parent
    return candidate.resolve()


def find_project_file(project_dir: Path) -> Path | None:
    manifest = project_dir / PROJECT_FILE_NAME
    return manifest if manifest.is_file() else None


def _unknown_key_warnings(text: str, path: Path) -> list[ManifestWarning]:
    node = yaml.compose(text)
    if not isinstance(node, yaml.MappingNode):
        return []
    warnings: list[ManifestWarning] = []
    for key_node, _ in node.value:
        key = key_node.value
        if key not in _KNOWN_KEYS:
            mark = key_node.start_mark
            warnings.append(
                ManifestWarning(
                    message=f"Unknown property '{key}'",
                    path=str(path),
                    line=mark.line + 1,
                    column=mark.column + 1,
                )
            )
    return warnings


def _parse_dependencies(value: Any, path: Path) -> list[PackageDependency]:
    if value is None:
        return []
    if not isinstance(value, dict):
        raise ManifestError(f"{path}: 'dependencies' must be a mapping")
    deps: list[PackageDependency] = []
    for name, spec in value.items():
        if isinstance(spec, dict):
            spec = spec.get("version")
        try:
            deps.append(PackageDependency.parse(str(name), None if spec is None else str(spec)))
        except ValueError as exc:
            raise ManifestError(f"{path}: dependency {name!r}: {exc}") from exc
    return deps


def _parse_scripts(value: Any, path: Path) -> dict[str, list[str]]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ManifestError(f"{path}: 'scripts' must be a mapping")
    scripts: dict[str, list[str]] = {}
    for stage, commands in value.items():
        if isinstance(commands, str):
            commands = [commands]
        if not isinstance(commands, list):
            raise ManifestError(f"{path}: script {stage!r} must be a string or list")
        scripts[str(stage)] = [str(c) for c in commands]
    return scripts


def load_project(project_dir: Path | str) -> tuple[Project, list[ManifestWarning]]:
    """Load the project whose manifest lives in *project_dir*.

    Returns:
        The parsed ``Project`` and any manifest warnings.

    Raises:
        FileNotFoundError: If the directory has no ``project.yaml``.
        ManifestError: If the manifest is malformed.
    """
    directory = normalize_project_dir(project_dir)
    manifest = find_project_file(directory)
    if manifest is None:
        raise FileNotFoundError(f"Unable to locate {PROJECT_FILE_NAME} in {directory}")

    try:
        text = manifest.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ManifestError(f"{manifest}: not UTF-8 text") from exc
    try:
        data = load_manifest_text(text) or {}
        warnings = _unknown_key_warnings(text, manifest)
    except yaml.YAMLError as exc:
        raise ManifestError(f"{manifest}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"{manifest}: top level must be a mapping")

    try:
        version = Version(str(data.get("version") or DEFAULT_PROJECT_VERSION))
    except ValueError as exc:
        raise ManifestError(f"{manifest}: {exc}") from exc

    frameworks = data.get("frameworks") or {}
    if not isinstance(frameworks, dict):
        raise ManifestError(f"{manifest}: 'frameworks' must be a mapping")
    platform_dependencies: dict[TargetPlatform, list[PackageDependency]] = {}
    for short_name, block in frameworks.items():
        try:
            platform = TargetPlatform.parse(str(short_name))
        except ValueError as exc:
            raise ManifestError(f"{manifest}: {exc}") from exc
        block = block or {}
        if not isinstance(block, dict):
            raise ManifestError(f"{manifest}: framework {short_name!r} must be a mapping")
        platform_dependencies[platform] = _parse_dependencies(block.get("dependencies"), manifest)

    webroot = data.get("webroot")
    project = Project(
        name=str(data.get("name") or directory.name),
        version=version,
        project_directory=directory,
        webroot=str(webroot) if webroot else None,
        dependencies=_parse_dependencies(data.get("dependencies"), manifest),
        platform_dependencies=platform_dependencies,
        scripts=_parse_scripts(data.get("scripts"), manifest),
    )
    logger.debug(
        "Loaded project %s %s (%d platforms)",
        project.name, project.version, len(platform_dependencies),
    )
    return project, warnings
