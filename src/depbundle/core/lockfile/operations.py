"""Lockfile operations --- deserialization, validation, and diffing.

This module extends the ``Lockfile`` class (defined in ``lockfile.py``) with
classmethods and instance methods for:

- **Deserialization:** ``from_dict``, ``from_json``, ``read`` (disk).
- **Validation:** internal consistency checks (hashes, versions, groups).
- **Diffing:** structured comparison of two lockfiles.

These are attached to the ``Lockfile`` class at import time (in
``__init__.py``) to keep each source file focused while presenting a single
unified API to callers.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from depbundle.core.dependency.models import PackageDependency
from depbundle.core.lockfile.models import (
    LockFileFrameworkGroup,
    LockFileLibrary,
    _SHA_RE,
)
from depbundle.exceptions import LockfileError


def _group_from_dict(data: dict[str, Any]) -> LockFileFrameworkGroup:
    try:
        dependencies = [
            PackageDependency.parse(d["name"], d.get("versionRange"))
            for d in data.get("dependencies", [])
        ]
    except (KeyError, TypeError, ValueError) as exc:
        raise LockfileError(f"Invalid dependency entry: {exc}") from exc
    return LockFileFrameworkGroup(
        target_platform=data.get("targetPlatform", ""),
        dependencies=dependencies,
        framework_assemblies=list(data.get("frameworkAssemblies", [])),
        runtime_assemblies=list(data.get("runtimeAssemblies", [])),
        compile_time_assemblies=list(data.get("compileTimeAssemblies", [])),
    )


def _from_dict(cls: type, data: dict[str, Any]) -> Any:
    """Deserialize a lockfile from a dict (parsed JSON).

    Fields not present in the dict use default values.

    Raises:
        LockfileError: If a library entry is structurally invalid.
    """
    lf = cls()
    for entry in data.get("libraries", []):
        if not isinstance(entry, dict) or "name" not in entry:
            raise LockfileError("Library entries require a 'name'")
        library = LockFileLibrary(
            name=entry["name"],
            version=entry.get("version", ""),
            sha=entry.get("sha", ""),
            files=list(entry.get("files", [])),
            framework_groups=[_group_from_dict(g) for g in entry.get("frameworkGroups", [])],
        )
        lf._libraries[library.key] = library
    return lf


def _from_json(cls: type, json_str: str) -> Any:
    """Deserialize from a JSON string.

    Raises:
        LockfileError: If the string is not valid JSON or not a lockfile.
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise LockfileError(f"Lockfile is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise LockfileError("Lockfile root must be an object")
    return cls.from_dict(data)


def _read(cls: type, path: Path) -> Any:
    """Read a lockfile from disk.

    Raises:
        FileNotFoundError: If the file does not exist.
        LockfileError: If the content is not a valid lockfile.
    """
    return cls.from_json(path.read_text(encoding="utf-8"))


def _validate(self: Any) -> list[str]:
    """Validate the lockfile for internal consistency.

    Checks:

    1. **Version non-empty** for every library.
    2. **Hash format:** every ``sha`` is a base64 SHA-512 digest.
    3. **Framework groups:** every library has at least one, and no
       platform appears twice in the same library.
    4. **Compile-time subset:** compile-time assemblies are either the
       runtime assemblies or a single contract assembly listed in ``files``.

    Returns:
        List of validation error messages. Empty means the lockfile is valid.
    """
    errors: list[str] = []

    for (name, version), library in sorted(self._libraries.items()):
        label = f"{name} {version}".strip()
        if not version:
            errors.append(f"Library {name!r} has empty version string")
        if not _SHA_RE.match(library.sha):
            errors.append(f"Library {label!r} has invalid sha: {library.sha!r}")
        if not library.framework_groups:
            errors.append(f"Library {label!r} has no framework groups")

        seen: set[str] = set()
        for group in library.framework_groups:
            if group.target_platform in seen:
                errors.append(
                    f"Library {label!r} lists platform "
                    f"{group.target_platform!r} more than once"
                )
            seen.add(group.target_platform)

            compile_time = group.compile_time_assemblies
            if compile_time and compile_time != group.runtime_assemblies:
                if len(compile_time) != 1 or compile_time[0] not in library.files:
                    errors.append(
                        f"Library {label!r} compile-time assemblies for "
                        f"{group.target_platform!r} are not in the package"
                    )

    return errors


def _diff(self: Any, other: Any) -> dict[str, Any]:
    """Compare two lockfiles and return differences.

    - **added**: ``name version`` present in ``other`` but not in ``self``.
    - **removed**: present in ``self`` but not in ``other``.
    - **changed**: present in both with a different sha, file list, or
      framework groups.
    """
    self_keys = set(self._libraries)
    other_keys = set(other._libraries)

    added = [f"{n} {v}" for n, v in sorted(other_keys - self_keys)]
    removed = [f"{n} {v}" for n, v in sorted(self_keys - other_keys)]

    changes: list[dict[str, Any]] = []
    for key in sorted(self_keys & other_keys):
        old = self._libraries[key]
        new = other._libraries[key]
        label = f"{key[0]} {key[1]}"
        if old.sha != new.sha:
            changes.append({"name": label, "field": "sha", "old": old.sha, "new": new.sha})
        if old.files != new.files:
            changes.append({"name": label, "field": "files", "old": old.files, "new": new.files})
        old_groups = [g.to_dict() for g in old.framework_groups]
        new_groups = [g.to_dict() for g in new.framework_groups]
        if old_groups != new_groups:
            changes.append({
                "name": label,
                "field": "frameworkGroups",
                "old": [g["targetPlatform"] for g in old_groups],
                "new": [g["targetPlatform"] for g in new_groups],
            })

    return {"added": added, "removed": removed, "changed": changes}
