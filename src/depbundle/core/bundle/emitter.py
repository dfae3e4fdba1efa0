"""Writing the bundle output tree.

``BundleEmitter`` takes a merged ``BundleRoot`` and the lockfile built for it
and lays out the output directory. Each package archive is copied next to a
``<archive>.sha512`` file holding its lockfile hash. Project sources are
copied without build output folders, and the bundled project's web root is
copied to its own top-level output folder.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from depbundle.cancellation import CancellationToken
from depbundle.core.bundle.models import BundlePackage, BundleProject, BundleRoot
from depbundle.core.lockfile import LOCKFILE_NAME, Lockfile, compute_sha
from depbundle.core.packages.archive import archive_file_name

logger = logging.getLogger(__name__)

HASH_FILE_SUFFIX = ".sha512"
EXCLUDED_SOURCE_FOLDERS = frozenset({"bin", "obj", ".git"})


class BundleEmitter:
    """Emit a ``BundleRoot`` to disk."""

    def __init__(self, cancellation: CancellationToken | None = None) -> None:
        self._cancellation = cancellation or CancellationToken()

    def emit(self, root: BundleRoot, lockfile: Lockfile) -> Path:
        """Write the output tree and return the bundled project's lockfile path."""
        if root.overwrite and root.output_path.exists():
            logger.debug("Clearing output directory %s", root.output_path)
            shutil.rmtree(root.output_path)
        root.app_root.mkdir(parents=True, exist_ok=True)

        for package in root.packages:
            self._cancellation.raise_if_cancelled()
            self._emit_package(root, package, lockfile)

        for bundle_project in root.projects:
            self._cancellation.raise_if_cancelled()
            self._emit_project(root, bundle_project)

        for runtime in root.runtimes:
            self._cancellation.raise_if_cancelled()
            target = root.runtimes_path / runtime.name
            logger.debug("Copying runtime %s", runtime.name)
            shutil.copytree(runtime.path, target, dirs_exist_ok=True)

        lockfile_path = root.project_path(root.project.name) / LOCKFILE_NAME
        lockfile.write(lockfile_path)
        return lockfile_path

    def _emit_package(self, root: BundleRoot, package: BundlePackage, lockfile: Lockfile) -> None:
        content = package.package
        version = str(content.version)
        target_dir = root.packages_path / content.name / version
        target_dir.mkdir(parents=True, exist_ok=True)
        archive = target_dir / archive_file_name(content.name, version)

        with content.open_content_stream() as source, archive.open("wb") as target:
            shutil.copyfileobj(source, target)

        entry = lockfile.get_library(content.name, version)
        if entry is not None:
            sha = entry.sha
        else:
            with archive.open("rb") as stream:
                sha = compute_sha(stream, self._cancellation)
        archive.with_name(archive.name + HASH_FILE_SUFFIX).write_text(sha, encoding="utf-8")
        logger.debug("Emitted package %s %s", content.name, version)

    def _emit_project(self, root: BundleRoot, bundle_project: BundleProject) -> None:
        project = bundle_project.project
        target = root.project_path(project.name)
        if not root.no_source:
            output = root.output_path.resolve()
            skipped = {bundle_project.wwwroot} if bundle_project.wwwroot else set()

            def _ignore(directory: str, names: list[str]) -> set[str]:
                ignored: set[str] = set()
                base = Path(directory)
                for name in names:
                    if base == project.project_directory and (
                        name in EXCLUDED_SOURCE_FOLDERS or name in skipped
                    ):
                        ignored.add(name)
                    elif (base / name).resolve() == output:
                        ignored.add(name)
                return ignored

            shutil.copytree(
                project.project_directory, target, ignore=_ignore, dirs_exist_ok=True
            )
        else:
            target.mkdir(parents=True, exist_ok=True)

        if bundle_project.wwwroot:
            source = project.project_directory / bundle_project.wwwroot
            out_name = bundle_project.wwwroot_out or bundle_project.wwwroot
            if source.is_dir():
                shutil.copytree(source, root.output_path / out_name, dirs_exist_ok=True)
        logger.debug("Emitted project %s", project.name)
