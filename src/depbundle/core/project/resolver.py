"""Locating referenced projects by name.

A dependency whose name matches a project is treated as a project
reference. Projects are searched for as ``<search path>/<name>/project.yaml``;
by default the search path is the parent directory of the root project.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path

from depbundle.core.project.loader import find_project_file, load_project
from depbundle.core.project.models import Project
from depbundle.exceptions import ManifestError

logger = logging.getLogger(__name__)


class ProjectResolver:
    """Find projects by name, caching every lookup (hits and misses)."""

    def __init__(
        self, search_paths: Iterable[Path] = (), projects: Iterable[Project] = ()
    ) -> None:
        self._search_paths = [Path(p) for p in search_paths]
        self._projects: dict[str, Project | None] = {}
        self._lock = threading.Lock()
        for project in projects:
            self.add(project)

    @classmethod
    def for_project(cls, project: Project) -> ProjectResolver:
        """Resolver seeded with *project*, searching its sibling directories."""
        return cls([project.project_directory.parent], [project])

    def add(self, project: Project) -> None:
        with self._lock:
            self._projects[project.name] = project

    def find(self, name: str) -> Project | None:
        with self._lock:
            if name in self._projects:
                return self._projects[name]

        found: Project | None = None
        for search_path in self._search_paths:
            candidate = search_path / name
            if not candidate.is_dir() or find_project_file(candidate) is None:
                continue
            try:
                found, warnings = load_project(candidate)
            except ManifestError:
                logger.warning("Ignoring unreadable project manifest in %s", candidate, exc_info=True)
                continue
            for w in warnings:
                logger.warning("%s(%d,%d): %s", w.path, w.line, w.column, w.message)
            break

        with self._lock:
            self._projects[name] = found
        return found
