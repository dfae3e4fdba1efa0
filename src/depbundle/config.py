"""Bundle configuration.

``BundleOptions`` carries everything a caller (the CLI or an embedding
tool) decides about one bundle run. ``RuntimeEnvironment`` captures the
environment variables that control runtime lookup, so the orchestrator
never reads ``os.environ`` directly and tests can pass a plain mapping.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

# Environment variable names.
HOME_ENV = "DNX_HOME"
GLOBAL_PATH_ENV = "DNX_GLOBAL_PATH"
ACTIVE_RUNTIME_ENV = "DNX_ACTIVE_RUNTIME"
PACKAGES_ENV = "DEPBUNDLE_PACKAGES"

DEFAULT_LOCAL_RUNTIME_HOME = ".dnx"
DEFAULT_PACKAGES_DIR = Path("~/.depbundle/packages")
DEFAULT_CONFIGURATION = "Debug"
SEARCH_PATH_SEPARATOR = ";"


def default_packages_root(environ: Mapping[str, str] | None = None) -> Path:
    """Packages root from ``DEPBUNDLE_PACKAGES``, else ``~/.depbundle/packages``."""
    env = os.environ if environ is None else environ
    configured = env.get(PACKAGES_ENV)
    return Path(configured).expanduser() if configured else DEFAULT_PACKAGES_DIR.expanduser()


@dataclass
class BundleOptions:
    """Options for one bundle run.

    Attributes:
        project_dir: Project directory, or a path to its manifest.
        output_dir: Output root; defaults to ``<project>/bin/output``.
        runtimes: Runtimes to embed (names, paths, or ``active``).
        configuration: Build configuration name passed to emission.
        wwwroot: Web root override (relative to the project directory).
        wwwroot_out: Output folder name for the web root.
        overwrite: Clear the output directory before emitting.
        no_source: Do not copy project sources into the bundle.
        native: Run native image generation after postbundle.
        packages_root: Package repository root.
        max_workers: Threads for per-platform walks and hashing.
    """

    project_dir: Path
    output_dir: Path | None = None
    runtimes: list[str] = field(default_factory=list)
    configuration: str = DEFAULT_CONFIGURATION
    wwwroot: str | None = None
    wwwroot_out: str | None = None
    overwrite: bool = False
    no_source: bool = False
    native: bool = False
    packages_root: Path | None = None
    max_workers: int = 1


@dataclass(frozen=True)
class RuntimeEnvironment:
    """Environment inputs for runtime lookup.

    Attributes:
        home: ``DNX_HOME`` -- ``;``-separated search segments that replace
            the default chain when set.
        global_path: ``DNX_GLOBAL_PATH`` -- appended to the default home.
        active_runtime: ``DNX_ACTIVE_RUNTIME`` -- full name of the active
            runtime, used to resolve the ``active`` alias.
        user_home: The user's home directory.
    """

    home: str | None = None
    global_path: str | None = None
    active_runtime: str | None = None
    user_home: Path = field(default_factory=Path.home)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> RuntimeEnvironment:
        env = os.environ if environ is None else environ
        return cls(
            home=env.get(HOME_ENV) or None,
            global_path=env.get(GLOBAL_PATH_ENV) or None,
            active_runtime=env.get(ACTIVE_RUNTIME_ENV) or None,
            user_home=Path(env.get("HOME") or Path.home()),
        )

    def search_segments(self) -> list[str]:
        """Ordered runtime-home segments, empty segments dropped."""
        if self.home:
            chain = self.home
        else:
            default_home = str(self.user_home / DEFAULT_LOCAL_RUNTIME_HOME)
            chain = default_home + SEARCH_PATH_SEPARATOR + (self.global_path or "")
        return [s for s in chain.split(SEARCH_PATH_SEPARATOR) if s.strip()]
