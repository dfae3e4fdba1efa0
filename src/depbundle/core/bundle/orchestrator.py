"""Bundle pipeline.

``BundleOrchestrator.run()`` drives one bundle run through its stages::

    VALIDATE -> PREPARE -> PREBUNDLE -> RESOLVE_RUNTIMES -> WALK -> MERGE
             -> EMIT -> POSTBUNDLE -> NATIVE_IMAGES

Each stage either succeeds or produces a fatal ``DepBundleError``, which is
reported and stops the run. Unresolved dependencies are not fatal: they are
reported as warnings, emission still happens, and the run's overall result
is a failure.

The target platforms of the walk are the platforms of the requested
runtimes, else every platform the project declares, else the platform of
the default runtime. Walks for different platforms are independent and may
run on a thread pool; their contexts are registered in platform order once
all walks finish.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from depbundle.cancellation import CancellationToken
from depbundle.config import BundleOptions, RuntimeEnvironment, default_packages_root
from depbundle.core.bundle.emitter import BundleEmitter
from depbundle.core.bundle.hooks import HookRunner, HookStage, NullHookRunner
from depbundle.core.bundle.models import BundlePackage, BundleProject, BundleRoot, BundleRuntime
from depbundle.core.bundle.native import NativeImageGenerator
from depbundle.core.bundle.reports import LoggingReports, Reports
from depbundle.core.bundle.results import BundleResult, Stage, StageResult
from depbundle.core.bundle.runtimes import (
    DEFAULT_RUNTIME_NAME,
    LocatedRuntime,
    locate_runtime,
    platform_for_runtime,
    resolve_runtime_name,
)
from depbundle.core.bundle.validation import (
    WebRoot,
    first_error,
    resolve_webroot,
    validate_options,
    validate_webroot,
)
from depbundle.core.dependency import (
    DependencyWalker,
    LibraryKind,
    LibraryRegistry,
    ResolutionContext,
)
from depbundle.core.lockfile import Lockfile, LockFileBuilder
from depbundle.core.packages import DirectoryPackageRepository, PackageContent, PackageRepository
from depbundle.core.platform import TargetPlatform, distinct_platforms
from depbundle.core.project import (
    ManifestWarning,
    Project,
    ProjectResolver,
    load_project,
    normalize_project_dir,
)
from depbundle.exceptions import (
    ConfigurationError,
    DepBundleError,
    HookFailure,
    ManifestError,
    NativeImageError,
    PlatformMismatchError,
    RuntimeNotFoundError,
    UnresolvedDependencyWarning,
)

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FOLDER = Path("bin") / "output"

ProjectLoader = Callable[[Path], "tuple[Project, list[ManifestWarning]]"]


class BundleOrchestrator:
    """Run the bundle pipeline for one project.

    Args:
        options: What to bundle and where.
        environment: Runtime lookup environment; read from ``os.environ``
            when omitted.
        reports: Report sink for user-facing messages.
        hooks: Runner for the project's lifecycle scripts.
        repository: Package-content provider. Defaults to a directory
            repository at ``options.packages_root``.
        project_loader: Loads the project manifest from a directory.
        native_image_generator: Required when ``options.native`` is set.
        emitter: Writes the output tree.
        cancellation: Checked by walks, hashing and emission.
    """

    def __init__(
        self,
        options: BundleOptions,
        environment: RuntimeEnvironment | None = None,
        reports: Reports | None = None,
        hooks: HookRunner | None = None,
        repository: PackageRepository | None = None,
        project_loader: ProjectLoader = load_project,
        native_image_generator: NativeImageGenerator | None = None,
        emitter: BundleEmitter | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        self._options = options
        self._environment = environment or RuntimeEnvironment.from_environ()
        self._reports = reports or LoggingReports()
        self._hooks = hooks or NullHookRunner()
        self._repository = repository
        self._project_loader = project_loader
        self._native = native_image_generator
        self._cancellation = cancellation or CancellationToken()
        self._emitter = emitter or BundleEmitter(self._cancellation)

        self._project: Project | None = None
        self._webroot = WebRoot(None, None)
        self._output_path: Path | None = None
        self._runtimes: list[LocatedRuntime] = []
        self._registry = LibraryRegistry()
        self._result = BundleResult()

    # -- Pipeline -----------------------------------------------------------

    def run(self) -> BundleResult:
        """Run every stage until one fails or all succeed."""
        started = time.perf_counter()
        self._result = BundleResult()

        stages: list[tuple[Stage, Callable[[], None]]] = [
            (Stage.VALIDATE, self._validate),
            (Stage.PREPARE, lambda: self._run_hook(HookStage.PREPARE)),
            (Stage.PREBUNDLE, lambda: self._run_hook(HookStage.PREBUNDLE)),
            (Stage.RESOLVE_RUNTIMES, self._resolve_runtimes),
            (Stage.WALK, self._walk),
            (Stage.MERGE, self._merge),
            (Stage.EMIT, self._emit),
            (Stage.POSTBUNDLE, lambda: self._run_hook(HookStage.POSTBUNDLE)),
        ]
        if self._options.native:
            stages.append((Stage.NATIVE_IMAGES, self._generate_native_images))

        for stage, step in stages:
            logger.debug("Starting stage %s", stage.value)
            try:
                step()
            except DepBundleError as exc:
                self._result.stages.append(StageResult(stage, exc))
                self._report_error(exc)
                break
            self._result.stages.append(StageResult(stage))

        self._result.elapsed = time.perf_counter() - started
        if self._result.error is None:
            self._reports.info(f"Time elapsed {self._format_elapsed(self._result.elapsed)}")
        return self._result

    @property
    def registry(self) -> LibraryRegistry:
        return self._registry

    # -- Stages -------------------------------------------------------------

    def _validate(self) -> None:
        error = first_error(validate_options(self._options))
        if error is not None:
            raise error

        project_dir = normalize_project_dir(self._options.project_dir)
        try:
            project, warnings = self._project_loader(project_dir)
        except FileNotFoundError as exc:
            raise ConfigurationError(str(exc)) from exc
        except ManifestError as exc:
            raise ConfigurationError(f"Invalid project manifest: {exc}") from exc
        for warning in warnings:
            self._reports.info(f"Warning: At line {warning.line} - {warning.message}")

        error = first_error(validate_webroot(self._options, project.webroot))
        if error is not None:
            raise error

        self._project = project
        self._webroot = resolve_webroot(
            self._options.wwwroot, self._options.wwwroot_out, project.webroot
        )
        self._output_path = Path(
            self._options.output_dir or project.project_directory / DEFAULT_OUTPUT_FOLDER
        ).resolve()

    def _run_hook(self, stage: HookStage) -> None:
        project = self._require_project()
        if not self._hooks.execute(project, stage, self._variable):
            raise HookFailure(self._hooks.error_message or f"{stage.value} script failed")

    def _resolve_runtimes(self) -> None:
        project = self._require_project()
        self._runtimes = []
        for requested in self._options.runtimes:
            name = resolve_runtime_name(requested, self._environment)
            if name != requested:
                self._reports.verbose(f"Resolved the active runtime as {name}")
            located = locate_runtime(name, self._environment)
            if not project.declares(located.platform):
                raise PlatformMismatchError(
                    f"'{located.platform}' is not a target platform of the "
                    "project being bundled"
                )
            self._runtimes.append(located)

    def _walk(self) -> None:
        project = self._require_project()
        platforms = self._target_platforms(project)
        repository = self._resolve_repository()
        resolver = ProjectResolver.for_project(project)

        def walk(platform: TargetPlatform) -> ResolutionContext:
            walker = DependencyWalker(platform, repository, resolver, self._cancellation)
            return walker.walk(project.name, project.version)

        workers = min(self._options.max_workers, len(platforms))
        if workers <= 1:
            contexts = [walk(platform) for platform in platforms]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                contexts = list(executor.map(walk, platforms))

        self._registry = LibraryRegistry()
        for context in contexts:
            if context.has_unresolved:
                message = context.missing_dependencies_warning()
                self._result.unresolved = True
                self._result.warnings.append(
                    UnresolvedDependencyWarning(message, str(context.platform))
                )
                self._reports.quiet(f"Warning: {message}")
            self._registry.register(context)

    def _merge(self) -> None:
        project = self._require_project()
        root = BundleRoot(
            project=project,
            output_path=self._output_path or project.project_directory / DEFAULT_OUTPUT_FOLDER,
            configuration=self._options.configuration,
            overwrite=self._options.overwrite,
            no_source=self._options.no_source,
        )
        for entry in self._registry.entries():
            root.library_contexts[entry.identity] = list(entry.contexts)
            source = entry.library.source
            if entry.kind is LibraryKind.PACKAGE and isinstance(source, PackageContent):
                root.packages.append(BundlePackage(source))
            elif entry.kind is LibraryKind.PROJECT and isinstance(source, Project):
                bundle_project = BundleProject(source)
                if source.name == project.name:
                    bundle_project.wwwroot = self._webroot.base
                    bundle_project.wwwroot_out = self._webroot.out
                root.projects.append(bundle_project)
        root.runtimes = [BundleRuntime(r.name, r.path) for r in self._runtimes]
        self._result.root = root

    def _emit(self) -> None:
        root = self._require_root()
        if self._options.native and self._native is None:
            raise NativeImageError("Fail to initiate native image generation process.")

        builder = LockFileBuilder(self._options.max_workers, self._cancellation)
        try:
            lockfile = Lockfile(builder.build(self._registry))
        except OSError as exc:
            raise DepBundleError(f"Failed to read package content: {exc}") from exc
        self._result.lockfile = lockfile
        try:
            path = self._emitter.emit(root, lockfile)
        except OSError as exc:
            raise DepBundleError(f"Failed to write bundle output: {exc}") from exc
        self._reports.verbose(f"Wrote {path}")

    def _generate_native_images(self) -> None:
        root = self._result.root
        if self._native is None or root is None:
            raise NativeImageError("Fail to initiate native image generation process.")
        if not self._native.generate(root):
            raise NativeImageError(self._native.error_message or "Native image generation failed.")

    # -- Helpers ------------------------------------------------------------

    def _require_project(self) -> Project:
        if self._project is None:
            raise ConfigurationError("The project has not been loaded")
        return self._project

    def _require_root(self) -> BundleRoot:
        if self._result.root is None:
            raise ConfigurationError("The bundle has not been merged")
        return self._result.root

    def _resolve_repository(self) -> PackageRepository:
        if self._repository is None:
            root = self._options.packages_root or default_packages_root()
            self._repository = DirectoryPackageRepository(root)
        return self._repository

    def _target_platforms(self, project: Project) -> list[TargetPlatform]:
        if self._runtimes:
            platforms = [runtime.platform for runtime in self._runtimes]
        elif project.declared_platforms:
            platforms = project.declared_platforms
        else:
            platforms = [platform_for_runtime(DEFAULT_RUNTIME_NAME)]
        return distinct_platforms(platforms)

    def _variable(self, name: str) -> str | None:
        project = self._project
        if project is None:
            return None
        values = {
            "project:Directory": str(project.project_directory),
            "project:Name": project.name,
            "project:Version": str(project.version),
            "project:Configuration": self._options.configuration,
        }
        if self._output_path is not None:
            values["bundle:OutputPath"] = str(self._output_path)
        return values.get(name)

    def _report_error(self, error: DepBundleError) -> None:
        self._reports.error(str(error))
        if isinstance(error, RuntimeNotFoundError) and error.probed_paths:
            self._reports.error("Locations probed:\n" + "\n".join(error.probed_paths))

    @staticmethod
    def _format_elapsed(seconds: float) -> str:
        minutes, secs = divmod(seconds, 60)
        hours, minutes = divmod(int(minutes), 60)
        return f"{hours:02d}:{minutes:02d}:{secs:09.6f}"
