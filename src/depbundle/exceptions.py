"""depbundle exception hierarchy.

All public exceptions inherit from DepBundleError, giving callers a single
base class to catch when they want to handle any depbundle-specific failure
without swallowing unrelated errors.

Bundle stages raise these, and the orchestrator turns each one into a
``StageResult`` (see ``depbundle.core.bundle.results``) and stops at the
first. Callers of ``BundleOrchestrator.run()`` never see them raised.
Library-level code such as manifest parsing and lockfile reading raises
them normally.
"""

from __future__ import annotations


class DepBundleError(Exception):
    """Base exception for all depbundle errors."""


class ConfigurationError(DepBundleError):
    """Raised when the bundle configuration is unusable.

    Covers a missing project manifest, a web root output override supplied
    without a base web root, a missing web root folder, and output folder
    names that collide with the reserved application root.
    """


class RuntimeNotFoundError(DepBundleError):
    """Raised when a requested runtime cannot be located.

    Carries every path that was probed, in probing order, so the report can
    show exactly where the runtime was looked for.

    Attributes:
        runtime: The runtime name that was requested.
        probed_paths: Ordered list of probed locations. Empty when the
            runtime name itself could not be resolved (e.g. the ``active``
            alias with no active runtime).
    """

    def __init__(
        self, message: str, runtime: str = "", probed_paths: list[str] | None = None
    ) -> None:
        super().__init__(message)
        self.runtime = runtime
        self.probed_paths = list(probed_paths or [])


class PlatformMismatchError(DepBundleError):
    """Raised when a requested runtime targets a platform the project does not declare."""


class HookFailure(DepBundleError):
    """Raised when a lifecycle hook (prepare, prebundle, postbundle) fails.

    The message is the hook runner's own error message, surfaced verbatim.
    """


class ManifestError(DepBundleError):
    """Raised when a project or package manifest cannot be parsed."""


class LockfileError(DepBundleError):
    """Raised for lockfile generation, reading, or integrity failures."""


class NativeImageError(DepBundleError):
    """Raised when native image generation cannot start or fails."""


class OperationCancelledError(DepBundleError):
    """Raised when a walk or hashing loop observes a cancellation request."""


class UnresolvedDependencyWarning(UserWarning):
    """Non-fatal: one or more graph nodes could not be located.

    Never raised by the pipeline. Instances are collected on the bundle
    result so callers can inspect them after the run.

    Attributes:
        platform: The platform whose walk produced the unresolved nodes.
    """

    def __init__(self, message: str, platform: str = "") -> None:
        super().__init__(message)
        self.platform = platform
