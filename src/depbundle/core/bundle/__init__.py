"""Bundle pipeline --- validate, resolve, merge, and emit a deployable tree.

Submodules:
    models        -- BundleRoot emission plan and its members
    results       -- Stage, StageResult, BundleResult
    validation    -- Ordered configuration checks
    runtimes      -- Runtime name resolution and probing
    hooks         -- Lifecycle script runners
    reports       -- Leveled report sinks
    native        -- NativeImageGenerator seam
    emitter       -- Output tree writer
    orchestrator  -- BundleOrchestrator (the pipeline)
"""

from depbundle.core.bundle.emitter import BundleEmitter
from depbundle.core.bundle.hooks import (
    HookRunner,
    HookStage,
    NullHookRunner,
    ScriptHookRunner,
    expand_variables,
)
from depbundle.core.bundle.models import (
    APP_ROOT_NAME,
    BundlePackage,
    BundleProject,
    BundleRoot,
    BundleRuntime,
)
from depbundle.core.bundle.native import NativeImageGenerator
from depbundle.core.bundle.orchestrator import BundleOrchestrator
from depbundle.core.bundle.reports import LoggingReports, RecordingReports, Reports
from depbundle.core.bundle.results import BundleResult, Stage, StageResult
from depbundle.core.bundle.runtimes import (
    LocatedRuntime,
    locate_runtime,
    platform_for_runtime,
    probe_paths,
    resolve_runtime_name,
)
from depbundle.core.bundle.validation import (
    CheckResult,
    resolve_webroot,
    validate_options,
    validate_webroot,
)

__all__ = [
    "APP_ROOT_NAME",
    "BundleEmitter",
    "BundleOrchestrator",
    "BundlePackage",
    "BundleProject",
    "BundleResult",
    "BundleRoot",
    "BundleRuntime",
    "CheckResult",
    "HookRunner",
    "HookStage",
    "LocatedRuntime",
    "LoggingReports",
    "NativeImageGenerator",
    "NullHookRunner",
    "RecordingReports",
    "Reports",
    "ScriptHookRunner",
    "Stage",
    "StageResult",
    "expand_variables",
    "locate_runtime",
    "platform_for_runtime",
    "probe_paths",
    "resolve_runtime_name",
    "resolve_webroot",
    "validate_options",
    "validate_webroot",
]
