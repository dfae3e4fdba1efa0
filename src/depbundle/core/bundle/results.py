"""Stage and pipeline results of a bundle run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from depbundle.exceptions import DepBundleError, UnresolvedDependencyWarning

if TYPE_CHECKING:
    from depbundle.core.bundle.models import BundleRoot
    from depbundle.core.lockfile import Lockfile


class Stage(Enum):
    """Pipeline stages, in execution order."""

    VALIDATE = "validate"
    PREPARE = "prepare"
    PREBUNDLE = "prebundle"
    RESOLVE_RUNTIMES = "resolve_runtimes"
    WALK = "walk"
    MERGE = "merge"
    EMIT = "emit"
    POSTBUNDLE = "postbundle"
    NATIVE_IMAGES = "native_images"


@dataclass(frozen=True)
class StageResult:
    """Outcome of one stage. ``error`` is set when the stage failed fatally."""

    stage: Stage
    error: DepBundleError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BundleResult:
    """Outcome of a whole bundle run.

    Attributes:
        stages: Results of the stages that ran, in order. A fatal failure
            is always the last entry.
        unresolved: True if any walk left dependencies unresolved.
        warnings: One warning per platform with unresolved dependencies.
        lockfile: The emitted lockfile, if emission ran.
        root: The merged bundle plan, if merging ran.
        elapsed: Wall-clock seconds for the run.
    """

    stages: list[StageResult] = field(default_factory=list)
    unresolved: bool = False
    warnings: list[UnresolvedDependencyWarning] = field(default_factory=list)
    lockfile: Lockfile | None = None
    root: BundleRoot | None = None
    elapsed: float = 0.0

    @property
    def error(self) -> DepBundleError | None:
        """The fatal error that stopped the run, if any."""
        for result in self.stages:
            if result.error is not None:
                return result.error
        return None

    @property
    def failed_stage(self) -> Stage | None:
        for result in self.stages:
            if result.error is not None:
                return result.stage
        return None

    @property
    def success(self) -> bool:
        return self.error is None and not self.unresolved

    def ran(self, stage: Stage) -> bool:
        return any(result.stage is stage for result in self.stages)
