"""Configuration checks run before anything touches the filesystem.

Checks run in a fixed order and the first failure aborts. The reserved
output-name check runs first so that a colliding web root output name is
rejected regardless of the rest of the configuration.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from depbundle.config import BundleOptions
from depbundle.core.bundle.models import APP_ROOT_NAME
from depbundle.core.project.loader import (
    PROJECT_FILE_NAME,
    find_project_file,
    normalize_project_dir,
)
from depbundle.exceptions import ConfigurationError


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one named check. ``error`` is None when it passed."""

    name: str
    error: ConfigurationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class WebRoot:
    """Effective web root folder and its output name (both optional)."""

    base: str | None
    out: str | None


def resolve_webroot(
    override: str | None, override_out: str | None, declared: str | None
) -> WebRoot:
    """Reconcile web root overrides with the project's declared web root."""
    base = override or declared
    out = override_out or base
    return WebRoot(base=base, out=out)


def check_reserved_name(
    options: BundleOptions, declared: str | None = None
) -> ConfigurationError | None:
    out = resolve_webroot(options.wwwroot, options.wwwroot_out, declared).out
    if out and out.strip().lower() == APP_ROOT_NAME:
        return ConfigurationError(
            f"'{APP_ROOT_NAME}' is a reserved folder name. "
            "Please choose another name for the wwwroot-out folder."
        )
    return None


def check_project_manifest(options: BundleOptions) -> ConfigurationError | None:
    directory = normalize_project_dir(options.project_dir)
    if find_project_file(directory) is None:
        return ConfigurationError(f"Unable to locate {PROJECT_FILE_NAME}.")
    return None


def check_webroot_out_has_base(
    options: BundleOptions, declared: str | None = None
) -> ConfigurationError | None:
    if options.wwwroot_out and not (options.wwwroot or declared):
        return ConfigurationError(
            "'--wwwroot-out' option can be used only when the '--wwwroot' option "
            "or 'webroot' in project.yaml is specified."
        )
    return None


def check_webroot_exists(
    options: BundleOptions, declared: str | None = None
) -> ConfigurationError | None:
    webroot = resolve_webroot(options.wwwroot, options.wwwroot_out, declared)
    if webroot.base is None:
        return None
    directory = normalize_project_dir(options.project_dir)
    if not (directory / webroot.base).is_dir():
        return ConfigurationError(
            f"The specified wwwroot folder '{webroot.base}' doesn't exist "
            "in the project directory."
        )
    return None


Check = Callable[[BundleOptions], "ConfigurationError | None"]


def run_checks(options: BundleOptions, checks: list[tuple[str, Check]]) -> list[CheckResult]:
    """Run *checks* in order, stopping after the first failure.

    Returns:
        The results of the checks that ran. The last one failed if any did.
    """
    results: list[CheckResult] = []
    for name, check in checks:
        result = CheckResult(name, check(options))
        results.append(result)
        if not result.ok:
            break
    return results


def validate_options(options: BundleOptions) -> list[CheckResult]:
    """Checks that need only the options: reserved names, then the manifest."""
    return run_checks(
        options,
        [
            ("reserved_name", check_reserved_name),
            ("project_manifest", check_project_manifest),
        ],
    )


def validate_webroot(options: BundleOptions, declared: str | None) -> list[CheckResult]:
    """Checks that need the project's declared web root."""
    return run_checks(
        options,
        [
            ("reserved_name", lambda o: check_reserved_name(o, declared)),
            ("webroot_out_base", lambda o: check_webroot_out_has_base(o, declared)),
            ("webroot_exists", lambda o: check_webroot_exists(o, declared)),
        ],
    )


def first_error(results: list[CheckResult]) -> ConfigurationError | None:
    for result in results:
        if result.error is not None:
            return result.error
    return None
