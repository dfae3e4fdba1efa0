"""``depbundle bundle <project-dir>`` --- Resolve, lock, and emit a bundle.

Resolves the project's dependencies for every target platform, writes
``project.lock.json``, and lays out a deployable output tree with the
project sources, its packages, and any requested runtimes.

Exit Codes:
    0 -- Bundle emitted with every dependency resolved.
    1 -- A stage failed, or some dependencies could not be resolved.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from depbundle.config import BundleOptions, RuntimeEnvironment
from depbundle.core.bundle import BundleOrchestrator, ScriptHookRunner


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
        force=True,
    )


@click.command("bundle")
@click.argument("project_dir", type=click.Path(exists=True))
@click.option(
    "--out", "-o", "output_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Output directory (default: <project>/bin/output).",
)
@click.option(
    "--runtime", "runtimes",
    multiple=True,
    help="Runtime to embed: a name, a path, or 'active'. Repeatable.",
)
@click.option(
    "--configuration",
    default="Debug",
    show_default=True,
    help="Build configuration name.",
)
@click.option("--wwwroot", default=None, help="Web root folder, overriding project.yaml.")
@click.option("--wwwroot-out", default=None, help="Output folder name for the web root.")
@click.option("--overwrite", is_flag=True, help="Clear the output directory first.")
@click.option("--no-source", is_flag=True, help="Do not copy project sources.")
@click.option(
    "--packages", "packages_root",
    type=click.Path(file_okay=False),
    default=None,
    help="Package repository root (default: $DEPBUNDLE_PACKAGES or ~/.depbundle/packages).",
)
@click.option(
    "--jobs", "-j",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Worker threads for platform walks and hashing.",
)
@click.option("--verbose", "-v", is_flag=True, help="Show verbose output and debug logs.")
def bundle_command(
    project_dir: str,
    output_dir: str | None,
    runtimes: tuple[str, ...],
    configuration: str,
    wwwroot: str | None,
    wwwroot_out: str | None,
    overwrite: bool,
    no_source: bool,
    packages_root: str | None,
    jobs: int,
    verbose: bool,
) -> None:
    """Bundle the project in PROJECT_DIR for deployment.

    Exit code 0 on success, 1 if a stage failed or any dependency is
    unresolved.
    """
    _configure_logging(verbose)

    options = BundleOptions(
        project_dir=Path(project_dir),
        output_dir=Path(output_dir) if output_dir else None,
        runtimes=list(runtimes),
        configuration=configuration,
        wwwroot=wwwroot,
        wwwroot_out=wwwroot_out,
        overwrite=overwrite,
        no_source=no_source,
        packages_root=Path(packages_root) if packages_root else None,
        max_workers=jobs,
    )

    from depbundle.cli.output import ConsoleReports, print_bundle_summary

    orchestrator = BundleOrchestrator(
        options,
        environment=RuntimeEnvironment.from_environ(),
        reports=ConsoleReports(verbose=verbose),
        hooks=ScriptHookRunner(),
    )
    result = orchestrator.run()
    print_bundle_summary(result)
    sys.exit(0 if result.success else 1)
