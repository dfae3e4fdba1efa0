"""depbundle CLI --- Multi-platform dependency bundling.

Entry point for the ``depbundle`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    bundle       -- Resolve, lock, and emit a deployable bundle.
    lock show    -- Display the libraries in a project.lock.json.
    lock verify  -- Validate a project.lock.json.

Usage::

    depbundle bundle ./src/MyApp
    depbundle bundle ./src/MyApp --runtime active --out ./dist --overwrite
    depbundle lock show ./dist/approot/src/MyApp/project.lock.json
    depbundle lock verify project.lock.json
"""

from __future__ import annotations

import click

from depbundle import __version__
from depbundle.cli.bundle_cmd import bundle_command
from depbundle.cli.lock import lock_group


@click.group()
@click.version_option(version=__version__, prog_name="depbundle")
def cli() -> None:
    """depbundle: resolve, lock, and bundle multi-platform projects.

    Walks a project's dependency graph for each target platform, merges
    the results into one deterministic lock file, and emits a deployable
    output tree.
    """


# Register all subcommands
cli.add_command(bundle_command)
cli.add_command(lock_group)
