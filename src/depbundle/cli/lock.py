"""``depbundle lock`` --- Inspect and validate ``project.lock.json`` files.

Subcommands:
    show    -- Print the locked libraries as a table or JSON.
    verify  -- Check the lockfile for internal consistency.

Exit Codes:
    0 -- Success (verify: the lockfile is valid).
    1 -- verify: the lockfile has consistency errors.
    2 -- The file could not be read as a lockfile.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from depbundle.core.lockfile import Lockfile
from depbundle.exceptions import LockfileError


def _read_lockfile(path: str) -> Lockfile:
    try:
        return Lockfile.read(Path(path))
    except LockfileError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)


@click.group("lock")
def lock_group() -> None:
    """Inspect and validate project.lock.json files."""


@lock_group.command("show")
@click.argument("lockfile", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def show_command(lockfile: str, output_format: str) -> None:
    """Show the libraries locked in LOCKFILE."""
    lf = _read_lockfile(lockfile)

    from depbundle.cli.output import print_json, print_lockfile

    if output_format == "json":
        print_json(lf.to_dict())
    else:
        print_lockfile(lf)
    sys.exit(0)


@lock_group.command("verify")
@click.argument("lockfile", type=click.Path(exists=True, dir_okay=False))
def verify_command(lockfile: str) -> None:
    """Validate LOCKFILE: hashes, versions, and framework groups.

    Exit code 0 if the lockfile is consistent, 1 otherwise.
    """
    lf = _read_lockfile(lockfile)
    errors = lf.validate()

    from depbundle.cli.output import print_validation_errors

    print_validation_errors(errors)
    sys.exit(1 if errors else 0)
