"""Lifecycle hooks.

Projects may declare scripts for the ``prepare``, ``prebundle`` and
``postbundle`` stages. A ``HookRunner`` executes them; a failed hook stops
the bundle run with its own error message.

``ScriptHookRunner`` runs each command of the stage through the shell.
``%name%`` tokens in a command are replaced through a variable resolver
before execution; unknown variables are left as written.
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Callable
from enum import Enum
from typing import Protocol, runtime_checkable

from depbundle.core.project.models import Project

logger = logging.getLogger(__name__)

_VARIABLE_RE = re.compile(r"%(?P<name>[A-Za-z_:][A-Za-z0-9_:.]*)%")

VariableResolver = Callable[[str], "str | None"]


class HookStage(Enum):
    PREPARE = "prepare"
    PREBUNDLE = "prebundle"
    POSTBUNDLE = "postbundle"


@runtime_checkable
class HookRunner(Protocol):
    def execute(
        self, project: Project, stage: HookStage, resolver: VariableResolver
    ) -> bool:
        """Run the *stage* scripts of *project*. Return False on failure."""
        ...

    @property
    def error_message(self) -> str: ...


def expand_variables(command: str, resolver: VariableResolver) -> str:
    """Replace ``%name%`` tokens using *resolver*."""

    def _replace(match: re.Match[str]) -> str:
        value = resolver(match.group("name"))
        return match.group(0) if value is None else value

    return _VARIABLE_RE.sub(_replace, command)


class NullHookRunner:
    """Runs nothing and always succeeds."""

    error_message = ""

    def execute(
        self, project: Project, stage: HookStage, resolver: VariableResolver
    ) -> bool:
        return True


class ScriptHookRunner:
    """Run a project's scripts through the shell.

    Args:
        timeout: Seconds allowed per command; ``None`` waits indefinitely.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout
        self._error_message = ""

    @property
    def error_message(self) -> str:
        return self._error_message

    def execute(
        self, project: Project, stage: HookStage, resolver: VariableResolver
    ) -> bool:
        self._error_message = ""
        for command in project.scripts.get(stage.value, []):
            expanded = expand_variables(command, resolver)
            logger.debug("Running %s script: %s", stage.value, expanded)
            try:
                completed = subprocess.run(
                    expanded,
                    shell=True,
                    cwd=project.project_directory,
                    capture_output=True,
                    text=True,
                    timeout=self._timeout,
                    check=False,
                )
            except (OSError, subprocess.TimeoutExpired) as exc:
                self._error_message = f"{stage.value} script '{expanded}' failed: {exc}"
                return False
            if completed.returncode != 0:
                detail = (completed.stderr or completed.stdout).strip()
                self._error_message = (
                    f"{stage.value} script '{expanded}' exited with code "
                    f"{completed.returncode}"
                )
                if detail:
                    self._error_message += f": {detail}"
                return False
        return True
