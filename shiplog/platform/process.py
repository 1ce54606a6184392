"""Subprocess execution for git and the provider CLIs.

Every command runs non-interactively: git never asks for credentials,
`gh`/`glab` never prompt and print no colour codes, so stdout can be
parsed as-is. Failures come back as values.

    result = run(["git", "rev-parse", "--is-shallow-repository"], cwd=root)
    match result:
        case Ok(stdout):
            shallow = stdout.strip() == "true"
        case Err(error):
            console.warning(error.detail)
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from shiplog.core.result import Err, Ok, Result

__all__ = ["NON_INTERACTIVE_ENV", "ProcessError", "run"]

NON_INTERACTIVE_ENV: Mapping[str, str] = {
    "GIT_TERMINAL_PROMPT": "0",
    "GH_PROMPT_DISABLED": "1",
    "NO_COLOR": "1",
}

_SHOWN_ARGS = 3


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that exited non-zero, timed out, or never started.

    `returncode` is -1 when there is no real exit status.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:_SHOWN_ARGS])
        if len(self.command) > _SHOWN_ARGS:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"

    @property
    def detail(self) -> str:
        """First non-empty stderr line, else the summary."""
        for line in self.stderr.splitlines():
            if line.strip():
                return line.strip()
        return str(self)


def _environment(extra: Mapping[str, str] | None) -> dict[str, str]:
    env = {**os.environ, **NON_INTERACTIVE_ENV}
    if extra:
        env.update(extra)
    return env


def _failure(cmd: list[str], returncode: int, stdout: str, stderr: str) -> Err[ProcessError]:
    return Err(ProcessError(command=tuple(cmd), returncode=returncode, stdout=stdout, stderr=stderr))


def run(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run `cmd` in `cwd` and return its stdout.

    `env` is layered over the current environment and the non-interactive
    defaults, so callers only pass what they add.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=_environment(env),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return _failure(cmd, -1, partial, f"Command timed out after {timeout}s")
    except OSError as e:
        return _failure(cmd, -1, "", str(e))

    if proc.returncode != 0:
        return _failure(cmd, proc.returncode, proc.stdout, proc.stderr)
    return Ok(proc.stdout)
