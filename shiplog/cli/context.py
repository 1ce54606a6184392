from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from shiplog.git.repository import GitHistory, Repository
from shiplog.output.console import ConsoleProtocol, QuietConsole, RichConsole
from shiplog.platform.http import HttpClient, RealHttpClient


@dataclass(frozen=True, slots=True)
class CLIContext:
    project_root: Path
    git: GitHistory
    http: HttpClient
    console: ConsoleProtocol


def build_context(*, quiet: bool, machine_output: bool) -> CLIContext:
    """Wire the real collaborators for one invocation.

    With machine output (`--json`, `--print-md`) progress goes to stderr
    so stdout carries only the requested document.
    """
    root = Path.cwd()
    console: ConsoleProtocol = RichConsole(stderr=machine_output)
    if quiet:
        console = QuietConsole(console)
    return CLIContext(
        project_root=root,
        git=Repository(root),
        http=RealHttpClient(),
        console=console,
    )
