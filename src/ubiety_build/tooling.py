# tooling.py
# Single entry point for running external toolchain commands.
# Target actions never call subprocess directly.

from __future__ import annotations

import shlex
import subprocess
import time
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from .errors import CommandFailure
from .ui.console import get_console

T = TypeVar("T")

MASK = "****"

TOOL_HINTS = {
    "dotnet": "Install the .NET SDK or fix PATH.",
    "git": "Install Git or fix PATH.",
}


def format_command(args: Sequence[str], secrets: Iterable[str] = ()) -> str:
    """Render a command line for display with every secret value masked."""
    line = " ".join(shlex.quote(str(a)) for a in args)
    for secret in secrets:
        if secret:
            line = line.replace(secret, MASK)
    return line


def run_tool(
    args: Sequence[str | Path],
    *,
    cwd: str | Path | None = None,
    secrets: Iterable[str | None] = (),
) -> None:
    """
    Run a command and wait for it. Output goes straight to the terminal.

    Raises CommandFailure on a non-zero exit status or a missing executable.
    """
    argv = [str(a) for a in args]
    shown = format_command(argv, [s for s in secrets if s])
    get_console().print_command(shown)

    try:
        proc = subprocess.run(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            text=True,
        )
    except FileNotFoundError:
        tool = argv[0]
        hint = TOOL_HINTS.get(tool, f"Install {tool} or fix PATH.")
        raise CommandFailure(shown, 127, reason=f"{tool} is not available. {hint}")

    if proc.returncode != 0:
        raise CommandFailure(shown, proc.returncode)


def retry(
    fn: Callable[[], T],
    *,
    attempts: int,
    delay: float = 2.0,
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """
    Call fn until it succeeds, at most `attempts` times.
    Only CommandFailure is retried; the last one is re-raised.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    console = get_console()
    attempt = 1
    while True:
        try:
            return fn()
        except CommandFailure as e:
            if attempt >= attempts:
                raise
            console.print_retry(attempt, attempts, e.message)
            (sleep or time.sleep)(delay)
            attempt += 1
