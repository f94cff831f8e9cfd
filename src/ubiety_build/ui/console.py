"""Console output formatting utilities for ubiety-build."""

from __future__ import annotations

import sys
from typing import Iterable, Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_run_started(
        self,
        root: str,
        targets: list[str],
        configuration: str,
        branch: Optional[str] = None,
        version: Optional[str] = None,
        repository: Optional[str] = None,
    ) -> None:
        """Print run start information."""
        print("\nBUILD STARTED")
        if repository:
            print(f"Repository: {repository}")
        print(f"Root: {root}")
        print(f"Targets: {', '.join(targets)}")
        print(f"Configuration: {configuration}")
        print(f"Branch: {branch or 'unknown'}")
        if version:
            print(f"Version: {version}")
        print()

    def print_plan(self, names: Iterable[str]) -> None:
        """Print the ordered execution plan."""
        self.print_header("PLAN")
        for i, name in enumerate(names, start=1):
            print(f"  {i}. {name}")

    def print_target_list(self, targets: Iterable, default: str) -> None:
        """Print listed (non-hidden) targets."""
        self.print_header("TARGETS")
        for t in targets:
            if t.unlisted:
                continue
            marker = " (default)" if t.name == default else ""
            deps = f" -> {', '.join(t.depends_on)}" if t.depends_on else ""
            print(f"  {t.name}{marker}{deps}")
            if t.description:
                print(f"      {t.description}")

    def print_target_start(self, name: str) -> None:
        """Print target start message."""
        print(f"\nTARGET: {name}")

    def print_command(self, cmd: str) -> None:
        """Print an external command about to run."""
        print(f"> {cmd}")

    def print_success(self, name: str) -> None:
        """Print success message."""
        print("STATUS: success")

    def print_target_skipped(self, name: str, reason: str) -> None:
        """Print target skipped message."""
        print(f"\nTARGET: {name}")
        print(f"STATUS: skipped ({reason})")

    def print_failure(
        self,
        name: str,
        reason: str,
        exit_code: Optional[int] = None,
    ) -> None:
        """
        Print failure message.

        Args:
            name: Target name
            reason: Failure reason/error message
            exit_code: Optional exit code of the failing command
        """
        print(f"TARGET FAILED: {name}")
        if exit_code is not None:
            print(f"Exit code: {exit_code}")
        if self.debug:
            print(f"Error details: {reason}")
        else:
            error_line = reason.split("\n")[0] if reason else "Unknown error"
            print(f"Error: {error_line}")

    def print_retry(self, attempt: int, attempts: int, reason: str) -> None:
        """Print a retry notice."""
        print(f"RETRY {attempt}/{attempts}: {reason}")

    def print_results(self, results: dict) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for name, state in results.items():
            value = getattr(state, "value", state)
            print(f"  {name}: {str(value).upper()}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
