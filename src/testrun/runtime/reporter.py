# src/testrun/runtime/reporter.py

"""
Human-facing rendering of per-test progress lines and the session summary.
"""

from rich.console import Console
from rich.markup import escape

from testrun.state import ExecutionOutcome, OutcomeStatus, SessionCounters


def default_console() -> Console:
    return Console(stderr=True, highlight=False, soft_wrap=True)


class TerminalRenderer:
    """Writes progress and summary text to a rich Console (stderr by default)."""

    def __init__(self, console: Console | None = None):
        self.console = console or default_console()

    def test_started(self, index: int, total: int, name: str) -> None:
        self.console.print(f"[cyan]{index + 1}/{total} {escape(name)}[/]...")

    def test_finished(self, outcome: ExecutionOutcome) -> None:
        name = escape(outcome.name)
        if outcome.status is OutcomeStatus.PASS:
            self.console.print(f"  [green]{outcome.glyph}[/] {name} ({outcome.duration_ms} ms)")
        elif outcome.status is OutcomeStatus.SKIP:
            self.console.print(f"  [yellow]{outcome.glyph} SKIP {name}[/]")
        else:
            reason = type(outcome.error).__name__ if outcome.error is not None else "error"
            self.console.print(f"  [red]{outcome.glyph} FAIL {name}[/] ({escape(reason)})")

    def summary(self, counters: SessionCounters, total_duration_ns: int) -> None:
        self.console.print("\nResults:")
        if counters.passed:
            self.console.print(f"  [green]✔ {counters.passed} passed[/]")
        if counters.skipped:
            self.console.print(f"  [yellow]⚠ {counters.skipped} skipped[/]")
        if counters.failed:
            self.console.print(f"  [red]✘ {counters.failed} failed[/]")

        self.console.print(f"\nTotal duration: {total_duration_ns // 1_000_000} ms")

        if counters.total_log_errors:
            self.console.print(f"\n  [red]{counters.total_log_errors} errors were logged.[/]")
        if counters.leaked:
            self.console.print(f"\n  [red]{counters.leaked} tests leaked memory.[/]")

    def tally(self, counters: SessionCounters) -> None:
        self.console.print(
            f"{counters.passed} passed, {counters.skipped} skipped, {counters.failed} failed",
            markup=False,
        )

# 🖥️⚙️
