from typing import List, Optional, TextIO
import sys, time
from rich.console import Console
from rich.markup import escape
from ..runners.runner import Runnable

class ConsoleReporter:
    """Progress lines and the end-of-run summary.

    The console is bound to the stream current at construction so status
    lines never end up in a test's captured output.
    """
    def __init__(self, file: Optional[TextIO] = None):
        self.console = Console(file=file or sys.stdout, highlight=False)
        self.passes = 0
        self.pending = 0
        self.failures: List[Runnable] = []
        self._t0 = time.perf_counter()

    def start(self) -> None:
        self._t0 = time.perf_counter()

    def suite(self, title: str) -> None:
        self.console.print()
        self.console.print(f"  {escape(title)}")

    def passed(self, test: Runnable) -> None:
        self.passes += 1
        self.console.print(f"     [green]✓ {escape(test.title)}[/green]")

    def failed(self, test: Runnable, n: int) -> None:
        self.failures.append(test)
        self.console.print(f"    [red]{n}) {escape(test.title)}[/red]")

    def skipped(self, test: Runnable) -> None:
        self.pending += 1
        self.console.print(f"      [yellow]- {escape(test.title)}[/yellow]")

    def epilogue(self) -> None:
        elapsed_ms = int((time.perf_counter() - self._t0) * 1000)
        self.console.print()
        self.console.print(f"  [green]{self.passes} passing[/green] [dim]({elapsed_ms}ms)[/dim]")
        if self.pending:
            self.console.print(f"  [cyan]{self.pending} pending[/cyan]")
        if self.failures:
            self.console.print(f"  [red]{len(self.failures)} failing[/red]")
        for i, test in enumerate(self.failures, 1):
            self.console.print()
            self.console.print(f"  {i}) {escape(test.full_title())}:")
            if test.err is not None:
                self.console.print(f"     [red]{escape(test.err.message or '')}[/red]")
                if test.err.stack:
                    self.console.print(escape(test.err.stack.rstrip()), style="dim")
        self.console.print()
