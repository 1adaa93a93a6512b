from typing import Optional
import typer
from .config import load_options, ReporterOptions
from .errors import TestkitError
from .logging import setup_logging
from .runners.runner import TestRunner
from .reporters.junit import JUnitReporter
from .reporters.console import ConsoleReporter

app = typer.Typer(add_completion=False, help="junit-testkit - run test suites and write JUnit XML for CI dashboards")

@app.callback()
def main():
    """junit-testkit command line."""

@app.command()
def run(
    target: str = typer.Argument(..., help="Suite module (dotted name or .py file) exposing discover()"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to options YAML"),
    report_path: Optional[str] = typer.Option(None, "--report-path", "-o", help="Report file, or directory for <epoch-millis>.xml"),
    report_name: Optional[str] = typer.Option(None, "--report-name", help="name attribute of <testsuites>"),
    stack: Optional[bool] = typer.Option(None, "--stack/--no-stack", help="Include stack traces in failures"),
    packages: Optional[bool] = typer.Option(None, "--packages", help="Prefix classnames with the test package"),
    sonar: Optional[bool] = typer.Option(None, "--sonar", help="Use the test file path as classname"),
    test_dir: Optional[str] = typer.Option(None, "--test-dir", help="Root that test file paths are relative to"),
    screenshots: Optional[str] = typer.Option(None, "--screenshots", help="off, loop, or named"),
    list_tests: bool = typer.Option(False, "--list", help="List tests without running"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level for the side channel"),
):
    log = setup_logging(log_level)
    try:
        options: ReporterOptions = load_options(
            config, report_path=report_path, report_name=report_name, include_stack=stack,
            package_naming=packages, sonar_naming=sonar, test_root_dir=test_dir, screenshots=screenshots,
        )
        runner = TestRunner()
        suites = runner.load(target)
    except TestkitError as e:
        log.error("%s", e)
        raise typer.Exit(code=2)

    if list_tests:
        for s in suites:
            for t in s.all_tests():
                typer.echo(t.full_title())
        raise typer.Exit(code=0)

    console = ConsoleReporter()
    runner.listeners.append(JUnitReporter(options, console=console))
    runner.run(suites)
    typer.echo(f"Done. {console.passes} passed, {runner.failures} failed, {console.pending} pending.")
    raise typer.Exit(code=0 if runner.failures == 0 else 1)
