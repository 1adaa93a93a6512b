from contextlib import ExitStack, contextmanager, redirect_stdout
from datetime import datetime
from typing import Any, BinaryIO, Callable, Iterator, List, Optional, TextIO
import logging, sys
from ..config import ReporterOptions
from ..runners.runner import FailureDetail, Runnable, Suite
from ..utils.artifacts import open_report_sink
from .aggregator import SuiteAggregator, utc_now
from .console import ConsoleReporter
from .xml_writer import XmlReportWriter

log = logging.getLogger(__name__)

class _TeeWriter:
    """Mirrors writes to ``target`` and splits them into log entries."""
    def __init__(self, target: TextIO, entries: List[str]):
        self.target = target
        self.entries = entries
        self._partial = ""

    def write(self, text: str) -> int:
        self.target.write(text)
        *lines, self._partial = (self._partial + text).split("\n")
        self.entries.extend(lines)
        return len(text)

    def __getattr__(self, name: str) -> Any:
        return getattr(self.target, name)

    def flush(self) -> None:
        self.target.flush()

    def close_line(self) -> None:
        if self._partial:
            self.entries.append(self._partial)
            self._partial = ""

@contextmanager
def capture_output(test: Runnable) -> Iterator[_TeeWriter]:
    """Collect everything printed while the scope is open into ``test.log_entries``."""
    tee = _TeeWriter(sys.stdout, test.log_entries)
    try:
        with redirect_stdout(tee):
            yield tee
    finally:
        tee.close_line()

class JUnitReporter:
    """Turns runner events into a JUnit XML report, one suite at a time."""
    def __init__(self, options: ReporterOptions, console: Optional[ConsoleReporter] = None,
                 stream: Optional[BinaryIO] = None, clock: Optional[Callable[[], datetime]] = None):
        self.options = options
        self.console = console or ConsoleReporter()
        self.clock = clock or utc_now
        self.aggregator = SuiteAggregator(self.clock)
        self._stream = stream
        self._owns_stream = False
        self._capture = ExitStack()
        self.writer = XmlReportWriter(stream, options)

    def on_start(self) -> None:
        if self._stream is None and self.options.report_path:
            self._stream = open_report_sink(self.options.report_path, self.clock())
            self._owns_stream = True
            self.writer.stream = self._stream
        self.console.start()
        self.writer.open_document(self.options.report_name)

    def on_suite(self, suite: Suite) -> None:
        if self.aggregator.is_open:
            self._end_suite()
        self.aggregator.open(suite.full_title())
        self.console.suite(suite.full_title())

    def on_test(self, test: Runnable) -> None:
        self._capture.close()
        test.log_entries = []
        self._capture.enter_context(capture_output(test))

    def on_test_end(self, test: Runnable) -> None:
        try:
            self.aggregator.record(test)
        finally:
            self._capture.close()

    def on_pass(self, test: Runnable) -> None:
        self.aggregator.record_pass()
        self.console.passed(test)

    def on_fail(self, test: Runnable, err: Optional[FailureDetail] = None) -> None:
        if err is not None and test.err is None:
            test.err = err
        n = self.aggregator.record_failure(test)
        self.console.failed(test, n)

    def on_pending(self, test: Runnable) -> None:
        self.console.skipped(test)

    def on_end(self) -> None:
        self._capture.close()
        try:
            self._end_suite()
        finally:
            try:
                self.writer.close_document()
            finally:
                self._close_sink()
        self.console.epilogue()

    def _end_suite(self) -> None:
        if not self.aggregator.is_open:
            return
        title = self.aggregator.title
        try:
            report = self.aggregator.finalize()
            if report is not None:
                self.writer.write_suite(report)
        except Exception:
            log.exception("Failed to write report for suite %r", title)

    def _close_sink(self) -> None:
        if self._owns_stream and self._stream is not None:
            self._stream.close()
            self._stream = None
            self.writer.stream = None
