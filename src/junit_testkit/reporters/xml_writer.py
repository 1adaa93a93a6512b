"""
Streaming JUnit XML writer.

Each suite is rendered in full and then appended to a binary stream;
nothing is ever rewritten. With no stream every call is a no-op.
"""

from typing import BinaryIO, List, Optional

from ..config import ReporterOptions
from ..runners.runner import Runnable
from .aggregator import SuiteReport
from .formatting import cdata_text, class_name, seconds, unified_diff, utc_timestamp, xml_text
from .screenshots import ScreenshotLocator


class XmlReportWriter:
    def __init__(self, stream: Optional[BinaryIO], options: ReporterOptions, cwd: Optional[str] = None):
        self.stream = stream
        self.options = options
        self.cwd = cwd

    def write(self, text: str) -> None:
        if self.stream is not None:
            self.stream.write(text.encode("utf-8", errors="replace"))

    def open_document(self, name: str) -> None:
        self.write(f'<testsuites name="{xml_text(name)}">\n')

    def close_document(self) -> None:
        self.write("</testsuites>\n")
        self.flush()

    def flush(self) -> None:
        if self.stream is not None:
            self.stream.flush()

    def write_suite(self, report: SuiteReport) -> None:
        # Rendered whole before writing so a failure leaves no unclosed tags behind.
        screenshots = ScreenshotLocator.for_suite(self.options, report.name, self.cwd)
        out = [
            f'<testsuite name="{xml_text(report.name)}"'
            f' tests="{report.total}"'
            f' failures="{report.failures}"'
            f' skipped="{report.skipped}"'
            f' timestamp="{utc_timestamp(report.start_time)}"'
            f' time="{seconds(report.duration_ms)}">\n'
        ]
        for test in report.tests:
            self._render_test_case(out, test, report.name, screenshots)
        out.append("</testsuite>\n")
        self.write("".join(out))
        self.flush()

    def write_test_case(self, test: Runnable, suite_title: str,
                        screenshots: Optional[ScreenshotLocator] = None) -> None:
        out: List[str] = []
        self._render_test_case(out, test, suite_title, screenshots)
        self.write("".join(out))

    def _render_test_case(self, out: List[str], test: Runnable, suite_title: str,
                          screenshots: Optional[ScreenshotLocator]) -> None:
        klass = class_name(test, suite_title, self.options, self.cwd)
        attrs = f' classname="{xml_text(klass)}" name="{xml_text(test.title)}"'
        if test.duration is not None:
            attrs += f' time="{seconds(test.duration)}"'
        out.append(f"<testcase{attrs}>\n")

        if test.state == "failed":
            message = test.err.message if test.err and test.err.message else ""
            out.append(f'<failure message="{xml_text(message)}">\n')
            out.append(xml_text(unified_diff(test.err, self.options.include_stack)))
            out.append("\n</failure>\n")
            if screenshots is not None:
                shot = screenshots.next_path(klass, test.title)
                if shot is not None:
                    out.append(f"<system-out>\n[[ATTACHMENT|{xml_text(shot)}]]\n</system-out>\n")
        elif test.state is None:
            out.append("<skipped/>\n")

        if test.log_entries:
            out.append("<system-out><![CDATA[")
            out.extend(cdata_text(entry) for entry in test.log_entries)
            out.append("]]></system-out>\n")

        out.append("</testcase>\n")
