"""
Per-suite accumulation of test results.

Only one suite is ever open. The listener finalizes it before opening the
next one, so a report run keeps a single suite's results in memory.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..errors import ReportError
from ..runners.runner import Runnable


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SuiteReport:
    """Finalized outcome of one suite, ready to be serialized."""
    name: str
    tests: List[Runnable]
    failures: int
    passes: int
    start_time: datetime
    duration_ms: int

    @property
    def total(self) -> int:
        # A runner may report more outcomes than recorded tests, e.g. when a
        # hook fails before any test ran.
        return max(len(self.tests), self.failures + self.passes)

    @property
    def skipped(self) -> int:
        return self.total - self.failures - self.passes


@dataclass
class _SuiteContext:
    title: str
    start_time: datetime
    tests: List[Runnable] = field(default_factory=list)
    failures: int = 0
    passes: int = 0
    last_failure: Optional[Runnable] = None


class SuiteAggregator:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or utc_now
        self._active: Optional[_SuiteContext] = None

    @property
    def is_open(self) -> bool:
        return self._active is not None

    @property
    def title(self) -> Optional[str]:
        return self._active.title if self._active else None

    def _require_open(self) -> _SuiteContext:
        if self._active is None:
            raise ReportError("No suite is open")
        return self._active

    def open(self, title: str, start_time: Optional[datetime] = None) -> None:
        if self._active is not None:
            raise ReportError(f"Suite {self._active.title!r} must be finalized before opening {title!r}")
        self._active = _SuiteContext(title=title, start_time=start_time or self.clock())

    def record(self, test: Runnable) -> None:
        self._require_open().tests.append(test)

    def record_pass(self) -> None:
        self._require_open().passes += 1

    def record_failure(self, runnable: Runnable) -> int:
        ctx = self._require_open()
        ctx.failures += 1
        ctx.last_failure = runnable
        return ctx.failures

    def finalize(self, end_time: Optional[datetime] = None) -> Optional[SuiteReport]:
        """Close the open suite; ``None`` when it has nothing to report."""
        ctx = self._require_open()
        self._active = None
        end = end_time or self.clock()
        duration_ms = max(0, int((end - ctx.start_time).total_seconds() * 1000))
        tests = list(ctx.tests)
        if not tests and ctx.failures and ctx.last_failure is not None:
            # Stand-in for a hook that failed before any test was recorded.
            tests = [ctx.last_failure]
        report = SuiteReport(ctx.title, tests, ctx.failures, ctx.passes, ctx.start_time, duration_ms)
        if report.total == 0:
            return None
        return report
