from dataclasses import dataclass, field
from typing import List, Callable, Any, Optional, Union, Iterable
import importlib, importlib.util, json, logging, pathlib, sys, time, traceback
from ..errors import DiscoveryError

@dataclass
class FailureDetail:
    message: Optional[str] = None
    actual: Any = None
    expected: Any = None
    stack: Optional[str] = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "FailureDetail":
        # First stack line restates the message, frames follow.
        head = f"{type(exc).__name__}: {exc}\n"
        frames = "".join(traceback.format_tb(exc.__traceback__))
        return cls(message=str(exc) or None,
                   actual=getattr(exc, "actual", None),
                   expected=getattr(exc, "expected", None),
                   stack=head + frames)

class ComparisonError(AssertionError):
    def __init__(self, message: str, actual: Any, expected: Any):
        super().__init__(message)
        self.actual = actual
        self.expected = expected

def _show(value: Any) -> str:
    try:
        return json.dumps(value, default=repr)
    except (TypeError, ValueError):
        return repr(value)

def assert_equal(actual: Any, expected: Any, message: Optional[str] = None) -> None:
    if actual != expected:
        raise ComparisonError(message or f"expected {_show(expected)} got {_show(actual)}",
                              actual, expected)

@dataclass
class Runnable:
    title: str
    fn: Optional[Callable[[], Any]] = None
    file: Optional[str] = None
    parent: Optional["Suite"] = None
    duration: Optional[int] = None  # ms
    state: Optional[str] = None  # "passed", "failed", None = skipped / not run
    err: Optional[FailureDetail] = None
    log_entries: List[str] = field(default_factory=list)

    def full_title(self) -> str:
        parent = self.parent.full_title() if self.parent else ""
        return f"{parent} {self.title}".strip()

@dataclass
class Test(Runnable):
    __test__ = False
    pending: bool = False

@dataclass
class Hook(Runnable):
    kind: str = "before each"

@dataclass
class Suite:
    title: str
    file: Optional[str] = None
    parent: Optional["Suite"] = None
    suites: List["Suite"] = field(default_factory=list)
    tests: List[Test] = field(default_factory=list)
    hooks: List[Hook] = field(default_factory=list)

    def full_title(self) -> str:
        parent = self.parent.full_title() if self.parent else ""
        return f"{parent} {self.title}".strip()

    def describe(self, title: str) -> "Suite":
        child = Suite(title, file=self.file, parent=self)
        self.suites.append(child)
        return child

    def test(self, title: str, skip: bool = False):
        def register(fn: Callable[[], Any]) -> Callable[[], Any]:
            self.tests.append(Test(title, fn=fn, file=self.file, parent=self, pending=skip))
            return fn
        return register

    def _hook(self, kind: str, fn: Callable[[], Any]) -> Callable[[], Any]:
        self.hooks.append(Hook(f'"{kind}" hook', fn=fn, file=self.file, parent=self, kind=kind))
        return fn

    def before_all(self, fn): return self._hook("before all", fn)
    def before_each(self, fn): return self._hook("before each", fn)
    def after_each(self, fn): return self._hook("after each", fn)
    def after_all(self, fn): return self._hook("after all", fn)

    def hooks_of(self, kind: str) -> List[Hook]:
        return [h for h in self.hooks if h.kind == kind]

    def all_tests(self) -> List[Test]:
        out = list(self.tests)
        for s in self.suites:
            out.extend(s.all_tests())
        return out

class _HookFailed(Exception):
    pass

class TestRunner:
    """Walks suites depth-first and reports each step to the listeners.

    Listeners implement any of on_start, on_suite, on_test, on_test_end,
    on_pass, on_fail, on_pending and on_end.
    """
    __test__ = False

    def __init__(self, listeners: Iterable[Any] = ()):
        self.listeners = list(listeners)
        self.log = logging.getLogger(__name__)
        self.failures = 0

    def _emit(self, event: str, *args) -> None:
        for listener in self.listeners:
            handler = getattr(listener, f"on_{event}", None)
            if handler is not None:
                handler(*args)

    def load(self, target: str) -> List[Suite]:
        path = pathlib.Path(target)
        try:
            if path.suffix == ".py" and path.exists():
                spec = importlib.util.spec_from_file_location(path.stem, path)
                mod = importlib.util.module_from_spec(spec)
                sys.modules[spec.name] = mod
                spec.loader.exec_module(mod)
            else:
                mod = importlib.import_module(target)
        except ImportError as e:
            raise DiscoveryError(f"Cannot import suite module {target!r}: {e}") from e
        if not hasattr(mod, "discover"):
            raise DiscoveryError(f"Suite module {target!r} has no discover()")
        found = mod.discover()
        suites = [found] if isinstance(found, Suite) else list(found)
        source = getattr(mod, "__file__", None)
        for s in suites:
            _assign_file(s, s.file or source)
        return suites

    def run(self, suites: Union[Suite, List[Suite]]) -> Suite:
        root = Suite("")
        for s in [suites] if isinstance(suites, Suite) else suites:
            s.parent = root
            root.suites.append(s)
        self.failures = 0
        self._emit("start")
        self._run_suite(root)
        self._emit("end")
        return root

    def _run_suite(self, suite: Suite) -> None:
        self._emit("suite", suite)
        try:
            self._run_hooks(suite, "before all")
            for test in suite.tests:
                self._run_test(suite, test)
            for child in suite.suites:
                self._run_suite(child)
            self._run_hooks(suite, "after all")
        except _HookFailed:
            self.log.debug("Hook failed, skipping the rest of %r", suite.full_title())

    def _run_test(self, suite: Suite, test: Test) -> None:
        if test.pending or test.fn is None:
            self._emit("pending", test)
            self._emit("test_end", test)
            return
        chain = []
        s: Optional[Suite] = suite
        while s is not None:
            chain.insert(0, s)
            s = s.parent
        for s in chain:
            self._run_hooks(s, "before each", test)
        self._emit("test", test)
        t0 = time.perf_counter()
        try:
            test.fn()
            test.state = "passed"
        except Exception as e:
            test.state = "failed"
            test.err = FailureDetail.from_exception(e)
        finally:
            test.duration = int((time.perf_counter() - t0) * 1000)
            if test.state == "passed":
                self._emit("pass", test)
            elif test.state == "failed":
                self.failures += 1
                self._emit("fail", test, test.err)
            self._emit("test_end", test)
        for s in reversed(chain):
            self._run_hooks(s, "after each", test)

    def _run_hooks(self, suite: Suite, kind: str, test: Optional[Test] = None) -> None:
        for hook in suite.hooks_of(kind):
            if test is not None:
                hook.title = f'"{kind}" hook for "{test.title}"'
            t0 = time.perf_counter()
            try:
                hook.fn()
            except Exception as e:
                hook.duration = int((time.perf_counter() - t0) * 1000)
                hook.state = "failed"
                hook.err = FailureDetail.from_exception(e)
                self.failures += 1
                self._emit("fail", hook, hook.err)
                raise _HookFailed(hook.title) from e

def _assign_file(suite: Suite, file: Optional[str]) -> None:
    suite.file = file
    for r in [*suite.tests, *suite.hooks]:
        r.file = r.file or file
    for child in suite.suites:
        _assign_file(child, child.file or file)
