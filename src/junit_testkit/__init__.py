# Lightweight package init: suite modules only need Suite, keep the reporter stack lazy.
__all__ = ["Suite", "assert_equal", "TestRunner", "JUnitReporter", "ReporterOptions", "load_options"]

def __getattr__(name):
    if name in ("Suite", "assert_equal", "TestRunner"):
        from .runners import runner as _runner
        return getattr(_runner, name)
    if name == "JUnitReporter":
        from .reporters.junit import JUnitReporter as _JUnitReporter
        return _JUnitReporter
    if name in ("ReporterOptions", "load_options"):
        from . import config as _config
        return getattr(_config, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
