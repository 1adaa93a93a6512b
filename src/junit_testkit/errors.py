"""
Custom exceptions for junit-testkit.
"""


class TestkitError(Exception):
    """Base exception for all junit-testkit errors."""
    pass


class ConfigurationError(TestkitError):
    """Raised when reporter options cannot be loaded or are invalid."""
    pass


class ReportError(TestkitError):
    """Raised when report events arrive out of order."""
    pass


class DiscoveryError(TestkitError):
    """Raised when a suite module cannot be imported or has no discover()."""
    pass
