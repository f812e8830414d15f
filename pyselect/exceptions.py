"""
pyselect Custom Exceptions

This module defines custom exception classes for pyselect operations.
All exceptions inherit from PySelectError base class.
"""

from typing import Optional


class PySelectError(Exception):
    """Base exception for all pyselect errors."""
    pass


class PySelectConfigError(PySelectError):
    """
    Configuration error.
    Raised when invalid config params are provided or a config file cannot be read.
    """
    pass


class SourceUnavailableError(PySelectError):
    """
    Registration source error.
    Raised when a registry root, key, or value is missing or unreadable.
    Scanners catch it and skip the affected candidate.
    """
    pass


class ProbeError(PySelectError):
    """
    Interpreter probe error.
    Raised when running a candidate interpreter fails, exits non-zero,
    times out, or prints output that cannot be parsed.
    """
    pass


class NoMatchError(PySelectError):
    """
    No distribution matched the requested filters.

    Attributes:
        filters: The ``DistributionFilter`` that produced no match.
    """

    def __init__(self, filters, message: Optional[str] = None):
        self.filters = filters
        if message is None:
            message = f"No Python distribution found matching {filters.describe()}"
        super().__init__(message)


class NestedEnvironmentError(PySelectError):
    """
    Nested environment manager error.
    Raised when conda's own activation step fails for a distribution that
    ships conda.
    """
    pass
