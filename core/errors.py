"""
Errors Module
Exception types raised by the component analysis engine.
"""


class ComponentAnalysisError(Exception):
    """Base class for all component analysis errors."""


class InvariantViolation(ComponentAnalysisError, ValueError):
    """Raised when input data breaks a structural invariant (negative size, cyclic tree, ...)."""


class PageAnalysisError(ComponentAnalysisError):
    """Raised when a single page cannot be analyzed."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}" if url else message)
        self.url = url
        self.message = message
