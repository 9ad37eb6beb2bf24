"""Waypost exception hierarchy.

Registration errors are raised eagerly, at setup time, so a misconfigured
route table fails on startup instead of on the first request.
"""


class WaypostError(Exception):
    """Base for all waypost-specific errors."""


class InvalidArgument(WaypostError, TypeError):
    """Raised for a malformed pattern, handler, or method name.

    Subclasses ``TypeError`` so callers that guard registration with
    ``except TypeError`` keep working.
    """


class PreconditionFailed(WaypostError, RuntimeError):
    """Raised when a handler is registered before any route exists."""


class ResponseAlreadySent(WaypostError, RuntimeError):
    """Raised when writing to a response that has already been ended."""
