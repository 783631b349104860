"""Error taxonomy for cache edits and log publication.

Hard errors (``BadRequest`` and subclasses, ``CannotPublish``) abort a request
before anything is written. ``ConsistencyFault`` signals corrupted or foreign
data and is never handled inside the core. Soft validation problems are not
exceptions at all; they accumulate in ``geokeeper.domain.problems.ProblemMap``.
"""

from __future__ import annotations


class GeokeeperError(Exception):
    """Base class for all errors raised by the core."""


class BadRequest(GeokeeperError):
    """The request cannot be processed as given."""


class MissingParameter(BadRequest):
    """A required input is absent."""

    def __init__(self, param: str) -> None:
        super().__init__(f"Missing required parameter: {param}")
        self.param = param


class InvalidParameter(BadRequest):
    """An input is malformed or outside its domain."""

    def __init__(self, param: str, reason: str | None = None) -> None:
        message = f"Invalid value for parameter '{param}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.param = param
        self.reason = reason


class CannotPublish(GeokeeperError):
    """A log entry violates a publication rule."""


class ConsistencyFault(GeokeeperError):
    """Cross-entity integrity violation; unrecoverable."""


class NotFound(BadRequest):
    """A referenced cache, log or user does not exist."""
