"""
Exception hierarchy for the alert evaluation engine.

Every error raised by the engine derives from LogAlertError so callers
can isolate engine failures with a single except clause.

Exceptions:
    AlertConditionValidationError: Malformed condition parameters
    UnknownAlertConditionTypeError: No condition class registered for a type tag
    InvalidRangeParametersError: Time range built from invalid parameters
    InvalidRangeFormatError: Time range could not be rendered for the backend
    TooManyAliasesError: Write alias points at more than one index
    NoTargetIndexError: Index set has no partitions yet
    SearchBackendError: Search backend unavailable or rejected the request
"""

from typing import Iterable, Optional


class LogAlertError(Exception):
    """Base class for all engine errors."""

    pass


class AlertConditionValidationError(LogAlertError, ValueError):
    """Raised when alert condition parameters fail validation."""

    pass


class UnknownAlertConditionTypeError(LogAlertError):
    """Raised when no condition class is registered for a type tag."""

    def __init__(self, condition_type: str):
        self.condition_type = condition_type
        super().__init__(f"Unknown alert condition type: {condition_type}")


class InvalidRangeParametersError(LogAlertError):
    """Raised when a time range is built from invalid parameters."""

    pass


class InvalidRangeFormatError(LogAlertError):
    """Raised when a time range cannot be rendered into a backend query."""

    pass


class TooManyAliasesError(LogAlertError):
    """
    Raised when rotation metadata is inconsistent.

    The write alias of an index set must point at exactly one index.
    Pointing at several is reported instead of silently picking one.

    Attributes:
        alias: The write alias that resolved ambiguously.
        indices: The indices the alias points at.
    """

    def __init__(self, alias: str, indices: Iterable[str]):
        self.alias = alias
        self.indices = sorted(indices)
        super().__init__(
            f"Alias <{alias}> points to more than one index: {self.indices}"
        )


class NoTargetIndexError(LogAlertError):
    """Raised when an index set has no partitions yet."""

    pass


class SearchBackendError(LogAlertError):
    """
    Raised when the search backend is unavailable or rejects a request.

    Attributes:
        message: Error message.
        status: HTTP status returned by the backend, if any.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)
