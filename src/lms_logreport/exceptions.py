"""
Custom exceptions for log report queries.

Storage failures are not wrapped here: they surface as the
``StorageError`` family from :mod:`lms_logreport.storage` and propagate
unchanged to the caller.
"""


class LogReportError(Exception):
    """
    Base exception for all log report errors.

    All other report exceptions inherit from this class,
    allowing for broad exception catching when needed.
    """

    pass


class InvalidFilterError(LogReportError):
    """
    Raised when filter options cannot be turned into a valid query.

    Attributes:
        field: The filter field that was rejected (optional)
        value: The rejected value (optional)
        message: Detailed error message
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: object | None = None,
    ):
        self.field = field
        self.value = value
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with field and value context."""
        if self.field and self.value is not None:
            return f"{self.message} (field='{self.field}', value={self.value!r})"
        elif self.field:
            return f"{self.message} (field='{self.field}')"
        return self.message


class UnknownGranularityError(InvalidFilterError):
    """
    Raised when an aggregate report is requested for an unsupported duration.

    Attributes:
        duration: The requested duration name
        supported: Durations that are accepted
    """

    def __init__(self, duration: object, supported: list[str]):
        self.duration = duration
        self.supported = supported
        super().__init__(
            f"Unknown hits duration. Supported: {', '.join(supported)}",
            field="duration",
            value=duration,
        )


class PredicateError(LogReportError):
    """
    Raised when a predicate clause is malformed.

    Covers parameter name collisions between clauses and clauses that
    reference a placeholder they do not supply (or supply one they never
    reference).
    """

    pass
