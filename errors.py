"""
Error types raised by the API.

Every error carries the HTTP status code the web layer should answer with,
a human readable message and an optional list of field-level details.
Subclasses of ValidationError mean "bad input"; everything else is an
execution failure.
"""


class ApiError(Exception):
    status_code = 500
    default_message = 'Internal Server Error'

    def __init__(self, message=None, errors=None, status_code=None):
        self.message = message or self.default_message
        self.errors = errors
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    default_message = 'Validation failed'


class InvalidDateFormat(ValidationError):
    default_message = 'Invalid date format. Use YYYY-MM-DD'


class RangeReversed(ValidationError):
    default_message = 'Start date must be before or equal to end date'


class RangeTooLarge(ValidationError):
    default_message = 'Date range is too large'


class RangeInFuture(ValidationError):
    default_message = 'Start date cannot be in the future'


class NotFound(ApiError):
    status_code = 404

    def __init__(self, resource='Resource'):
        super().__init__(f"{resource} not found")


class Conflict(ApiError):
    status_code = 409
    default_message = 'Resource already exists'


class InvalidRange(ApiError):
    """A range that should have been rejected upstream reached the store."""
    default_message = 'Invalid date range reached the expense store'


class DatabaseError(ApiError):
    default_message = 'Database operation failed'


class AggregationFailure(DatabaseError):
    """A read issued by the expense store failed."""
    default_message = 'Failed to read expense data'


class ReportTimeout(ApiError):
    status_code = 504
    default_message = 'Report generation timed out'
