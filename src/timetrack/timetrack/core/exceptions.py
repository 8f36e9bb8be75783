class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when the request carries no authenticated employee."""


class NotFoundError(DomainError):
    """Raised when the targeted record, break or task does not exist."""


class StateConflictError(DomainError):
    """Raised when the target exists but is in the wrong state for the operation."""


class AlreadyCheckedInError(StateConflictError):
    pass


class AlreadyCheckedOutError(StateConflictError):
    pass


class NotCheckedInError(StateConflictError):
    pass


class BreakInProgressError(StateConflictError):
    pass


class PendingTasksError(StateConflictError):
    pass


class BreakAlreadyEndedError(StateConflictError):
    pass


class ConcurrentUpdateError(StateConflictError):
    """Raised when the record changed underneath a read-modify-write."""


class NoRecordForTodayError(NotFoundError, NotCheckedInError):
    """No attendance record exists yet for the employee's current day."""


class BreakNotFoundError(NotFoundError):
    pass


class TaskNotFoundError(NotFoundError):
    pass
