class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class IncompleteEntryError(DomainError):
    """Raised when a time entry has no clock-out but is asked to be calculated."""

    def __init__(self, message: str, *, time_entry_id=None, work_date=None):
        super().__init__(message)
        self.time_entry_id = time_entry_id
        self.work_date = work_date


class NoApplicableRateError(DomainError):
    """Raised when no statutory table is effective for an organization/date."""

    def __init__(self, message: str, *, kind=None, organization_id=None, as_of=None):
        super().__init__(message)
        self.kind = kind
        self.organization_id = organization_id
        self.as_of = as_of


class NoCompensationError(DomainError):
    """Raised when an employee has no compensation effective by the period end."""

    def __init__(self, message: str, *, employee_id=None, as_of=None):
        super().__init__(message)
        self.employee_id = employee_id
        self.as_of = as_of


class InvalidTransitionError(DomainError):
    """Raised when a payroll status change is not in the allowed set."""

    def __init__(self, message: str, *, current=None, target=None):
        super().__init__(message)
        self.current = current
        self.target = target


class ConcurrencyConflictError(DomainError):
    """Raised when another writer changed a payroll row first."""


class OvertimeLookupError(DomainError):
    """Raised by repositories when approved overtime cannot be fetched.

    The timesheet calculator recovers from this locally.
    """


class PeriodOverlapError(ValidationError):
    """Raised when a payroll period overlaps another one of the same organization."""
