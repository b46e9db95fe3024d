from __future__ import annotations

from enum import Enum


class TimeEntryStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class OvertimeStatus(str, Enum):
    """Approval workflow state of an overtime request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class PayrollStatus(str, Enum):
    """Lifecycle of a single employee payroll record."""

    DRAFT = "DRAFT"
    COMPUTED = "COMPUTED"
    APPROVED = "APPROVED"
    RELEASED = "RELEASED"
    VOIDED = "VOIDED"


class PayrollPeriodType(str, Enum):
    MONTHLY = "MONTHLY"
    SEMI_MONTHLY = "SEMI_MONTHLY"
    BI_WEEKLY = "BI_WEEKLY"
    WEEKLY = "WEEKLY"


class PayrollPeriodStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class EarningType(str, Enum):
    BASE_SALARY = "BASE_SALARY"
    OVERTIME = "OVERTIME"
    NIGHT_DIFFERENTIAL = "NIGHT_DIFFERENTIAL"


class DeductionType(str, Enum):
    TAX = "TAX"
    SSS = "SSS"
    PHILHEALTH = "PHILHEALTH"
    PAGIBIG = "PAGIBIG"
    LATE = "LATE"
    ABSENCE = "ABSENCE"


class RateTableKind(str, Enum):
    """Statutory table families resolved per organization and date."""

    TAX = "TAX"
    SSS = "SSS"
    PHILHEALTH = "PHILHEALTH"
    PAGIBIG = "PAGIBIG"


class PayrollLogAction(str, Enum):
    GENERATED = "GENERATED"
    RECALCULATED = "RECALCULATED"
    COMPUTED = "COMPUTED"
    APPROVED = "APPROVED"
    RELEASED = "RELEASED"
    VOIDED = "VOIDED"


class PolicyType(str, Enum):
    LATE = "LATE"
    ABSENCE = "ABSENCE"


class DeductionMethod(str, Enum):
    FIXED_AMOUNT = "FIXED_AMOUNT"
    PERCENTAGE = "PERCENTAGE"
    HOURLY_RATE = "HOURLY_RATE"
