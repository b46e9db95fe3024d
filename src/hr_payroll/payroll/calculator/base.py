from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...compensation.model import Compensation
from ...timesheet.model import TimesheetTotals
from ..model import PayrollEarning


class EarningsCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll earnings)."""

    @abstractmethod
    def earnings(self, *, totals: TimesheetTotals, compensation: Compensation) -> Sequence[PayrollEarning]:
        raise NotImplementedError
