from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime

import pytest

from hr_payroll.core.exceptions import IncompleteEntryError, ValidationError
from hr_payroll.overtime.resolver import OvertimeResolver
from hr_payroll.timesheet.calculator import TimesheetCalculator
from hr_payroll.timesheet.model import TimesheetTotals


def _calc(time_entries, overtime):
    return TimesheetCalculator(time_entries, time_entries, OvertimeResolver(overtime))


def _long_day(time_entries, day: date = date(2025, 3, 3)):
    return time_entries.add(
        1,
        datetime(day.year, day.month, day.day, 9, 0),
        datetime(day.year, day.month, day.day, 19, 0),
        breaks=[
            (datetime(day.year, day.month, day.day, 12, 0), datetime(day.year, day.month, day.day, 13, 0), False),
            (datetime(day.year, day.month, day.day, 15, 0), datetime(day.year, day.month, day.day, 15, 15), True),
        ],
    )


def test_approved_overtime_is_clamped_to_overtime_worked(time_entries, overtime):
    entry = _long_day(time_entries)
    overtime.approved(1, entry.work_date, 90)

    r = _calc(time_entries, overtime).calculate_entry(entry)

    assert r.raw_minutes == 600
    assert r.net_work_minutes == 540
    assert r.regular_minutes == 480
    assert r.overtime_raw_minutes == 60
    assert r.overtime_approved_minutes == 60
    assert r.payable_minutes == 555


def test_unapproved_overtime_is_not_payable(time_entries, overtime):
    entry = _long_day(time_entries)

    r = _calc(time_entries, overtime).calculate_entry(entry)

    assert r.overtime_raw_minutes == 60
    assert r.overtime_approved_minutes == 0
    assert r.payable_minutes == 495


def test_paid_break_is_added_on_top_of_the_regular_cap(time_entries, overtime):
    # 8h of work plus a paid 15 minute break -> 495 payable, not 480.
    entry = time_entries.add(
        1,
        datetime(2025, 3, 3, 9, 0),
        datetime(2025, 3, 3, 17, 15),
        breaks=[(datetime(2025, 3, 3, 10, 0), datetime(2025, 3, 3, 10, 15), True)],
    )

    r = _calc(time_entries, overtime).calculate_entry(entry)

    assert r.net_work_minutes == 495
    assert r.regular_minutes == 480
    assert r.overtime_raw_minutes == 15
    assert r.paid_break_minutes == 15
    assert r.payable_minutes == 495


def test_entry_without_clock_out_raises(time_entries, overtime):
    entry = time_entries.add(1, datetime(2025, 3, 3, 9, 0), None)

    with pytest.raises(IncompleteEntryError) as exc:
        _calc(time_entries, overtime).calculate_entry(entry)

    assert exc.value.time_entry_id == entry.time_entry_id
    assert exc.value.work_date == date(2025, 3, 3)


def test_clock_out_before_clock_in_is_rejected(time_entries, overtime):
    entry = time_entries.add(1, datetime(2025, 3, 3, 17, 0), datetime(2025, 3, 3, 9, 0))

    with pytest.raises(ValidationError):
        _calc(time_entries, overtime).calculate_entry(entry)


def test_open_entries_are_left_out_of_the_period(time_entries, overtime):
    time_entries.add(1, datetime(2025, 3, 3, 9, 0), datetime(2025, 3, 3, 17, 0))
    time_entries.add(1, datetime(2025, 3, 4, 9, 0), None)

    result = _calc(time_entries, overtime).calculate_period(employee_id=1, start=date(2025, 3, 1), end=date(2025, 3, 15))

    assert [e.work_date for e in result.entries] == [date(2025, 3, 3)]
    assert result.totals.payable_minutes == 480


def test_open_break_counts_as_zero(time_entries, overtime):
    entry = time_entries.add(
        1,
        datetime(2025, 3, 3, 9, 0),
        datetime(2025, 3, 3, 17, 0),
        breaks=[(datetime(2025, 3, 3, 12, 0), None, False)],
    )

    r = _calc(time_entries, overtime).calculate_entry(entry)

    assert r.unpaid_break_minutes == 0
    assert r.net_work_minutes == 480


def test_period_is_idempotent_and_ordered(time_entries, overtime):
    time_entries.add(1, datetime(2025, 3, 5, 8, 0), datetime(2025, 3, 5, 18, 0))
    time_entries.add(1, datetime(2025, 3, 3, 9, 0), datetime(2025, 3, 3, 17, 30))
    overtime.approved(1, date(2025, 3, 5), 45)
    calc = _calc(time_entries, overtime)

    first = calc.calculate_period(employee_id=1, start=date(2025, 3, 1), end=date(2025, 3, 15))
    second = calc.calculate_period(employee_id=1, start=date(2025, 3, 1), end=date(2025, 3, 15))

    assert first == second
    assert [e.work_date for e in first.entries] == [date(2025, 3, 3), date(2025, 3, 5)]
    assert first.totals.payable_minutes == 480 + 480 + 45


def test_period_totals_are_additive_over_sub_ranges(time_entries, overtime):
    for day in range(3, 8):
        _long_day(time_entries, date(2025, 3, day))
    overtime.approved(1, date(2025, 3, 4), 30)
    overtime.approved(1, date(2025, 3, 6), 120)
    calc = _calc(time_entries, overtime)

    whole = calc.calculate_period(employee_id=1, start=date(2025, 3, 3), end=date(2025, 3, 7))
    left = calc.calculate_period(employee_id=1, start=date(2025, 3, 3), end=date(2025, 3, 4))
    right = calc.calculate_period(employee_id=1, start=date(2025, 3, 5), end=date(2025, 3, 7))

    assert whole.totals == left.totals + right.totals
    assert whole.totals == TimesheetTotals.summed(whole.entries)
    assert whole.totals.overtime_approved_minutes == 30 + 60


def test_incomplete_entry_aborts_the_period(time_entries, overtime):
    time_entries.add(1, datetime(2025, 3, 3, 9, 0), datetime(2025, 3, 3, 17, 0))
    broken = time_entries.add(1, datetime(2025, 3, 4, 9, 0), datetime(2025, 3, 4, 17, 0))
    # Closed by status but the clock-out got lost.
    time_entries.entries[broken.time_entry_id] = replace(broken, clock_out_at=None)

    with pytest.raises(IncompleteEntryError):
        _calc(time_entries, overtime).calculate_period(employee_id=1, start=date(2025, 3, 1), end=date(2025, 3, 15))


def test_overtime_lookup_failure_counts_as_no_overtime(time_entries, overtime, caplog):
    entry = _long_day(time_entries)
    overtime.approved(1, entry.work_date, 60)
    overtime.fail = True

    with caplog.at_level(logging.WARNING, logger="hr_payroll.overtime.resolver"):
        r = _calc(time_entries, overtime).calculate_entry(entry)

    assert r.overtime_approved_minutes == 0
    assert r.payable_minutes == 495
    assert "Failed to fetch approved overtime" in caplog.text


def test_night_minutes_for_overnight_shift(time_entries, overtime):
    entry = time_entries.add(1, datetime(2025, 3, 3, 20, 0), datetime(2025, 3, 4, 6, 0))
    overtime.approved(1, date(2025, 3, 3), 120)

    r = _calc(time_entries, overtime).calculate_entry(entry)

    assert r.raw_minutes == 600
    assert r.night_minutes == 480
    assert r.payable_minutes == 600


def test_night_minutes_exclude_unpaid_breaks_and_never_exceed_payable_work(time_entries, overtime):
    entry = time_entries.add(
        1,
        datetime(2025, 3, 3, 22, 0),
        datetime(2025, 3, 4, 2, 0),
        breaks=[(datetime(2025, 3, 4, 0, 0), datetime(2025, 3, 4, 0, 30), False)],
    )

    r = _calc(time_entries, overtime).calculate_entry(entry)

    assert r.net_work_minutes == 210
    assert r.night_minutes == 210
