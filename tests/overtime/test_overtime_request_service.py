from __future__ import annotations

from datetime import date

import pytest

from hr_payroll.core.enums import OvertimeStatus
from hr_payroll.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from hr_payroll.overtime.resolver import OvertimeResolver
from hr_payroll.overtime.service import OvertimeRequestService


def test_approve_partial_minutes_feeds_the_resolver(overtime):
    svc = OvertimeRequestService(overtime)
    request_id = svc.submit(employee_id=1, work_date=date(2025, 3, 3), requested_minutes=120, reason=" client release ")

    svc.approve(request_id=request_id, approver_id="mgr-7", approved_minutes=90)

    req = overtime.get(request_id=request_id)
    assert req.status == OvertimeStatus.APPROVED
    assert req.approved_minutes == 90
    assert req.decided_by == "mgr-7"
    assert req.reason == "client release"
    assert OvertimeResolver(overtime).approved_minutes(1, date(2025, 3, 3)) == 90


def test_approve_defaults_to_requested_minutes(overtime):
    svc = OvertimeRequestService(overtime)
    request_id = svc.submit(employee_id=1, work_date=date(2025, 3, 3), requested_minutes=45)

    svc.approve(request_id=request_id, approver_id="mgr-7")

    assert overtime.get(request_id=request_id).approved_minutes == 45


def test_cannot_approve_more_than_requested(overtime):
    svc = OvertimeRequestService(overtime)
    request_id = svc.submit(employee_id=1, work_date=date(2025, 3, 3), requested_minutes=60)

    with pytest.raises(ValidationError):
        svc.approve(request_id=request_id, approver_id="mgr-7", approved_minutes=61)

    assert overtime.get(request_id=request_id).status == OvertimeStatus.PENDING


def test_decided_requests_are_terminal(overtime):
    svc = OvertimeRequestService(overtime)
    request_id = svc.submit(employee_id=1, work_date=date(2025, 3, 3), requested_minutes=60)
    svc.reject(request_id=request_id, approver_id="mgr-7")

    with pytest.raises(ValidationError):
        svc.approve(request_id=request_id, approver_id="mgr-7")
    with pytest.raises(ValidationError):
        svc.cancel(request_id=request_id, employee_id=1)


def test_only_the_requester_can_cancel(overtime):
    svc = OvertimeRequestService(overtime)
    request_id = svc.submit(employee_id=1, work_date=date(2025, 3, 3), requested_minutes=60)

    with pytest.raises(AuthorizationError):
        svc.cancel(request_id=request_id, employee_id=2)

    svc.cancel(request_id=request_id, employee_id=1)
    assert overtime.get(request_id=request_id).status == OvertimeStatus.CANCELLED


def test_submit_validation_and_missing_request(overtime):
    svc = OvertimeRequestService(overtime)

    with pytest.raises(ValidationError):
        svc.submit(employee_id=1, work_date=date(2025, 3, 3), requested_minutes=0)
    with pytest.raises(NotFoundError):
        svc.reject(request_id=999, approver_id="mgr-7")


def test_resolver_only_counts_approved_requests_on_that_date(overtime):
    overtime.approved(1, date(2025, 3, 3), 30)
    overtime.approved(1, date(2025, 3, 3), 15)
    overtime.approved(1, date(2025, 3, 4), 60)
    overtime.create(employee_id=1, work_date=date(2025, 3, 3), requested_minutes=100, reason=None)

    assert OvertimeResolver(overtime).approved_minutes(1, date(2025, 3, 3)) == 45


def test_list_requests_filters_by_range_and_status(overtime):
    svc = OvertimeRequestService(overtime)
    first = svc.submit(employee_id=1, work_date=date(2025, 3, 3), requested_minutes=60)
    second = svc.submit(employee_id=1, work_date=date(2025, 3, 4), requested_minutes=30)
    svc.submit(employee_id=1, work_date=date(2025, 4, 1), requested_minutes=30)
    svc.submit(employee_id=2, work_date=date(2025, 3, 3), requested_minutes=30)
    svc.approve(request_id=first, approver_id="mgr-7")

    march = svc.list_requests(employee_id=1, start=date(2025, 3, 1), end=date(2025, 3, 31))
    pending = svc.list_requests(employee_id=1, start=date(2025, 3, 1), end=date(2025, 3, 31), status=OvertimeStatus.PENDING)

    assert [r.request_id for r in march] == [first, second]
    assert [r.request_id for r in pending] == [second]
    with pytest.raises(ValidationError):
        svc.list_requests(employee_id=1, start=date(2025, 3, 31), end=date(2025, 3, 1))
