from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, date_field, int_field, json_body, ok
from ..container import Container
from ..core.enums import OvertimeStatus
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/employees/<int:employee_id>/timesheet", methods=["GET"], endpoint="employee_timesheet")
    def employee_timesheet(employee_id: int):
        args = request.args.to_dict()
        result = container.timesheet_calculator.calculate_period(
            employee_id=employee_id,
            start=date_field(args, "start"),
            end=date_field(args, "end"),
        )
        return ok({"totals": result.totals, "entries": result.entries, "present_days": result.present_days})

    @app.route("/api/overtime-requests", methods=["POST"], endpoint="overtime_submit")
    def overtime_submit():
        data = json_body()
        request_id = container.overtime_service.submit(
            employee_id=int_field(data, "employee_id"),
            work_date=date_field(data, "work_date"),
            requested_minutes=int_field(data, "requested_minutes"),
            reason=data.get("reason"),
        )
        return ok({"request_id": request_id}, 201)

    @app.route("/api/overtime-requests/<int:request_id>/approve", methods=["POST"], endpoint="overtime_approve")
    def overtime_approve(request_id: int):
        data = request.get_json(silent=True) or {}
        approved = data.get("approved_minutes")
        container.overtime_service.approve(
            request_id=request_id,
            approver_id=current_actor(),
            approved_minutes=int_field(data, "approved_minutes") if approved is not None else None,
        )
        return ok({"request_id": request_id})

    @app.route("/api/overtime-requests/<int:request_id>/reject", methods=["POST"], endpoint="overtime_reject")
    def overtime_reject(request_id: int):
        container.overtime_service.reject(request_id=request_id, approver_id=current_actor())
        return ok({"request_id": request_id})

    @app.route("/api/overtime-requests/<int:request_id>/cancel", methods=["POST"], endpoint="overtime_cancel")
    def overtime_cancel(request_id: int):
        data = json_body()
        container.overtime_service.cancel(request_id=request_id, employee_id=int_field(data, "employee_id"))
        return ok({"request_id": request_id})

    @app.route("/api/employees/<int:employee_id>/overtime-requests", methods=["GET"], endpoint="overtime_list")
    def overtime_list(employee_id: int):
        args = request.args.to_dict()
        status = args.get("status")
        try:
            status = OvertimeStatus(status.upper()) if status else None
        except ValueError as exc:
            raise ValidationError(f"Invalid status: {status!r}") from exc
        requests = container.overtime_service.list_requests(
            employee_id=employee_id,
            start=date_field(args, "start"),
            end=date_field(args, "end"),
            status=status,
        )
        return ok(requests)
