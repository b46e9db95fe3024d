from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, date_field, int_field, json_body, ok, required, to_jsonable
from ..container import Container
from ..core.enums import PayrollPeriodStatus, PayrollPeriodType, PayrollStatus
from ..core.exceptions import ValidationError
from .model import PayrollView


def _view_json(view: PayrollView) -> dict:
    data = to_jsonable(view)
    data.pop("payroll", None)
    data.update(
        payroll_id=view.payroll_id,
        status=to_jsonable(view.status),
        is_persisted=view.is_persisted,
    )
    return data


def _enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(str(value).upper())
    except ValueError as exc:
        raise ValidationError(f"Invalid {field_name}: {value!r}") from exc


def register(app: Flask, container: Container) -> None:
    def _period_args(data: dict) -> dict:
        return {
            "employee_id": int_field(data, "employee_id"),
            "organization_id": int_field(data, "organization_id"),
            "period_start": date_field(data, "period_start"),
            "period_end": date_field(data, "period_end"),
        }

    @app.route("/api/payrolls/preview", methods=["POST"], endpoint="payroll_preview")
    def payroll_preview():
        view = container.payroll_assembler.preview(**_period_args(json_body()))
        return ok(_view_json(view))

    @app.route("/api/payrolls/view", methods=["GET"], endpoint="payroll_view")
    def payroll_view():
        view = container.payroll_assembler.get_payroll_view(**_period_args(request.args.to_dict()))
        return ok(_view_json(view))

    @app.route("/api/payrolls", methods=["POST"], endpoint="payroll_generate")
    def payroll_generate():
        data = json_body()
        status = _enum(PayrollStatus, data.get("status") or "DRAFT", "status")
        view, created = container.payroll_assembler.generate_or_get(
            **_period_args(data), actor_id=current_actor(), status=status
        )
        return ok(_view_json(view), 201 if created else 200)

    @app.route("/api/payrolls", methods=["GET"], endpoint="payroll_list")
    def payroll_list():
        args = request.args
        payrolls = container.payroll_assembler.list_for_period(
            organization_id=int_field(args, "organization_id"),
            period_start=date_field(args, "period_start"),
            period_end=date_field(args, "period_end"),
            include_voided=args.get("include_voided", "").lower() in ("1", "true", "yes"),
        )
        return ok(payrolls)

    @app.route("/api/payrolls/<int:payroll_id>", methods=["GET"], endpoint="payroll_detail")
    def payroll_detail(payroll_id: int):
        return ok(_view_json(container.payroll_assembler.get_by_id(payroll_id)))

    @app.route("/api/payrolls/<int:payroll_id>/recalculate", methods=["POST"], endpoint="payroll_recalculate")
    def payroll_recalculate(payroll_id: int):
        view = container.payroll_assembler.recalculate(payroll_id=payroll_id, actor_id=current_actor())
        return ok(_view_json(view))

    @app.route("/api/payrolls/<int:payroll_id>/compute", methods=["POST"], endpoint="payroll_compute")
    def payroll_compute(payroll_id: int):
        return ok(container.status_machine.compute(payroll_id, actor_id=current_actor()))

    @app.route("/api/payrolls/<int:payroll_id>/approve", methods=["POST"], endpoint="payroll_approve")
    def payroll_approve(payroll_id: int):
        return ok(container.status_machine.approve(payroll_id, actor_id=current_actor()))

    @app.route("/api/payrolls/<int:payroll_id>/release", methods=["POST"], endpoint="payroll_release")
    def payroll_release(payroll_id: int):
        return ok(container.status_machine.release(payroll_id, actor_id=current_actor()))

    @app.route("/api/payrolls/<int:payroll_id>/void", methods=["POST"], endpoint="payroll_void")
    def payroll_void(payroll_id: int):
        data = request.get_json(silent=True) or {}
        return ok(container.status_machine.void(payroll_id, actor_id=current_actor(), reason=data.get("reason")))

    @app.route("/api/payrolls/<int:payroll_id>/history", methods=["GET"], endpoint="payroll_history")
    def payroll_history(payroll_id: int):
        return ok(container.status_machine.history(payroll_id))

    @app.route("/api/payrolls/<int:payroll_id>/payslip", methods=["GET"], endpoint="payroll_payslip")
    def payroll_payslip(payroll_id: int):
        return ok(container.payroll_run_service.payslip(payroll_id))

    @app.route("/api/payrolls/bulk-approve", methods=["POST"], endpoint="payroll_bulk_approve")
    def payroll_bulk_approve():
        ids = required(json_body(), "payroll_ids")
        return ok(container.status_machine.bulk_approve(ids, actor_id=current_actor()))

    @app.route("/api/payrolls/bulk-release", methods=["POST"], endpoint="payroll_bulk_release")
    def payroll_bulk_release():
        ids = required(json_body(), "payroll_ids")
        return ok(container.status_machine.bulk_release(ids, actor_id=current_actor()))

    @app.route("/api/payroll-runs", methods=["POST"], endpoint="payroll_run")
    def payroll_run():
        data = json_body()
        result = container.payroll_run_service.run_batch(
            organization_id=int_field(data, "organization_id"),
            period_start=date_field(data, "period_start"),
            period_end=date_field(data, "period_end"),
            actor_id=current_actor(),
            employee_ids=data.get("employee_ids"),
        )
        return ok(
            {
                "generated": [_view_json(v) for v in result.generated],
                "failures": result.failures,
            }
        )

    @app.route("/api/payroll-periods", methods=["POST"], endpoint="payroll_period_create")
    def payroll_period_create():
        data = json_body()
        period = container.period_service.create_period(
            organization_id=int_field(data, "organization_id"),
            start_date=date_field(data, "start_date"),
            end_date=date_field(data, "end_date"),
            pay_date=date_field(data, "pay_date"),
            period_type=_enum(PayrollPeriodType, required(data, "period_type"), "period_type"),
        )
        return ok(period, 201)

    @app.route("/api/payroll-periods/status", methods=["POST"], endpoint="payroll_period_status")
    def payroll_period_status():
        data = json_body()
        period = container.period_service.update_status(
            organization_id=int_field(data, "organization_id"),
            start_date=date_field(data, "start_date"),
            end_date=date_field(data, "end_date"),
            new_status=_enum(PayrollPeriodStatus, required(data, "status"), "status"),
        )
        return ok(period)
