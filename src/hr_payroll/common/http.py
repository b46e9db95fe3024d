from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from flask import Flask, jsonify, request

from ..core.exceptions import (
    AuthorizationError,
    ConcurrencyConflictError,
    DomainError,
    IncompleteEntryError,
    InvalidTransitionError,
    NoApplicableRateError,
    NoCompensationError,
    NotFoundError,
    PeriodOverlapError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

# Most specific first; PeriodOverlapError is also a ValidationError.
_STATUS_BY_ERROR = (
    (PeriodOverlapError, 409),
    (InvalidTransitionError, 409),
    (ConcurrencyConflictError, 409),
    (IncompleteEntryError, 422),
    (NoApplicableRateError, 422),
    (NoCompensationError, 422),
    (NotFoundError, 404),
    (AuthorizationError, 403),
    (ValidationError, 400),
)


def status_for(exc: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


def to_jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value


def ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": to_jsonable(data)}), status


def current_actor() -> str:
    """Acting user id, taken from the X-User-Id header."""
    actor = (request.headers.get("X-User-Id") or "").strip()
    if not actor:
        raise AuthorizationError("Missing X-User-Id header")
    return actor


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def required(data: dict, key: str) -> Any:
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{key} is required")
    return value


def date_field(data: dict, key: str) -> date:
    value = required(data, key)
    try:
        return parse_iso_date(str(value))
    except ValueError as exc:
        raise ValidationError(f"{key} must be a YYYY-MM-DD date") from exc


def int_field(data: dict, key: str) -> int:
    value = required(data, key)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{key} must be an integer") from exc


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = status_for(exc)
        if status >= 422:
            logger.warning("%s: %s", type(exc).__name__, exc)
        return jsonify({"success": False, "error": type(exc).__name__, "message": str(exc)}), status
