from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_date_range(start, end, *, field_name: str = "date range") -> None:
    if end < start:
        raise ValidationError(f"Invalid {field_name}: end {end} is before start {start}")
