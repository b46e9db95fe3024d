from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

CENT = Decimal("0.01")
RATE_PLACES = Decimal("0.0001")

Number = Union[Decimal, int, str]


def to_money(value: Number) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_rate(value: Number) -> Decimal:
    return Decimal(value).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)


def minutes_to_hours(minutes: int) -> Decimal:
    return (Decimal(int(minutes)) / Decimal(60)).quantize(CENT, rounding=ROUND_HALF_UP)


def money_sum(values: Iterable[Decimal]) -> Decimal:
    return to_money(sum(values, Decimal("0")))
