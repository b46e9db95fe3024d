from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import time, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on error.

    Repositories that need several statements to land together (a status
    change and its audit log row) run them inside a single block.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception as exc:
        logger.debug("Rolling back transaction: %s", exc)
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def as_decimal(value: Any) -> Optional[Decimal]:
    """DECIMAL columns come back as Decimal; anything else goes through str."""
    if value is None or isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def as_time(value: Any) -> Optional[time]:
    """TIME columns arrive as time, timedelta or 'HH:MM[:SS]' depending on the connector."""
    if value is None or isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(hour=seconds // 3600, minute=(seconds % 3600) // 60, second=seconds % 60)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(hour=int(parts[0]), minute=int(parts[1]), second=int(parts[2]) if len(parts) > 2 and parts[2] else 0)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
