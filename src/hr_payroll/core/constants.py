"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time
from decimal import Decimal

REGULAR_MINUTES_PER_DAY = 480

HOURS_PER_MONTH = Decimal("160")
WORKING_DAYS_PER_MONTH = Decimal("22")
HOURS_PER_DAY = Decimal("8")

OVERTIME_MULTIPLIER = Decimal("1.25")
NIGHT_DIFFERENTIAL_RATE = Decimal("0.10")
NIGHT_START = time(22, 0)
NIGHT_END = time(6, 0)

# 13th month pay and other benefits exempt from income tax (TRAIN law).
BONUS_TAX_EXEMPTION = Decimal("90000.00")
DEFAULT_MINIMUM_WAGE = Decimal("16000.00")

DEFAULT_LATE_GRACE_MINUTES = 5
DEFAULT_HISTORY_LIMIT = 50
