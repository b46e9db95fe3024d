from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ..core.enums import RateTableKind
from .model import RateTable


class RateTableRepository(Protocol):
    def get_rate_table(self, *, organization_id: Optional[int], kind: RateTableKind, as_of: date) -> Optional[RateTable]:
        """Table of `kind` effective on `as_of`.

        organization_id=None asks for the global table. The latest
        effective_from wins when several tables qualify.
        """

        raise NotImplementedError
