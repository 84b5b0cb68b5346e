"""
Report Filters

Typed options shared by every filtered report. Predicates are produced per
capability (period, store, channel) as SQLAlchemy expressions, so optional
filters never change how the remaining parameters are bound.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import ColumnElement

from src.database.models import Sale


def _normalize_ids(ids: Optional[Iterable[int]]) -> Tuple[int, ...]:
    if not ids:
        return ()
    return tuple(sorted({int(i) for i in ids}))


@dataclass(frozen=True)
class ReportFilters:
    """
    Date range and optional dimension restrictions for a report.

    Both bounds are inclusive. An empty ``store_ids`` or ``channel_ids`` means
    the report is not restricted on that dimension.
    """
    start: datetime
    end: datetime
    store_ids: Tuple[int, ...] = field(default_factory=tuple)
    channel_ids: Tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "store_ids", _normalize_ids(self.store_ids))
        object.__setattr__(self, "channel_ids", _normalize_ids(self.channel_ids))

    def period_predicates(self) -> List[ColumnElement[bool]]:
        return [Sale.created_at >= self.start, Sale.created_at <= self.end]

    def store_predicates(self) -> List[ColumnElement[bool]]:
        if not self.store_ids:
            return []
        return [Sale.store_id.in_(self.store_ids)]

    def channel_predicates(self) -> List[ColumnElement[bool]]:
        if not self.channel_ids:
            return []
        return [Sale.channel_id.in_(self.channel_ids)]

    def sale_predicates(
        self,
        by_store: bool = True,
        by_channel: bool = True,
    ) -> List[ColumnElement[bool]]:
        """
        Build the WHERE conditions on ``sales`` for this filter set.

        Args:
            by_store: Apply the store restriction when present
            by_channel: Apply the channel restriction when present

        Returns:
            List of boolean SQL expressions, to be passed to ``.where(*conditions)``
        """
        conditions = self.period_predicates()
        if by_store:
            conditions.extend(self.store_predicates())
        if by_channel:
            conditions.extend(self.channel_predicates())
        return conditions


def resolve_period(
    start: Optional[datetime],
    end: Optional[datetime],
    now: datetime,
    default_days: int = 30,
) -> Tuple[datetime, datetime]:
    """
    Fill in missing bounds relative to ``now``.

    A missing end becomes ``now``; a missing start becomes ``default_days``
    before the end.
    """
    resolved_end = end if end is not None else now
    resolved_start = start if start is not None else resolved_end - timedelta(days=default_days)
    return resolved_start, resolved_end


def end_of_day(day: date) -> datetime:
    """Last representable instant of ``day``."""
    return datetime.combine(day, time.max)
