"""
Dashboard State

Holds the two filter sets of the dashboard: the draft being edited and the
applied one the reports were fetched with. Edits never trigger a fetch; every
transition that should refetch returns True.
"""

from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


class Tab(str, Enum):
    """Dashboard tabs"""
    OVERVIEW = "overview"
    PRODUCTS = "products"
    CHANNELS = "channels"
    TEMPORAL = "temporal"
    CUSTOMERS = "customers"


class FilterSet(BaseModel):
    """Date range and store/channel selection sent with every report request"""

    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: date
    store_ids: Tuple[int, ...] = ()
    channel_ids: Tuple[int, ...] = ()

    @field_validator("store_ids", "channel_ids", mode="before")
    @classmethod
    def normalize_ids(cls, v: Any) -> Tuple[int, ...]:
        if not v:
            return ()
        return tuple(sorted({int(i) for i in v}))

    @classmethod
    def trailing(cls, today: date, days: int = 30) -> "FilterSet":
        """Last ``days`` days up to and including ``today``, all stores and channels."""
        return cls(start_date=today - timedelta(days=days), end_date=today)

    def to_query(self) -> Dict[str, str]:
        """Query-string parameters; empty selections are omitted."""
        params = {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
        }
        if self.store_ids:
            params["storeIds"] = ",".join(str(i) for i in self.store_ids)
        if self.channel_ids:
            params["channelIds"] = ",".join(str(i) for i in self.channel_ids)
        return params


class DashboardState:
    """
    View state of the dashboard.

    Args:
        today: Day the default trailing window ends on
        default_days: Length of the default window
        product_limit: Initial number of products in the ranking
    """

    def __init__(self, today: date, default_days: int = 30, product_limit: int = 10):
        self.defaults = FilterSet.trailing(today, default_days)
        self.draft = self.defaults
        self.applied = self.defaults
        self.draft_product_limit = product_limit
        self.applied_product_limit = product_limit
        self.active_tab = Tab.OVERVIEW
        self.loading = False

        # Report payloads by report name, kept across failed refreshes
        self.data: Dict[str, Any] = {}
        self.stores: list = []
        self.channels: list = []

    def edit(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        store_ids: Optional[Tuple[int, ...]] = None,
        channel_ids: Optional[Tuple[int, ...]] = None,
    ) -> None:
        """Change the draft filters. Never triggers a fetch."""
        changes: Dict[str, Any] = {}
        if start_date is not None:
            changes["start_date"] = start_date
        if end_date is not None:
            changes["end_date"] = end_date
        if store_ids is not None:
            changes["store_ids"] = store_ids
        if channel_ids is not None:
            changes["channel_ids"] = channel_ids
        self.draft = FilterSet(**{**self.draft.model_dump(), **changes})

    def apply_filters(self) -> bool:
        """Promote the draft filters. Returns True when the applied set changed."""
        if self.draft == self.applied:
            return False
        self.applied = self.draft
        return True

    def reset_filters(self) -> bool:
        """Restore default filters in both draft and applied state."""
        self.draft = self.defaults
        if self.applied == self.defaults:
            return False
        self.applied = self.defaults
        return True

    def set_product_limit(self, limit: int) -> None:
        if limit < 1:
            raise ValueError("Product limit must be at least 1")
        self.draft_product_limit = limit

    def apply_product_limit(self) -> bool:
        if self.draft_product_limit == self.applied_product_limit:
            return False
        self.applied_product_limit = self.draft_product_limit
        return True

    def switch_tab(self, tab: Tab) -> bool:
        tab = Tab(tab)
        if tab == self.active_tab:
            return False
        self.active_tab = tab
        return True
