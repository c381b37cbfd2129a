"""
Read-only admin aggregations: the reports page and the dashboard.

Both are keyed by a date range (week, month, quarter or year); switching the
range re-issues every dependent fetch.
"""

import logging
from typing import Any, Dict, List, Optional

from storefront import config
from storefront.stores.base import Store

logger = logging.getLogger(__name__)


def _check_range(date_range: str) -> str:
    if date_range not in config.DATE_RANGES:
        raise ValueError(f"date_range must be one of {', '.join(config.DATE_RANGES)}, got {date_range!r}")
    return date_range


class RangedStore(Store):
    """Each entry of `reports` is (attribute, endpoint, failure message)."""

    reports = ()

    def __init__(self, api, date_range: str = config.DEFAULT_DATE_RANGE):
        super().__init__(api)
        self.date_range = _check_range(date_range)

    def _params(self) -> Dict[str, Any]:
        return {"dateRange": self.date_range}

    def _fetch(self, attr: str, path: str, fallback: str, clear_error: bool = True) -> Any:
        def apply(payload):
            setattr(self, attr, payload)
            return payload

        return self._run(
            attr,
            lambda: self.api.get(path, self._params(), fallback=fallback),
            apply,
            clear_error=clear_error,
        )

    def refresh(self) -> Dict[str, Any]:
        """Re-issue every fetch; a failure stays in `error` even if later fetches succeed."""
        self.error = None
        return {attr: self._fetch(attr, path, fallback, clear_error=False)
                for attr, path, fallback in self.reports}

    def set_date_range(self, date_range: str) -> Dict[str, Any]:
        self.date_range = _check_range(date_range)
        return self.refresh()


class ReportStore(RangedStore):
    name = "reports"
    reports = (
        ("sales_data", "/reports/sales", "Failed to fetch sales report"),
        ("top_products", "/reports/top-products", "Failed to fetch top products"),
        ("top_customers", "/reports/top-customers", "Failed to fetch top customers"),
        ("category_data", "/reports/sales-by-category", "Failed to fetch sales by category"),
        ("timeline_data", "/reports/sales-timeline", "Failed to fetch sales timeline"),
    )

    def __init__(self, api, date_range: str = config.DEFAULT_DATE_RANGE):
        super().__init__(api, date_range)
        self.sales_data: Optional[Dict[str, Any]] = None
        self.top_products: List[Dict[str, Any]] = []
        self.top_customers: List[Dict[str, Any]] = []
        self.category_data: List[Dict[str, Any]] = []
        self.timeline_data: List[Dict[str, Any]] = []

    def fetch_sales(self):
        return self._fetch(*self.reports[0])

    def fetch_top_products(self):
        return self._fetch(*self.reports[1])

    def fetch_top_customers(self):
        return self._fetch(*self.reports[2])

    def fetch_sales_by_category(self):
        return self._fetch(*self.reports[3])

    def fetch_sales_timeline(self):
        return self._fetch(*self.reports[4])


class DashboardStore(RangedStore):
    name = "dashboard"
    reports = (
        ("stats", "/dashboard/stats", "Failed to fetch dashboard statistics"),
        ("recent_orders", "/dashboard/recent-orders", "Failed to fetch recent orders"),
        ("low_stock_products", "/dashboard/low-stock", "Failed to fetch low stock products"),
    )

    def __init__(self, api, date_range: str = config.DEFAULT_DATE_RANGE):
        super().__init__(api, date_range)
        self.stats: Dict[str, Any] = {
            "totalProducts": 0,
            "totalOrders": 0,
            "totalUsers": 0,
            "totalRevenue": 0,
        }
        self.recent_orders: List[Dict[str, Any]] = []
        self.low_stock_products: List[Dict[str, Any]] = []

    def fetch_stats(self):
        return self._fetch(*self.reports[0])

    def fetch_recent_orders(self):
        return self._fetch(*self.reports[1])

    def fetch_low_stock(self):
        return self._fetch(*self.reports[2])
