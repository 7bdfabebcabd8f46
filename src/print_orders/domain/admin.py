"""Admin reporting models."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class DashboardStats:
    """Order counters shown on the admin dashboard."""

    pending_orders: int
    processing_orders: int
    completed_today: int
    revenue_today: Decimal


@dataclass(frozen=True)
class MaintenanceReport:
    """Result of one maintenance sweep."""

    ran_at: datetime
    bytes_freed: int
    carts_expired: int
