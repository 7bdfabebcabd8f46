"""Admin service for reporting and maintenance sweeps."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, time, timedelta
from decimal import Decimal

from print_orders.domain.admin import DashboardStats, MaintenanceReport
from print_orders.domain.orders import OrderStatus
from print_orders.services.cart import ShoppingCartService
from print_orders.services.orders import OrderService
from print_orders.services.photos import PhotoLifecycleService

_logger = logging.getLogger(__name__)


@dataclass
class AdminService:
    """Service for admin dashboards and scheduled cleanup."""

    order_service: OrderService
    photo_service: PhotoLifecycleService
    cart_service: ShoppingCartService

    def dashboard(self, now: datetime | None = None) -> DashboardStats:
        """Return queue sizes and today's completed revenue."""
        current = now or datetime.now(tz=UTC)
        start_of_day = datetime.combine(current.date(), time.min, tzinfo=current.tzinfo)
        completed = self.order_service.list_completed_between(
            start_of_day, start_of_day + timedelta(days=1)
        )
        return DashboardStats(
            pending_orders=self._count(OrderStatus.PENDING),
            processing_orders=self._count(OrderStatus.PROCESSING),
            completed_today=len(completed),
            revenue_today=sum((order.total for order in completed), Decimal("0.00")),
        )

    def run_cleanup(self, now: datetime | None = None) -> MaintenanceReport:
        """Purge photos due for deletion and expire idle carts."""
        current = now or datetime.now(tz=UTC)
        bytes_freed = self.photo_service.purge(current)
        carts_expired = self.cart_service.expire_stale_carts(current)
        _logger.info(
            "Maintenance sweep freed %s bytes and expired %s carts",
            bytes_freed,
            carts_expired,
        )
        return MaintenanceReport(
            ran_at=current, bytes_freed=bytes_freed, carts_expired=carts_expired
        )

    def _count(self, status: OrderStatus) -> int:
        page = self.order_service.list_orders_by_status(status, page=1, page_size=1)
        return page.total_count
