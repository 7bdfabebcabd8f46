"""Order creation and the forward-only fulfilment workflow.

``create_order`` turns a cart into a price-locked order. Persisting the order,
locking its photos and clearing the cart are one logical unit: if the photo
locks cannot all be taken, locks taken for the order are released and the
order is voided. Clearing the cart runs last; a stale cart cannot be ordered
twice because its photos are already locked.

``transition`` moves an order one step along ``ORDER_TRANSITIONS``. The write
is conditional on the stored status, so two admins advancing the same order
cannot both succeed. Completing an order schedules its photos for deletion.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Protocol

from pydantic import BaseModel, ValidationError

from print_orders.domain.checkout import ShippingAddress
from print_orders.domain.ids import OrderId, OwnerId, PhotoId
from print_orders.domain.orders import (
    INITIAL_STATUS,
    ORDER_TRANSITIONS,
    TERMINAL_STATUS,
    Order,
    OrderStatus,
    PaymentStatus,
    StatusNote,
    is_legal_transition,
)
from print_orders.domain.paging import Page
from print_orders.errors import (
    AlreadyLockedError,
    DependencyFailureError,
    EmptyCartError,
    InvalidTransitionError,
    OrderNotFoundError,
    PhotoNotFoundError,
    PhotoUnavailableError,
    PrintOrdersError,
    ValidationFailedError,
)
from print_orders.services.cart import ShoppingCartService
from print_orders.services.payments import PaymentService
from print_orders.services.photos import PhotoLifecycleService
from print_orders.services.sequences import SequenceGenerator
from print_orders.services.tax import TaxCalculator, TaxQuote

_logger = logging.getLogger(__name__)


class OrderRepository(Protocol):
    """Persistence interface for orders."""

    def create_order(self, order: Order) -> Order:
        """Insert an order and return it."""

    def get_order(self, order_id: OrderId) -> Order | None:
        """Return an order by id, if present."""

    def get_by_order_number(self, order_number: str) -> Order | None:
        """Return an order by its human-readable number."""

    def list_orders_by_owner(
        self, owner_id: OwnerId, page: int, page_size: int
    ) -> Page[Order]:
        """Return an owner's non-void orders, newest first."""

    def list_orders_by_status(
        self, status: OrderStatus, page: int, page_size: int
    ) -> Page[Order]:
        """Return non-void orders in a status, oldest first."""

    def list_completed_between(self, start: datetime, end: datetime) -> list[Order]:
        """Return orders completed in ``[start, end)``."""

    def update_if_status(self, order: Order, expected_status: OrderStatus) -> bool:
        """Write ``order`` only if the stored status equals ``expected_status``."""

    def void_order(self, order_id: OrderId, reason: str) -> None:
        """Mark an order void; it stays stored for audit."""


@dataclass
class OrderService:
    """Creates orders from carts and drives them to completion."""

    repository: OrderRepository
    cart_service: ShoppingCartService
    photo_service: PhotoLifecycleService
    payment_service: PaymentService
    tax_calculator: TaxCalculator
    sequence_generator: SequenceGenerator
    photo_retention_days: int = 7

    def create_order(
        self,
        owner_id: OwnerId,
        shipping_address: ShippingAddress | Mapping[str, object],
        payment_method: str,
        payment_details: BaseModel | Mapping[str, object] | None,
    ) -> Order:
        """Convert the owner's cart into a pending order."""
        cart = self.cart_service.get_cart(owner_id)
        if cart.is_empty:
            raise EmptyCartError(owner_id)
        address = _coerce_address(shipping_address)

        for photo_id in cart.photo_ids:
            photo = self.photo_service.find_owned(owner_id, photo_id)
            if photo is None or photo.is_locked_by_order:
                _logger.info(
                    "Checkout for %s rejected: photo %s unavailable",
                    owner_id,
                    photo_id,
                )
                raise PhotoUnavailableError(photo_id)

        subtotal = cart.subtotal
        tax = self._compute_tax(subtotal, address.state)
        payment = self.payment_service.prepare(
            payment_method, payment_details, tax.total
        )

        now = datetime.now(tz=UTC)
        order = Order(
            id=OrderId.new(),
            order_number=self.sequence_generator.next_order_number(now),
            owner_id=owner_id,
            lines=cart.lines,
            shipping_address=address,
            payment=payment,
            status=INITIAL_STATUS,
            subtotal=subtotal,
            tax_rate=tax.tax_rate,
            tax_amount=tax.tax_amount,
            total=tax.total,
            created_at=now,
            updated_at=now,
        )
        created = self.repository.create_order(order)
        self._lock_or_roll_back(created)

        try:
            self.cart_service.clear(owner_id)
        except Exception:
            _logger.exception(
                "Order %s committed but cart for %s was not cleared",
                created.order_number,
                owner_id,
            )
        _logger.info(
            "Order %s created for %s with total %s (%s)",
            created.order_number,
            owner_id,
            created.total,
            created.payment.method,
        )
        return created

    def transition(  # noqa: PLR0913
        self,
        order_id: OrderId,
        new_status: OrderStatus | str,
        actor: str,
        notes: str | None = None,
        shipping_date: datetime | None = None,
        tracking_number: str | None = None,
        now: datetime | None = None,
    ) -> Order:
        """Advance an order to the next status in the workflow."""
        requested = _parse_status(new_status)
        order = self.get_order(order_id)
        current = order.status
        if not is_legal_transition(current, requested):
            raise InvalidTransitionError(current, requested)
        if requested is TERMINAL_STATUS and shipping_date is None:
            raise ValidationFailedError("A shipping date is required to complete")

        timestamp = now or datetime.now(tz=UTC)
        updated = _apply_transition(
            order,
            requested,
            actor=actor,
            notes=notes or "",
            shipping_date=shipping_date,
            tracking_number=tracking_number,
            now=timestamp,
        )
        if not self.repository.update_if_status(updated, expected_status=current):
            _logger.warning(
                "Order %s changed concurrently; %s -> %s rejected",
                order.order_number,
                current,
                requested,
            )
            raise InvalidTransitionError(current, requested)
        _logger.info(
            "Order %s status updated from %s to %s by %s",
            order.order_number,
            current,
            requested,
            actor,
        )

        if requested is TERMINAL_STATUS:
            self._schedule_cleanup(updated)
        return updated

    def reschedule_cleanup(self, order_id: OrderId) -> datetime:
        """Re-apply photo deletion scheduling for a completed order."""
        order = self.get_order(order_id)
        if order.status is not TERMINAL_STATUS:
            raise InvalidTransitionError(order.status, TERMINAL_STATUS)
        return self._schedule_cleanup(order)

    def get_order(self, order_id: OrderId) -> Order:
        """Return a live order for admin use."""
        order = self.repository.get_order(order_id)
        if order is None or order.is_void:
            raise OrderNotFoundError(order_id)
        return order

    def get_order_for_owner(self, owner_id: OwnerId, order_id: OrderId) -> Order:
        """Return an order only if ``owner_id`` placed it."""
        order = self.repository.get_order(order_id)
        if order is None or order.is_void or order.owner_id != owner_id:
            raise OrderNotFoundError(order_id)
        return order

    def get_by_order_number(self, order_number: str) -> Order:
        """Return a live order by its number."""
        order = self.repository.get_by_order_number(order_number)
        if order is None or order.is_void:
            raise OrderNotFoundError(order_number)
        return order

    def list_orders_for_owner(
        self, owner_id: OwnerId, page: int = 1, page_size: int = 20
    ) -> Page[Order]:
        """Return the owner's order history."""
        return self.repository.list_orders_by_owner(owner_id, page, page_size)

    def list_orders_by_status(
        self, status: OrderStatus | str, page: int = 1, page_size: int = 20
    ) -> Page[Order]:
        """Return the admin work queue for a status."""
        return self.repository.list_orders_by_status(
            _parse_status(status), page, page_size
        )

    def list_completed_between(self, start: datetime, end: datetime) -> list[Order]:
        """Return orders completed in a date range."""
        return self.repository.list_completed_between(start, end)

    def _compute_tax(self, subtotal: Decimal, state_code: str) -> TaxQuote:
        try:
            return self.tax_calculator.compute(subtotal, state_code)
        except PrintOrdersError:
            raise
        except Exception as exc:
            raise DependencyFailureError("Tax calculator unavailable") from exc

    def _lock_or_roll_back(self, order: Order) -> None:
        try:
            self.photo_service.lock(order.photo_ids, order.id)
        except Exception as exc:
            _logger.warning(
                "Rolling back order %s: photo lock failed (%s)",
                order.order_number,
                exc,
            )
            self._roll_back(order, reason=f"photo lock failed: {exc}")
            if isinstance(exc, AlreadyLockedError | PhotoNotFoundError):
                raise PhotoUnavailableError(exc.photo_id) from exc
            if isinstance(exc, PrintOrdersError):
                raise
            raise DependencyFailureError(
                f"Photo store unavailable while locking order {order.order_number}"
            ) from exc

    def _roll_back(self, order: Order, reason: str) -> None:
        try:
            self.photo_service.release(order.photo_ids, order.id)
        except Exception as exc:
            _logger.exception(
                "Order %s rollback could not release photo locks", order.order_number
            )
            raise DependencyFailureError(
                f"Rollback of order {order.order_number} left photo locks held"
            ) from exc
        finally:
            self._void(order, reason)

    def _void(self, order: Order, reason: str) -> None:
        try:
            self.repository.void_order(order.id, reason=reason)
        except Exception as exc:
            _logger.exception("Order %s could not be voided", order.order_number)
            raise DependencyFailureError(
                f"Order {order.order_number} could not be voided"
            ) from exc

    def _schedule_cleanup(self, order: Order) -> datetime:
        completed_at = order.completed_at or datetime.now(tz=UTC)
        deletion_date = completed_at + timedelta(days=self.photo_retention_days)
        photo_ids: list[PhotoId] = order.photo_ids
        try:
            self.photo_service.schedule_deletion(photo_ids, deletion_date)
        except Exception as exc:
            _logger.exception(
                "Order %s completed but photo cleanup was not scheduled",
                order.order_number,
            )
            raise DependencyFailureError(
                f"Photo cleanup not scheduled for order {order.order_number}"
            ) from exc
        return deletion_date


def _apply_transition(  # noqa: PLR0913
    order: Order,
    requested: OrderStatus,
    *,
    actor: str,
    notes: str,
    shipping_date: datetime | None,
    tracking_number: str | None,
    now: datetime,
) -> Order:
    note = StatusNote(
        recorded_at=now,
        actor=actor,
        from_status=order.status,
        to_status=requested,
        note=notes.strip(),
    )
    changes: dict[str, object] = {
        "status": requested,
        "updated_at": now,
        "status_notes": (*order.status_notes, note),
    }
    if requested is OrderStatus.PAYMENT_VERIFIED:
        changes["payment_verified_at"] = now
        changes["payment"] = replace(
            order.payment,
            status=PaymentStatus.VERIFIED,
            verified_at=now,
            verified_by=actor,
        )
    elif requested is OrderStatus.PRINTED:
        changes["printed_at"] = now
    elif requested is OrderStatus.SHIPPED:
        changes["shipped_at"] = now
    elif requested is OrderStatus.COMPLETED:
        changes["completed_at"] = now
        changes["shipped_at"] = shipping_date
        if tracking_number and tracking_number.strip():
            changes["tracking_number"] = tracking_number.strip()
    return replace(order, **changes)


def _parse_status(value: OrderStatus | str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError as exc:
        allowed = ", ".join(status.value for status in ORDER_TRANSITIONS)
        raise ValidationFailedError(
            f"Unknown order status {value!r}; expected one of {allowed}"
        ) from exc


def _coerce_address(
    address: ShippingAddress | Mapping[str, object],
) -> ShippingAddress:
    if isinstance(address, ShippingAddress):
        return address
    try:
        return ShippingAddress.model_validate(address)
    except ValidationError as exc:
        raise ValidationFailedError(f"Invalid shipping address: {exc}") from exc
