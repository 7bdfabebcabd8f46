"""Domain models and status table for orders."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from print_orders.domain.cart import CartLine
from print_orders.domain.checkout import ShippingAddress
from print_orders.domain.ids import OrderId, OwnerId, PhotoId


class OrderStatus(StrEnum):
    """Fulfilment workflow states."""

    PENDING = "pending"
    PAYMENT_VERIFIED = "payment_verified"
    PROCESSING = "processing"
    PRINTED = "printed"
    SHIPPED = "shipped"
    COMPLETED = "completed"


class PaymentMethod(StrEnum):
    """Accepted payment methods."""

    CREDIT_CARD = "credit_card"
    BRANCH_PAYMENT = "branch_payment"


class PaymentStatus(StrEnum):
    """Payment progress for an order."""

    PENDING = "pending"
    PROCESSING = "processing"
    VERIFIED = "verified"


# Each status maps to the single status allowed after it.
ORDER_TRANSITIONS: dict[OrderStatus, OrderStatus | None] = {
    OrderStatus.PENDING: OrderStatus.PAYMENT_VERIFIED,
    OrderStatus.PAYMENT_VERIFIED: OrderStatus.PROCESSING,
    OrderStatus.PROCESSING: OrderStatus.PRINTED,
    OrderStatus.PRINTED: OrderStatus.SHIPPED,
    OrderStatus.SHIPPED: OrderStatus.COMPLETED,
    OrderStatus.COMPLETED: None,
}

INITIAL_STATUS = OrderStatus.PENDING
TERMINAL_STATUS = OrderStatus.COMPLETED


def is_legal_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    """Return True when ``requested`` is the next step after ``current``."""
    return ORDER_TRANSITIONS.get(current) == requested


@dataclass(frozen=True)
class OrderPayment:
    """Payment information stored on the order."""

    method: PaymentMethod
    status: PaymentStatus
    card_last_four: str | None = None
    cardholder_name: str | None = None
    preferred_branch: str | None = None
    reference_number: str | None = None
    processor_reference: str | None = None
    verified_at: datetime | None = None
    verified_by: str | None = None


@dataclass(frozen=True)
class StatusNote:
    """Audit trail entry for a status change."""

    recorded_at: datetime
    actor: str
    from_status: OrderStatus
    to_status: OrderStatus
    note: str = ""


@dataclass(frozen=True)
class Order:
    """A price-locked order created from a cart."""

    id: OrderId
    order_number: str
    owner_id: OwnerId
    lines: tuple[CartLine, ...]
    shipping_address: ShippingAddress
    payment: OrderPayment
    status: OrderStatus
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    created_at: datetime
    updated_at: datetime
    payment_verified_at: datetime | None = None
    printed_at: datetime | None = None
    shipped_at: datetime | None = None
    completed_at: datetime | None = None
    tracking_number: str | None = None
    status_notes: tuple[StatusNote, ...] = field(default_factory=tuple)
    is_void: bool = False

    @property
    def payment_status(self) -> PaymentStatus:
        return self.payment.status

    @property
    def photo_ids(self) -> list[PhotoId]:
        return list(dict.fromkeys(line.photo_id for line in self.lines))

    @property
    def print_count(self) -> int:
        return sum(line.quantity for line in self.lines)
