"""Domain models for the shopping cart."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from print_orders.domain.ids import OwnerId, PhotoId


@dataclass(frozen=True)
class CartLine:
    """One photo and print size selection with its frozen unit price."""

    photo_id: PhotoId
    size_code: str
    size_name: str
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def key(self) -> tuple[PhotoId, str]:
        return self.photo_id, self.size_code


@dataclass(frozen=True)
class LineSelection:
    """Requested size and quantity for a photo."""

    size_code: str
    quantity: int


@dataclass(frozen=True)
class Cart:
    """A user's cart of print selections."""

    owner_id: OwnerId
    lines: tuple[CartLine, ...] = field(default_factory=tuple)
    created_at: datetime | None = None
    last_modified: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def photo_ids(self) -> list[PhotoId]:
        return list(dict.fromkeys(line.photo_id for line in self.lines))

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))


@dataclass(frozen=True)
class CartSummary:
    """Display totals for a cart; tax is an estimate until checkout."""

    photo_count: int
    print_count: int
    subtotal: Decimal
    estimated_tax: Decimal
    estimated_total: Decimal
