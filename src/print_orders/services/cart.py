"""Shopping cart service."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from print_orders.domain.cart import Cart, CartLine, CartSummary, LineSelection
from print_orders.domain.ids import OwnerId, PhotoId
from print_orders.errors import (
    InvalidQuantityError,
    PhotoLockedError,
    PhotoNotFoundError,
    ValidationFailedError,
)
from print_orders.services.photos import PhotoLifecycleService
from print_orders.services.pricing import PricingService

_logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


class CartRepository(Protocol):
    """Persistence interface for carts."""

    def get_cart(self, owner_id: OwnerId) -> Cart | None:
        """Return the owner's cart, if one was saved."""

    def save_cart(self, cart: Cart) -> None:
        """Insert or replace the owner's cart."""

    def delete_cart(self, owner_id: OwnerId) -> None:
        """Delete the owner's cart."""

    def delete_carts_modified_before(self, cutoff: datetime) -> int:
        """Delete carts untouched since ``cutoff`` and return how many."""


@dataclass
class ShoppingCartService:
    """Per-user cart of photo and print size selections."""

    repository: CartRepository
    photo_service: PhotoLifecycleService
    pricing_service: PricingService
    estimate_tax_rate: Decimal = Decimal("0.0625")
    max_quantity: int = 1000
    cart_ttl_days: int = 14

    def get_cart(self, owner_id: OwnerId) -> Cart:
        """Return the owner's cart, empty if none exists yet."""
        cart = self.repository.get_cart(owner_id)
        if cart is None:
            return Cart(owner_id=owner_id)
        return cart

    def add_or_update_line(
        self, owner_id: OwnerId, photo_id: PhotoId, size_code: str, quantity: int
    ) -> Cart:
        """Insert or replace the line for a photo and size at today's price."""
        self._validate_quantity(quantity)
        self._ensure_orderable(owner_id, photo_id)
        quote = self.pricing_service.resolve(size_code)
        line = CartLine(
            photo_id=photo_id,
            size_code=quote.size_code,
            size_name=quote.display_name,
            quantity=quantity,
            unit_price=quote.unit_price,
        )
        cart = self.get_cart(owner_id)
        lines = [existing for existing in cart.lines if existing.key != line.key]
        lines.append(line)
        return self._save(cart, lines)

    def remove_line(
        self, owner_id: OwnerId, photo_id: PhotoId, size_code: str
    ) -> Cart:
        """Remove one photo and size selection."""
        cart = self.get_cart(owner_id)
        lines = [
            line for line in cart.lines if line.key != (photo_id, size_code)
        ]
        if len(lines) == len(cart.lines):
            return cart
        return self._save(cart, lines)

    def replace_lines_for_photo(
        self,
        owner_id: OwnerId,
        photo_id: PhotoId,
        selections: list[LineSelection],
    ) -> Cart:
        """Replace every selection for a photo; an empty list removes it."""
        cart = self.get_cart(owner_id)
        kept = [line for line in cart.lines if line.photo_id != photo_id]
        if not selections:
            if len(kept) == len(cart.lines):
                return cart
            return self._save(cart, kept)

        codes = [selection.size_code for selection in selections]
        if len(set(codes)) != len(codes):
            raise ValidationFailedError("Each print size may appear once per photo")
        for selection in selections:
            self._validate_quantity(selection.quantity)
        self._ensure_orderable(owner_id, photo_id)
        new_lines = []
        for selection in selections:
            quote = self.pricing_service.resolve(selection.size_code)
            new_lines.append(
                CartLine(
                    photo_id=photo_id,
                    size_code=quote.size_code,
                    size_name=quote.display_name,
                    quantity=selection.quantity,
                    unit_price=quote.unit_price,
                )
            )
        return self._save(cart, kept + new_lines)

    def summarize(self, owner_id: OwnerId) -> CartSummary:
        """Return display totals with an estimated tax."""
        cart = self.get_cart(owner_id)
        subtotal = cart.subtotal
        estimated_tax = (subtotal * self.estimate_tax_rate).quantize(
            _CENTS, rounding=ROUND_HALF_UP
        )
        return CartSummary(
            photo_count=len(cart.photo_ids),
            print_count=sum(line.quantity for line in cart.lines),
            subtotal=subtotal,
            estimated_tax=estimated_tax,
            estimated_total=subtotal + estimated_tax,
        )

    def clear(self, owner_id: OwnerId) -> None:
        """Empty the owner's cart."""
        self.repository.delete_cart(owner_id)

    def expire_stale_carts(self, now: datetime | None = None) -> int:
        """Delete carts untouched for longer than the configured TTL."""
        cutoff = (now or datetime.now(tz=UTC)) - timedelta(days=self.cart_ttl_days)
        removed = self.repository.delete_carts_modified_before(cutoff)
        if removed:
            _logger.info("Expired %s carts idle since %s", removed, cutoff.isoformat())
        return removed

    def _validate_quantity(self, quantity: object) -> None:
        if (
            not isinstance(quantity, int)
            or isinstance(quantity, bool)
            or not 1 <= quantity <= self.max_quantity
        ):
            raise InvalidQuantityError(quantity, self.max_quantity)

    def _ensure_orderable(self, owner_id: OwnerId, photo_id: PhotoId) -> None:
        photo = self.photo_service.find_owned(owner_id, photo_id)
        if photo is None:
            raise PhotoNotFoundError(photo_id)
        if photo.is_locked_by_order:
            raise PhotoLockedError(photo_id)

    def _save(self, cart: Cart, lines: list[CartLine]) -> Cart:
        now = datetime.now(tz=UTC)
        updated = replace(
            cart,
            lines=tuple(lines),
            created_at=cart.created_at or now,
            last_modified=now,
        )
        self.repository.save_cart(updated)
        return updated
