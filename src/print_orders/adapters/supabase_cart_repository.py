"""Supabase-backed cart repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from print_orders.adapters.supabase_rows import (
    parse_line,
    parse_timestamp,
    serialize_line,
    to_timestamp,
)
from print_orders.domain.cart import Cart
from print_orders.domain.ids import OwnerId
from print_orders.services.cart import CartRepository


@dataclass
class SupabaseCartRepository(CartRepository):
    """Supabase implementation storing one cart row per owner."""

    client: Client

    def get_cart(self, owner_id: OwnerId) -> Cart | None:
        """Return the owner's cart."""
        response = (
            self.client.table("carts")
            .select("owner_id, lines, created_at, last_modified")
            .eq("owner_id", str(owner_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return Cart(
            owner_id=owner_id,
            lines=tuple(parse_line(line) for line in row.get("lines") or []),
            created_at=parse_timestamp(row.get("created_at")),
            last_modified=parse_timestamp(row.get("last_modified")),
        )

    def save_cart(self, cart: Cart) -> None:
        """Insert or replace the owner's cart row."""
        self.client.table("carts").upsert(
            {
                "owner_id": str(cart.owner_id),
                "lines": [serialize_line(line) for line in cart.lines],
                "created_at": to_timestamp(cart.created_at),
                "last_modified": to_timestamp(cart.last_modified),
            },
            on_conflict="owner_id",
        ).execute()

    def delete_cart(self, owner_id: OwnerId) -> None:
        """Delete the owner's cart row."""
        self.client.table("carts").delete().eq("owner_id", str(owner_id)).execute()

    def delete_carts_modified_before(self, cutoff: datetime) -> int:
        """Delete idle carts and return how many were removed."""
        response = (
            self.client.table("carts")
            .delete()
            .lt("last_modified", cutoff.isoformat())
            .execute()
        )
        return len(response.data or [])
