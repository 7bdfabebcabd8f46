"""Supabase-backed order repository.

Lines, address, payment and the status audit trail are stored as jsonb
columns on the ``orders`` row; money is written as decimal strings.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from print_orders.adapters.supabase_rows import (
    parse_decimal,
    parse_line,
    parse_timestamp,
    serialize_line,
    to_timestamp,
)
from print_orders.domain.checkout import ShippingAddress
from print_orders.domain.ids import OrderId, OwnerId
from print_orders.domain.orders import (
    Order,
    OrderPayment,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    StatusNote,
)
from print_orders.domain.paging import Page, page_bounds
from print_orders.services.orders import OrderRepository

# Set once at creation; status updates never rewrite them.
_FROZEN_COLUMNS = (
    "id",
    "order_number",
    "owner_id",
    "created_at",
    "lines",
    "subtotal",
    "tax_rate",
    "tax_amount",
    "total",
)


@dataclass
class SupabaseOrderRepository(OrderRepository):
    """Supabase implementation for the ``orders`` table."""

    client: Client

    def create_order(self, order: Order) -> Order:
        """Insert an order row and return the stored order."""
        response = self.client.table("orders").insert(_serialize(order)).execute()
        if not response.data:
            raise RuntimeError(f"Failed to create order {order.order_number}")
        return _parse_order(response.data[0])

    def get_order(self, order_id: OrderId) -> Order | None:
        """Return an order by id."""
        return self._get_one("id", str(order_id))

    def get_by_order_number(self, order_number: str) -> Order | None:
        """Return an order by number."""
        return self._get_one("order_number", order_number)

    def list_orders_by_owner(
        self, owner_id: OwnerId, page: int, page_size: int
    ) -> Page[Order]:
        """Return an owner's orders, newest first."""
        start, end = page_bounds(page, page_size)
        response = (
            self.client.table("orders")
            .select("*", count="exact")
            .eq("owner_id", str(owner_id))
            .eq("is_void", False)
            .order("created_at", desc=True)
            .range(start, end)
            .execute()
        )
        return _page(response.data, response.count, page, page_size)

    def list_orders_by_status(
        self, status: OrderStatus, page: int, page_size: int
    ) -> Page[Order]:
        """Return orders in a status, oldest first."""
        start, end = page_bounds(page, page_size)
        response = (
            self.client.table("orders")
            .select("*", count="exact")
            .eq("status", status.value)
            .eq("is_void", False)
            .order("created_at", desc=False)
            .range(start, end)
            .execute()
        )
        return _page(response.data, response.count, page, page_size)

    def list_completed_between(self, start: datetime, end: datetime) -> list[Order]:
        """Return orders completed in ``[start, end)``."""
        response = (
            self.client.table("orders")
            .select("*")
            .eq("status", OrderStatus.COMPLETED.value)
            .eq("is_void", False)
            .gte("completed_at", start.isoformat())
            .lt("completed_at", end.isoformat())
            .order("completed_at", desc=False)
            .execute()
        )
        return [_parse_order(row) for row in response.data or []]

    def update_if_status(self, order: Order, expected_status: OrderStatus) -> bool:
        """Write the order only while the stored status is unchanged."""
        payload = _serialize(order)
        for frozen in _FROZEN_COLUMNS:
            payload.pop(frozen)
        response = (
            self.client.table("orders")
            .update(payload)
            .eq("id", str(order.id))
            .eq("status", expected_status.value)
            .eq("is_void", False)
            .execute()
        )
        return bool(response.data)

    def void_order(self, order_id: OrderId, reason: str) -> None:
        """Flag an order void and keep the row."""
        self.client.table("orders").update(
            {
                "is_void": True,
                "void_reason": reason,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).eq("id", str(order_id)).execute()

    def _get_one(self, column: str, value: str) -> Order | None:
        response = (
            self.client.table("orders")
            .select("*")
            .eq(column, value)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_order(response.data[0])


def _page(
    data: list[dict[str, object]] | None, count: int | None, page: int, page_size: int
) -> Page[Order]:
    rows = data or []
    return Page(
        items=[_parse_order(row) for row in rows],
        total_count=count if count is not None else len(rows),
        page=page,
        page_size=page_size,
    )


def _serialize(order: Order) -> dict[str, object]:
    payment = order.payment
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "owner_id": str(order.owner_id),
        "lines": [serialize_line(line) for line in order.lines],
        "shipping_address": order.shipping_address.model_dump(),
        "payment": {
            "method": payment.method.value,
            "status": payment.status.value,
            "card_last_four": payment.card_last_four,
            "cardholder_name": payment.cardholder_name,
            "preferred_branch": payment.preferred_branch,
            "reference_number": payment.reference_number,
            "processor_reference": payment.processor_reference,
            "verified_at": to_timestamp(payment.verified_at),
            "verified_by": payment.verified_by,
        },
        "payment_status": payment.status.value,
        "status": order.status.value,
        "subtotal": str(order.subtotal),
        "tax_rate": str(order.tax_rate),
        "tax_amount": str(order.tax_amount),
        "total": str(order.total),
        "created_at": order.created_at.isoformat(),
        "updated_at": order.updated_at.isoformat(),
        "payment_verified_at": to_timestamp(order.payment_verified_at),
        "printed_at": to_timestamp(order.printed_at),
        "shipped_at": to_timestamp(order.shipped_at),
        "completed_at": to_timestamp(order.completed_at),
        "tracking_number": order.tracking_number,
        "status_notes": [
            {
                "recorded_at": note.recorded_at.isoformat(),
                "actor": note.actor,
                "from_status": note.from_status.value,
                "to_status": note.to_status.value,
                "note": note.note,
            }
            for note in order.status_notes
        ],
        "is_void": order.is_void,
    }


def _parse_order(row: dict[str, object]) -> Order:
    payment = row.get("payment") or {}
    return Order(
        id=OrderId(str(row["id"])),
        order_number=str(row["order_number"]),
        owner_id=OwnerId(str(row["owner_id"])),
        lines=tuple(parse_line(line) for line in row.get("lines") or []),
        shipping_address=ShippingAddress.model_validate(row["shipping_address"]),
        payment=OrderPayment(
            method=PaymentMethod(payment["method"]),
            status=PaymentStatus(payment["status"]),
            card_last_four=payment.get("card_last_four"),
            cardholder_name=payment.get("cardholder_name"),
            preferred_branch=payment.get("preferred_branch"),
            reference_number=payment.get("reference_number"),
            processor_reference=payment.get("processor_reference"),
            verified_at=parse_timestamp(payment.get("verified_at")),
            verified_by=payment.get("verified_by"),
        ),
        status=OrderStatus(row["status"]),
        subtotal=parse_decimal(row["subtotal"]),
        tax_rate=parse_decimal(row["tax_rate"]),
        tax_amount=parse_decimal(row["tax_amount"]),
        total=parse_decimal(row["total"]),
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
        payment_verified_at=parse_timestamp(row.get("payment_verified_at")),
        printed_at=parse_timestamp(row.get("printed_at")),
        shipped_at=parse_timestamp(row.get("shipped_at")),
        completed_at=parse_timestamp(row.get("completed_at")),
        tracking_number=row.get("tracking_number"),
        status_notes=tuple(
            StatusNote(
                recorded_at=parse_timestamp(note["recorded_at"]),
                actor=str(note["actor"]),
                from_status=OrderStatus(note["from_status"]),
                to_status=OrderStatus(note["to_status"]),
                note=str(note.get("note", "")),
            )
            for note in row.get("status_notes") or []
        ),
        is_void=bool(row.get("is_void", False)),
    )
