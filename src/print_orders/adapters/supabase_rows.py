"""Row conversion helpers shared by the Supabase repositories."""

from datetime import datetime
from decimal import Decimal

from print_orders.domain.cart import CartLine
from print_orders.domain.ids import PhotoId


def to_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def parse_timestamp(value: object) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value))


def parse_decimal(value: object) -> Decimal:
    return Decimal(str(value if value is not None else "0"))


def serialize_line(line: CartLine) -> dict[str, object]:
    return {
        "photo_id": str(line.photo_id),
        "size_code": line.size_code,
        "size_name": line.size_name,
        "quantity": line.quantity,
        "unit_price": str(line.unit_price),
    }


def parse_line(row: dict[str, object]) -> CartLine:
    return CartLine(
        photo_id=PhotoId(str(row["photo_id"])),
        size_code=str(row["size_code"]),
        size_name=str(row.get("size_name", row["size_code"])),
        quantity=int(row["quantity"]),
        unit_price=parse_decimal(row["unit_price"]),
    )
