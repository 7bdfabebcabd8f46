"""Supabase-backed print size catalog."""

from dataclasses import dataclass

from supabase import Client

from print_orders.adapters.supabase_rows import (
    parse_decimal,
    parse_timestamp,
    to_timestamp,
)
from print_orders.domain.catalog import PrintSize
from print_orders.services.pricing import PrintSizeRepository


@dataclass
class SupabasePrintSizeRepository(PrintSizeRepository):
    """Supabase implementation for the ``print_sizes`` table."""

    client: Client

    def get_by_code(self, size_code: str) -> PrintSize | None:
        """Return a print size by code."""
        response = (
            self.client.table("print_sizes")
            .select("*")
            .eq("size_code", size_code)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_size(response.data[0])

    def list_print_sizes(self, include_inactive: bool) -> list[PrintSize]:
        """Return catalog entries ordered for display."""
        query = self.client.table("print_sizes").select("*")
        if not include_inactive:
            query = query.eq("is_active", True)
        response = query.order("sort_order", desc=False).execute()
        return [_parse_size(row) for row in response.data or []]

    def create_print_size(self, print_size: PrintSize) -> PrintSize:
        """Insert a catalog entry."""
        response = (
            self.client.table("print_sizes").insert(_serialize(print_size)).execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create print size")
        return _parse_size(response.data[0])

    def update_print_size(self, print_size: PrintSize) -> PrintSize:
        """Replace a catalog entry."""
        response = (
            self.client.table("print_sizes")
            .update(_serialize(print_size))
            .eq("size_code", print_size.size_code)
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update print size {print_size.size_code}")
        return _parse_size(response.data[0])


def _serialize(size: PrintSize) -> dict[str, object]:
    return {
        "size_code": size.size_code,
        "display_name": size.display_name,
        "unit_price": str(size.unit_price),
        "is_active": size.is_active,
        "min_pixel_width": size.min_pixel_width,
        "min_pixel_height": size.min_pixel_height,
        "recommended_pixel_width": size.recommended_pixel_width,
        "recommended_pixel_height": size.recommended_pixel_height,
        "sort_order": size.sort_order,
        "updated_at": to_timestamp(size.updated_at),
        "updated_by": size.updated_by,
    }


def _parse_size(row: dict[str, object]) -> PrintSize:
    return PrintSize(
        size_code=str(row["size_code"]),
        display_name=str(row.get("display_name", row["size_code"])),
        unit_price=parse_decimal(row["unit_price"]),
        is_active=bool(row.get("is_active", False)),
        min_pixel_width=int(row.get("min_pixel_width") or 0),
        min_pixel_height=int(row.get("min_pixel_height") or 0),
        recommended_pixel_width=int(row.get("recommended_pixel_width") or 0),
        recommended_pixel_height=int(row.get("recommended_pixel_height") or 0),
        sort_order=int(row.get("sort_order") or 1),
        updated_at=parse_timestamp(row.get("updated_at")),
        updated_by=row.get("updated_by"),
    )
