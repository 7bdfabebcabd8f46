"""Supabase-backed photo repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from print_orders.adapters.supabase_rows import parse_timestamp, to_timestamp
from print_orders.domain.ids import OrderId, OwnerId, PhotoId
from print_orders.domain.paging import Page, page_bounds
from print_orders.domain.photos import Photo, PhotoDimensions
from print_orders.services.photos import PhotoRepository


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Supabase implementation for photo metadata persistence."""

    client: Client

    def create_photo(self, photo: Photo) -> Photo:
        """Create a photo metadata row and return it."""
        response = self.client.table("photos").insert(_serialize(photo)).execute()
        if not response.data:
            raise RuntimeError("Failed to create photo metadata")
        return _parse_photo(response.data[0])

    def get_photo(self, photo_id: PhotoId) -> Photo | None:
        """Return a photo by id."""
        response = (
            self.client.table("photos")
            .select("*")
            .eq("id", str(photo_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_photo(response.data[0])

    def list_photos(
        self, owner_id: OwnerId, page: int, page_size: int
    ) -> Page[Photo]:
        """Return a page of an owner's live photos, newest first."""
        start, end = page_bounds(page, page_size)
        response = (
            self.client.table("photos")
            .select("*", count="exact")
            .eq("owner_id", str(owner_id))
            .is_("deleted_at", "null")
            .order("uploaded_at", desc=True)
            .range(start, end)
            .execute()
        )
        rows = response.data or []
        return Page(
            items=[_parse_photo(row) for row in rows],
            total_count=response.count if response.count is not None else len(rows),
            page=page,
            page_size=page_size,
        )

    def list_deletable(self, owner_id: OwnerId) -> list[Photo]:
        """Return an owner's unlocked live photos."""
        response = (
            self.client.table("photos")
            .select("*")
            .eq("owner_id", str(owner_id))
            .eq("is_locked_by_order", False)
            .is_("deleted_at", "null")
            .order("uploaded_at", desc=True)
            .execute()
        )
        return [_parse_photo(row) for row in response.data or []]

    def try_lock(self, photo_id: PhotoId, order_id: OrderId) -> bool:
        """Lock the photo only if no order holds it."""
        response = (
            self.client.table("photos")
            .update({"is_locked_by_order": True, "locked_by_order_id": str(order_id)})
            .eq("id", str(photo_id))
            .eq("is_locked_by_order", False)
            .is_("deleted_at", "null")
            .execute()
        )
        return bool(response.data)

    def unlock(self, photo_id: PhotoId, order_id: OrderId) -> None:
        """Clear a lock held by ``order_id``."""
        self.client.table("photos").update(
            {"is_locked_by_order": False, "locked_by_order_id": None}
        ).eq("id", str(photo_id)).eq("locked_by_order_id", str(order_id)).execute()

    def schedule_deletion(self, photo_id: PhotoId, deletion_at: datetime) -> None:
        """Set the scheduled deletion timestamp."""
        self.client.table("photos").update(
            {"scheduled_deletion_at": deletion_at.isoformat()}
        ).eq("id", str(photo_id)).execute()

    def list_due_for_purge(self, before: datetime) -> list[Photo]:
        """Return undeleted photos scheduled at or before ``before``."""
        response = (
            self.client.table("photos")
            .select("*")
            .lte("scheduled_deletion_at", before.isoformat())
            .is_("deleted_at", "null")
            .order("scheduled_deletion_at", desc=False)
            .execute()
        )
        return [_parse_photo(row) for row in response.data or []]

    def mark_deleted(self, photo_id: PhotoId, deleted_at: datetime) -> None:
        """Stamp ``deleted_at`` once blobs are gone."""
        self.client.table("photos").update(
            {"deleted_at": deleted_at.isoformat()}
        ).eq("id", str(photo_id)).is_("deleted_at", "null").execute()

    def delete_photo(self, photo_id: PhotoId) -> None:
        """Delete a photo metadata row."""
        self.client.table("photos").delete().eq("id", str(photo_id)).execute()


def _serialize(photo: Photo) -> dict[str, object]:
    return {
        "id": str(photo.id),
        "owner_id": str(photo.owner_id),
        "blob_ref": photo.blob_ref,
        "thumbnail_ref": photo.thumbnail_ref,
        "filename": photo.filename,
        "file_size": photo.file_size,
        "width": photo.dimensions.width,
        "height": photo.dimensions.height,
        "uploaded_at": photo.uploaded_at.isoformat(),
        "is_locked_by_order": photo.is_locked_by_order,
        "locked_by_order_id": (
            str(photo.locked_by_order_id) if photo.locked_by_order_id else None
        ),
        "scheduled_deletion_at": to_timestamp(photo.scheduled_deletion_at),
        "deleted_at": to_timestamp(photo.deleted_at),
    }


def _parse_photo(row: dict[str, object]) -> Photo:
    locked_by = row.get("locked_by_order_id")
    return Photo(
        id=PhotoId(str(row["id"])),
        owner_id=OwnerId(str(row["owner_id"])),
        blob_ref=str(row["blob_ref"]),
        thumbnail_ref=row.get("thumbnail_ref") or None,
        filename=str(row.get("filename", "")),
        file_size=int(row.get("file_size") or 0),
        dimensions=PhotoDimensions(
            width=int(row.get("width") or 0), height=int(row.get("height") or 0)
        ),
        uploaded_at=parse_timestamp(row["uploaded_at"]),
        is_locked_by_order=bool(row.get("is_locked_by_order", False)),
        locked_by_order_id=OrderId(str(locked_by)) if locked_by else None,
        scheduled_deletion_at=parse_timestamp(row.get("scheduled_deletion_at")),
        deleted_at=parse_timestamp(row.get("deleted_at")),
    )
