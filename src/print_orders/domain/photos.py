"""Domain models for uploaded photos."""

from dataclasses import dataclass
from datetime import datetime
from math import gcd

from print_orders.domain.ids import OrderId, OwnerId, PhotoId


@dataclass(frozen=True)
class PhotoDimensions:
    """Pixel dimensions reported by image analysis."""

    width: int
    height: int

    @property
    def aspect_ratio(self) -> str:
        if self.width <= 0 or self.height <= 0:
            return ""
        divisor = gcd(self.width, self.height)
        return f"{self.width // divisor}:{self.height // divisor}"


@dataclass(frozen=True)
class Photo:
    """Photo metadata with its order lock and deletion schedule."""

    id: PhotoId
    owner_id: OwnerId
    blob_ref: str
    filename: str
    file_size: int
    dimensions: PhotoDimensions
    uploaded_at: datetime
    thumbnail_ref: str | None = None
    is_locked_by_order: bool = False
    locked_by_order_id: OrderId | None = None
    scheduled_deletion_at: datetime | None = None
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_deletable(self) -> bool:
        return not self.is_locked_by_order and not self.is_deleted

    @property
    def blob_refs(self) -> list[str]:
        refs = [self.blob_ref]
        if self.thumbnail_ref:
            refs.append(self.thumbnail_ref)
        return refs
