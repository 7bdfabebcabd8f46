"""Photo ownership, order locks, deletion scheduling and the purge sweep."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from print_orders.domain.ids import OrderId, OwnerId, PhotoId
from print_orders.domain.paging import Page
from print_orders.domain.photos import Photo, PhotoDimensions
from print_orders.errors import (
    AlreadyLockedError,
    DependencyFailureError,
    PhotoLockedError,
    PhotoNotFoundError,
)

_logger = logging.getLogger(__name__)


class PhotoRepository(Protocol):
    """Persistence interface for photo metadata."""

    def create_photo(self, photo: Photo) -> Photo:
        """Create a photo record and return it."""

    def get_photo(self, photo_id: PhotoId) -> Photo | None:
        """Return a photo by id, if present."""

    def list_photos(
        self, owner_id: OwnerId, page: int, page_size: int
    ) -> Page[Photo]:
        """Return an owner's live photos, newest first."""

    def list_deletable(self, owner_id: OwnerId) -> list[Photo]:
        """Return an owner's live photos that are not locked by an order."""

    def try_lock(self, photo_id: PhotoId, order_id: OrderId) -> bool:
        """Lock an unlocked photo for an order; False if it was already locked."""

    def unlock(self, photo_id: PhotoId, order_id: OrderId) -> None:
        """Clear the lock when it is held by ``order_id``."""

    def schedule_deletion(self, photo_id: PhotoId, deletion_at: datetime) -> None:
        """Set the scheduled deletion date."""

    def list_due_for_purge(self, before: datetime) -> list[Photo]:
        """Return undeleted photos scheduled at or before ``before``."""

    def mark_deleted(self, photo_id: PhotoId, deleted_at: datetime) -> None:
        """Record that a photo's blobs were removed."""

    def delete_photo(self, photo_id: PhotoId) -> None:
        """Delete a photo record."""


class BlobStore(Protocol):
    """Binary storage for original images and thumbnails."""

    def exists(self, blob_ref: str) -> bool:
        """Return True when the blob is present."""

    def delete(self, blob_ref: str) -> int:
        """Delete a blob and return the bytes freed."""


@dataclass
class PhotoLifecycleService:
    """Keeps photo retention tied to the orders that reference them."""

    repository: PhotoRepository
    blob_store: BlobStore

    def register_upload(  # noqa: PLR0913
        self,
        owner_id: OwnerId,
        blob_ref: str,
        filename: str,
        file_size: int,
        dimensions: PhotoDimensions,
        thumbnail_ref: str | None = None,
    ) -> Photo:
        """Record a photo whose bytes are already stored."""
        photo = Photo(
            id=PhotoId.new(),
            owner_id=owner_id,
            blob_ref=blob_ref,
            thumbnail_ref=thumbnail_ref,
            filename=filename,
            file_size=file_size,
            dimensions=dimensions,
            uploaded_at=datetime.now(tz=UTC),
        )
        return self.repository.create_photo(photo)

    def find_owned(self, owner_id: OwnerId, photo_id: PhotoId) -> Photo | None:
        """Return a live photo owned by ``owner_id``, if any."""
        photo = self.repository.get_photo(photo_id)
        if photo is None or photo.owner_id != owner_id or photo.is_deleted:
            return None
        return photo

    def get_photo(self, owner_id: OwnerId, photo_id: PhotoId) -> Photo:
        """Return an owned photo or raise ``PhotoNotFoundError``."""
        photo = self.find_owned(owner_id, photo_id)
        if photo is None:
            raise PhotoNotFoundError(photo_id)
        return photo

    def list_photos(
        self, owner_id: OwnerId, page: int = 1, page_size: int = 20
    ) -> Page[Photo]:
        """Return a page of the owner's gallery."""
        return self.repository.list_photos(owner_id, page, page_size)

    def list_deletable(self, owner_id: OwnerId) -> list[Photo]:
        """Return photos the owner may delete."""
        return [
            photo
            for photo in self.repository.list_deletable(owner_id)
            if photo.is_deletable
        ]

    def lock(self, photo_ids: list[PhotoId], order_id: OrderId) -> None:
        """Lock photos for an order; idempotent for the same order."""
        for photo_id in photo_ids:
            photo = self.repository.get_photo(photo_id)
            if photo is None or photo.is_deleted:
                raise PhotoNotFoundError(photo_id)
            if photo.is_locked_by_order:
                self._check_holder(photo, order_id)
                continue
            if not self.repository.try_lock(photo_id, order_id):
                current = self.repository.get_photo(photo_id)
                if current is None:
                    raise PhotoNotFoundError(photo_id)
                self._check_holder(current, order_id)
        _logger.info("Locked %s photos for order %s", len(photo_ids), order_id)

    def release(self, photo_ids: list[PhotoId], order_id: OrderId) -> None:
        """Release locks held by ``order_id``; other holders are untouched."""
        for photo_id in photo_ids:
            self.repository.unlock(photo_id, order_id)
        _logger.info("Released photo locks for order %s", order_id)

    def schedule_deletion(
        self, photo_ids: list[PhotoId], deletion_date: datetime
    ) -> None:
        """Mark photos for removal by a later sweep."""
        for photo_id in photo_ids:
            self.repository.schedule_deletion(photo_id, deletion_date)
        _logger.info(
            "Scheduled %s photos for deletion on %s",
            len(photo_ids),
            deletion_date.isoformat(),
        )

    def purge(self, before_date: datetime) -> int:
        """Remove blobs of photos due for deletion and return bytes freed."""
        due = self.repository.list_due_for_purge(before_date)
        total_freed = 0
        purged = 0
        for photo in due:
            if photo.is_deleted or photo.scheduled_deletion_at is None:
                continue
            if photo.scheduled_deletion_at > before_date:
                continue
            try:
                freed = self._delete_blobs(photo)
                self.repository.mark_deleted(photo.id, datetime.now(tz=UTC))
            except Exception:
                _logger.exception("Failed to purge photo %s; skipping", photo.id)
                continue
            total_freed += freed
            purged += 1
        _logger.info(
            "Purge before %s removed %s/%s photos, freed %s bytes",
            before_date.isoformat(),
            purged,
            len(due),
            total_freed,
        )
        return total_freed

    def delete_photo(self, owner_id: OwnerId, photo_id: PhotoId) -> int:
        """Delete an unlocked photo at the owner's request."""
        photo = self.get_photo(owner_id, photo_id)
        if photo.is_locked_by_order:
            raise PhotoLockedError(photo_id)
        try:
            freed = self._delete_blobs(photo)
        except Exception as exc:
            raise DependencyFailureError(
                f"Blob store unavailable while deleting photo {photo_id}"
            ) from exc
        self.repository.delete_photo(photo_id)
        _logger.info("Photo %s deleted by owner, freed %s bytes", photo_id, freed)
        return freed

    def _delete_blobs(self, photo: Photo) -> int:
        freed = 0
        for blob_ref in photo.blob_refs:
            if not self.blob_store.exists(blob_ref):
                _logger.warning(
                    "Blob %s for photo %s is already missing", blob_ref, photo.id
                )
                continue
            freed += self.blob_store.delete(blob_ref)
        return freed

    @staticmethod
    def _check_holder(photo: Photo, order_id: OrderId) -> None:
        if photo.locked_by_order_id != order_id:
            _logger.warning(
                "Photo %s already locked by order %s",
                photo.id,
                photo.locked_by_order_id,
            )
            raise AlreadyLockedError(photo.id, photo.locked_by_order_id)
