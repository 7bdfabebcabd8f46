"""Supabase Storage implementation of the blob store."""

import logging
from dataclasses import dataclass

from supabase import Client

from print_orders.services.photos import BlobStore

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseStorageBlobStore(BlobStore):
    """Stores photo originals and thumbnails in one storage bucket.

    Blob refs are object paths inside the bucket, e.g.
    ``<owner_id>/originals/<file>``.
    """

    client: Client
    bucket: str

    def exists(self, blob_ref: str) -> bool:
        """Return True when the object is present."""
        return self._find(blob_ref) is not None

    def delete(self, blob_ref: str) -> int:
        """Remove the object and return its size in bytes."""
        entry = self._find(blob_ref)
        if entry is None:
            return 0
        size = int((entry.get("metadata") or {}).get("size") or 0)
        self.client.storage.from_(self.bucket).remove([blob_ref])
        _logger.debug(
            "Removed %s from bucket %s (%s bytes)", blob_ref, self.bucket, size
        )
        return size

    def _find(self, blob_ref: str) -> dict[str, object] | None:
        folder, _, name = blob_ref.rpartition("/")
        entries = self.client.storage.from_(self.bucket).list(
            folder, {"search": name}
        )
        for entry in entries or []:
            if entry.get("name") == name:
                return entry
        return None
