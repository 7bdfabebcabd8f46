"""System settings access."""

from typing import Protocol


class SettingsRepository(Protocol):
    """Persistence interface for keyed system settings."""

    def get_setting(self, key: str) -> dict[str, object] | None:
        """Return the JSON value stored under ``key``, if present."""
