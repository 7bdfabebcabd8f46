"""Supabase repository for keyed system settings."""

from dataclasses import dataclass

from supabase import Client

from print_orders.services.settings_store import SettingsRepository


@dataclass
class SupabaseSettingsRepository(SettingsRepository):
    """Reads JSON values from the ``system_settings`` table."""

    client: Client

    def get_setting(self, key: str) -> dict[str, object] | None:
        """Return the stored value for ``key``."""
        response = (
            self.client.table("system_settings")
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        value = response.data[0].get("value")
        return value if isinstance(value, dict) else None
