"""Supabase-backed sequence counters.

The increment runs inside Postgres so concurrent callers never observe the
same value::

    create function next_sequence_value(p_scope_key text) returns bigint
    language sql as $$
        insert into sequence_counters (scope_key, current_value)
        values (p_scope_key, 1)
        on conflict (scope_key)
        do update set current_value = sequence_counters.current_value + 1
        returning current_value;
    $$;
"""

from dataclasses import dataclass

from supabase import Client

from print_orders.services.sequences import SequenceRepository


@dataclass
class SupabaseSequenceRepository(SequenceRepository):
    """Calls the ``next_sequence_value`` database function."""

    client: Client

    def atomic_increment(self, scope_key: str) -> int:
        """Increment the counter for ``scope_key`` and return the new value."""
        response = self.client.rpc(
            "next_sequence_value", {"p_scope_key": scope_key}
        ).execute()
        data = response.data
        if isinstance(data, list):
            if not data:
                raise RuntimeError(f"No sequence value returned for {scope_key}")
            data = data[0]
        if isinstance(data, dict):
            data = data.get("next_sequence_value", data.get("current_value"))
        if data is None:
            raise RuntimeError(f"No sequence value returned for {scope_key}")
        return int(data)
