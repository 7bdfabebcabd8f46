"""Human-readable identifier generation backed by atomic counters."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from print_orders.errors import DependencyFailureError

_logger = logging.getLogger(__name__)

ORDER_SCOPE = "ORDER"
USER_SCOPE = "USER"

# scope prefix -> (identifier prefix, zero-padded width)
_FORMATS: dict[str, tuple[str, int]] = {
    ORDER_SCOPE: ("ORD", 7),
    USER_SCOPE: ("USR", 6),
}


class SequenceRepository(Protocol):
    """Persistence interface for per-scope counters."""

    def atomic_increment(self, scope_key: str) -> int:
        """Increment the scope counter in one atomic step and return the value."""


def scope_key(scope: str, year: int) -> str:
    """Return the counter key for a scope in a calendar year."""
    return f"{scope}-{year}"


def format_identifier(key: str, value: int) -> str:
    """Format a counter value for its scope key, e.g. ``ORD-2024-0000042``."""
    scope, _, year = key.rpartition("-")
    if scope not in _FORMATS or not year.isdigit():
        raise ValueError(f"Unknown sequence scope key: {key}")
    prefix, width = _FORMATS[scope]
    return f"{prefix}-{year}-{value:0{width}d}"


@dataclass
class SequenceGenerator:
    """Issues unique per-scope integers with bounded retry."""

    repository: SequenceRepository
    retry_attempts: int = 3
    retry_delay_seconds: float = 0.2
    sleep: Callable[[float], None] = time.sleep

    def next(self, key: str) -> int:
        """Return the next value for ``key``; never a previously issued one."""
        attempt = 0
        while True:
            try:
                value = self.repository.atomic_increment(key)
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Sequence increment failed (scope=%s, attempt %s/%s): %s",
                    key,
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise DependencyFailureError(
                        f"Sequence store unavailable for scope {key}"
                    ) from exc
                self.sleep(self.retry_delay_seconds * 2 ** (attempt - 1))
                continue
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise DependencyFailureError(
                    f"Sequence store returned an invalid value for {key}: {value!r}"
                )
            return value

    def next_order_number(self, now: datetime | None = None) -> str:
        """Return a new order number for the current year."""
        return self._next_identifier(ORDER_SCOPE, now)

    def next_user_id(self, now: datetime | None = None) -> str:
        """Return a new user identifier for the current year."""
        return self._next_identifier(USER_SCOPE, now)

    def _next_identifier(self, scope: str, now: datetime | None) -> str:
        year = (now or datetime.now(tz=UTC)).year
        key = scope_key(scope, year)
        return format_identifier(key, self.next(key))
