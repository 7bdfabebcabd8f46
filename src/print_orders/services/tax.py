"""Sales tax calculation from configured rates."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Protocol

from print_orders.errors import DependencyFailureError, UnsupportedJurisdictionError
from print_orders.services.settings_store import SettingsRepository

TAX_RATES_KEY = "tax_rates"

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class TaxQuote:
    """Tax computed for a subtotal."""

    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal


class TaxCalculator(Protocol):
    """Interface for jurisdiction tax lookups."""

    def compute(self, subtotal: Decimal, state_code: str) -> TaxQuote:
        """Return tax for a subtotal shipped to ``state_code``."""


def quote_tax(subtotal: Decimal, rate: Decimal) -> TaxQuote:
    """Apply a rate and round the tax half-up to cents."""
    tax_amount = (subtotal * rate).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return TaxQuote(tax_rate=rate, tax_amount=tax_amount, total=subtotal + tax_amount)


@dataclass
class SettingsTaxCalculator(TaxCalculator):
    """Tax calculator reading the ``tax_rates`` system setting.

    The setting value looks like ``{"byState": {"MA": 0.0625}, "default": 0.05}``.
    States without their own rate use ``default``; with no default they are
    unsupported.
    """

    settings_repository: SettingsRepository

    def compute(self, subtotal: Decimal, state_code: str) -> TaxQuote:
        """Return tax for a subtotal shipped to ``state_code``."""
        rate = self._rate_for(state_code.strip().upper())
        return quote_tax(subtotal, rate)

    def _rate_for(self, state_code: str) -> Decimal:
        try:
            setting = self.settings_repository.get_setting(TAX_RATES_KEY)
        except Exception as exc:
            raise DependencyFailureError("Tax rate settings unavailable") from exc
        setting = setting or {}
        by_state = setting.get("byState")
        if isinstance(by_state, dict) and state_code in by_state:
            return _to_rate(by_state[state_code], state_code)
        if setting.get("default") is not None:
            return _to_rate(setting["default"], state_code)
        raise UnsupportedJurisdictionError(state_code)


def _to_rate(value: object, state_code: str) -> Decimal:
    try:
        rate = Decimal(str(value))
    except InvalidOperation as exc:
        raise DependencyFailureError(
            f"Malformed tax rate configured for {state_code}: {value!r}"
        ) from exc
    if rate < 0 or rate >= 1:
        raise DependencyFailureError(
            f"Tax rate out of range for {state_code}: {value!r}"
        )
    return rate
