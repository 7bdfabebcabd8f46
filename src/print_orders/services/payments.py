"""Payment intake for checkout.

Card data arrives encrypted by the client, is decrypted only to hand it to the
payment processor, and is never stored. Only the last four digits and the
cardholder name end up on the order.
"""

import base64
import binascii
import logging
import secrets
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import Protocol, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from print_orders.domain.checkout import BranchPaymentDetails, CreditCardDetails
from print_orders.domain.orders import OrderPayment, PaymentMethod, PaymentStatus
from print_orders.errors import (
    DependencyFailureError,
    InvalidPaymentMethodError,
    ValidationFailedError,
)
from print_orders.services.settings_store import SettingsRepository

BRANCH_LOCATIONS_KEY = "branch_locations"

M = TypeVar("M", bound=BaseModel)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardData:
    """Decrypted card data held only for the processor call."""

    number: str
    cvv: str
    cardholder_name: str
    expiry_month: str
    expiry_year: str

    @property
    def last_four(self) -> str:
        return self.number[-4:]

    def __repr__(self) -> str:
        return f"CardData(last_four={self.last_four!r})"


class CardDecryptor(Protocol):
    """Decrypts client-encrypted card fields."""

    def decrypt(self, ciphertext: str) -> str:
        """Return the plaintext for an encrypted field."""


class PaymentProcessor(Protocol):
    """External step that receives card data for charging."""

    def authorize(self, card: CardData, amount: Decimal) -> str:
        """Submit a card for ``amount`` and return a processor reference."""


@dataclass
class Base64CardDecryptor(CardDecryptor):
    """Decodes the base64 envelope produced by the web client."""

    def decrypt(self, ciphertext: str) -> str:
        """Decode a base64 field."""
        try:
            return base64.b64decode(ciphertext, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ValidationFailedError("Encrypted card data is malformed") from exc


@dataclass
class DeferredPaymentProcessor(PaymentProcessor):
    """Placeholder processor that queues the charge for manual handling."""

    def authorize(self, card: CardData, amount: Decimal) -> str:
        """Return a reference without contacting a gateway."""
        reference = f"PAY-{uuid4().hex[:12].upper()}"
        _logger.info(
            "Card ending %s queued for %s (reference %s)",
            card.last_four,
            amount,
            reference,
        )
        return reference


@dataclass
class PaymentService:
    """Validates payment details and prepares the order payment record."""

    decryptor: CardDecryptor
    processor: PaymentProcessor
    settings_repository: SettingsRepository

    def prepare(
        self,
        method: str,
        details: BaseModel | Mapping[str, object] | None,
        amount: Decimal,
        now: datetime | None = None,
    ) -> OrderPayment:
        """Return the payment record for a new order."""
        payment_method = parse_payment_method(method)
        if payment_method is PaymentMethod.CREDIT_CARD:
            card_details = _coerce(details, CreditCardDetails)
            return self._prepare_card(card_details, amount)
        branch_details = _coerce(details, BranchPaymentDetails)
        return self._prepare_branch(branch_details, now or datetime.now(tz=UTC))

    def branch_locations(self) -> list[str]:
        """Return the branch names accepting in-person payment."""
        try:
            setting = self.settings_repository.get_setting(BRANCH_LOCATIONS_KEY)
        except Exception as exc:
            raise DependencyFailureError(
                "Branch location settings unavailable"
            ) from exc
        locations = (setting or {}).get("locations", [])
        names = []
        if isinstance(locations, list):
            for location in locations:
                if isinstance(location, dict) and location.get("name"):
                    if location.get("isActive", True):
                        names.append(str(location["name"]))
                elif isinstance(location, str):
                    names.append(location)
        return names

    def _prepare_card(
        self, details: CreditCardDetails, amount: Decimal
    ) -> OrderPayment:
        plain_number = self.decryptor.decrypt(details.encrypted_card_number)
        number = "".join(plain_number.split())
        cvv = self.decryptor.decrypt(details.encrypted_cvv).strip()
        if not number.isdigit() or not 13 <= len(number) <= 19:
            raise ValidationFailedError("Card number is invalid")
        if not cvv.isdigit() or len(cvv) not in (3, 4):
            raise ValidationFailedError("Card security code is invalid")
        card = CardData(
            number=number,
            cvv=cvv,
            cardholder_name=details.cardholder_name,
            expiry_month=details.expiry_month,
            expiry_year=details.expiry_year,
        )
        try:
            reference = self.processor.authorize(card, amount)
        except Exception as exc:
            raise DependencyFailureError("Payment processor unavailable") from exc
        return OrderPayment(
            method=PaymentMethod.CREDIT_CARD,
            status=PaymentStatus.PROCESSING,
            card_last_four=card.last_four,
            cardholder_name=card.cardholder_name,
            processor_reference=reference,
        )

    def _prepare_branch(
        self, details: BranchPaymentDetails, now: datetime
    ) -> OrderPayment:
        branches = {name.casefold(): name for name in self.branch_locations()}
        branch = branches.get(details.preferred_branch.casefold())
        if branch is None:
            raise ValidationFailedError(
                f"Unknown branch for payment: {details.preferred_branch}"
            )
        return OrderPayment(
            method=PaymentMethod.BRANCH_PAYMENT,
            status=PaymentStatus.PENDING,
            preferred_branch=branch,
            reference_number=branch_reference_number(now),
        )


def parse_payment_method(method: object) -> PaymentMethod:
    """Return the payment method or raise ``InvalidPaymentMethodError``."""
    try:
        return PaymentMethod(method)
    except ValueError as exc:
        raise InvalidPaymentMethodError(method) from exc


def branch_reference_number(now: datetime) -> str:
    """Return a reference like ``BP-2024-1234567`` for in-branch payment."""
    return f"BP-{now.year}-{1_000_000 + secrets.randbelow(9_000_000)}"


def _coerce(
    details: BaseModel | Mapping[str, object] | None, model: type[M]
) -> M:
    if isinstance(details, model):
        return details
    if details is None:
        raise ValidationFailedError(f"{model.__name__} are required")
    payload = details.model_dump() if isinstance(details, BaseModel) else details
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailedError(f"Invalid {model.__name__}: {exc}") from exc
