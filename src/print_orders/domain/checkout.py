"""Checkout input models validated at the service boundary."""

from pydantic import BaseModel, ConfigDict, Field


class ShippingAddress(BaseModel):
    """Delivery address captured at checkout."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    full_name: str = Field(min_length=1, max_length=100)
    street_line1: str = Field(min_length=1, max_length=200)
    street_line2: str = Field(default="", max_length=200)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(pattern=r"^[A-Z]{2}$")
    postal_code: str = Field(pattern=r"^\d{5}(-\d{4})?$")
    country: str = "USA"
    phone: str = Field(default="", max_length=30)


class CreditCardDetails(BaseModel):
    """Client-encrypted card data; never persisted."""

    model_config = ConfigDict(frozen=True)

    encrypted_card_number: str = Field(min_length=1)
    cardholder_name: str = Field(min_length=1, max_length=100)
    expiry_month: str = Field(pattern=r"^(0[1-9]|1[0-2])$")
    expiry_year: str = Field(pattern=r"^20[2-9][0-9]$")
    encrypted_cvv: str = Field(min_length=1)


class BranchPaymentDetails(BaseModel):
    """Branch chosen for in-person payment."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    preferred_branch: str = Field(min_length=1, max_length=100)
