"""Checkout form validation.

Rules run in a fixed order and the first failure wins; errors are never
aggregated. Card checks are format-only (payments are simulated).
"""

import re
from dataclasses import dataclass
from typing import Optional

from storefront.schemas.order_schema import CheckoutIn

EMAIL_RE = re.compile(r"^[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$", re.IGNORECASE)
PHONE_RE = re.compile(r"^[0-9+\s\-()]{10,20}$")
CARD_RE = re.compile(r"^[0-9\s]{13,19}$")
CVV_RE = re.compile(r"^[0-9]{3,4}$")
EXPIRY_RE = re.compile(r"^(0[1-9]|1[0-2])/([0-9]{2})$")


class ValidationError(Exception):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


@dataclass(frozen=True)
class CheckoutFields:
    name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    zip: str
    country: str
    card_number: str
    card_expiry: str
    card_cvv: str
    cardholder_name: str

    @property
    def card_last4(self) -> str:
        return self.card_number.replace(" ", "")[-4:]

    def shipping(self) -> dict:
        return {
            "phone": self.phone,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "country": self.country,
        }


def _matches(pattern: re.Pattern, value: str) -> bool:
    # fullmatch so a trailing newline cannot slip past `$`
    return bool(value) and pattern.fullmatch(value) is not None


def validate_checkout(form: CheckoutIn) -> CheckoutFields:
    """Return the validated fields or raise ValidationError for the first bad one."""
    values = {k: (v or "") for k, v in form.model_dump().items()}

    if len(values["name"]) < 2:
        raise ValidationError("name", "Please provide a valid name.")
    if not _matches(EMAIL_RE, values["email"]):
        raise ValidationError("email", "Please provide a valid email address.")
    if not _matches(PHONE_RE, values["phone"]):
        raise ValidationError("phone", "Please provide a valid phone number.")
    if len(values["address"]) < 5:
        raise ValidationError("address", "Please provide a valid street address.")
    missing: Optional[str] = next(
        (f for f in ("city", "state", "zip", "country") if not values[f]), None
    )
    if missing:
        raise ValidationError(missing, "Please complete all address fields.")
    if not _matches(CARD_RE, values["card_number"]):
        raise ValidationError("card_number", "Please provide a valid card number.")
    if not _matches(EXPIRY_RE, values["card_expiry"]):
        raise ValidationError(
            "card_expiry", "Please provide a valid expiry date (MM/YY)."
        )
    if not _matches(CVV_RE, values["card_cvv"]):
        raise ValidationError("card_cvv", "Please provide a valid CVV.")
    if len(values["cardholder_name"]) < 2:
        raise ValidationError("cardholder_name", "Please provide the cardholder name.")

    return CheckoutFields(**values)
