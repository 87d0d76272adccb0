import math
import re
from decimal import Decimal
from typing import Any, Iterable, Mapping

from .errors import GatewayError

TOKEN_PATTERN = re.compile(r"^tok_[A-Za-z0-9]+$")

REQUIRED_CARD_FIELDS = (
    "card_number",
    "cvv",
    "expiration_month",
    "expiration_year",
    "email",
)


def is_positive_number(value: Any) -> bool:
    # bool is a subclass of int and never a valid amount
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False

    return math.isfinite(value) and value > 0


class ChargeValidator:
    def __init__(self, currencies: Iterable[str], max_amount: float) -> None:
        self.currencies = list(currencies)
        self.max_amount = max_amount

    def validate(self, data: Mapping[str, Any]) -> None:
        errors: list[str] = []

        token = data.get("token")
        if not isinstance(token, str) or not TOKEN_PATTERN.match(token):
            errors.append("Token inválido")

        amount = data.get("amount")
        if not is_positive_number(amount):
            errors.append("Monto inválido")
        elif amount > self.max_amount:
            errors.append(f"El monto máximo permitido es {self.max_amount}")

        if data.get("currency_code") not in self.currencies:
            errors.append("Moneda inválida")

        if not data.get("email"):
            errors.append("Email requerido")

        if errors:
            raise GatewayError.validation_error(errors)


def validate_card_data(card_data: Mapping[str, Any]) -> None:
    missing = [
        field
        for field in REQUIRED_CARD_FIELDS
        if card_data.get(field) in (None, "")
    ]

    if missing:
        raise GatewayError.validation_error(
            [f"Campo requerido: {field}" for field in missing]
        )


def validate_refund_amount(amount: Any) -> None:
    if not is_positive_number(amount):
        raise GatewayError.validation_error(["Monto inválido"])
