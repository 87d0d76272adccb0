from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ChargeStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PENDING = "pending"
    VOIDED = "voided"
    UNKNOWN = "unknown"


# Maps the outcome type reported by Culqi onto our own charge status
OUTCOME_STATUS_MAP: dict[str, ChargeStatus] = {
    "venta_exitosa": ChargeStatus.SUCCEEDED,
    "venta_rechazada": ChargeStatus.FAILED,
    "pendiente": ChargeStatus.PENDING,
    "anulado": ChargeStatus.VOIDED,
}


def map_status(outcome_type: str | None) -> ChargeStatus:
    if outcome_type is None:
        return ChargeStatus.UNKNOWN

    return OUTCOME_STATUS_MAP.get(outcome_type, ChargeStatus.UNKNOWN)


def to_minor_units(amount: float | int | Decimal) -> int:
    minor = Decimal(str(amount)) * 100
    return int(minor.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_major_units(amount: int | float) -> float:
    return round(amount / 100, 2)


def from_timestamp(value: int | float | None) -> datetime | None:
    if value is None:
        return None

    return datetime.fromtimestamp(value, tz=timezone.utc)


class PaymentMethod(BaseModel):
    brand: str | None = None
    last4: str | None = None


class Customer(BaseModel):
    email: str | None = None


class Charge(BaseModel):
    id: str
    amount: float
    currency: str | None = None
    status: ChargeStatus
    paid: bool | None = None
    payment_method: PaymentMethod = Field(default_factory=PaymentMethod)
    customer: Customer = Field(default_factory=Customer)
    created_at: datetime | None = None
    receipt_url: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_culqi(cls, data: dict[str, Any]) -> "Charge":
        source = data.get("source") or {}
        outcome = data.get("outcome") or {}

        return cls(
            id=data["id"],
            amount=to_major_units(data.get("amount", 0)),
            currency=data.get("currency_code"),
            status=map_status(outcome.get("type")),
            paid=data.get("paid"),
            payment_method=PaymentMethod(
                brand=source.get("brand") or (source.get("iin") or {}).get("card_brand"),
                last4=source.get("last_four"),
            ),
            customer=Customer(email=data.get("email")),
            created_at=from_timestamp(data.get("creation_date")),
            receipt_url=data.get("receipt_url"),
            metadata=data.get("metadata") or {},
        )


class Refund(BaseModel):
    id: str
    charge_id: str | None = None
    amount: float
    status: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_culqi(cls, data: dict[str, Any]) -> "Refund":
        return cls(
            id=data["id"],
            charge_id=data.get("charge_id"),
            amount=to_major_units(data.get("amount", 0)),
            status=data.get("status"),
            created_at=from_timestamp(data.get("creation_date")),
        )
