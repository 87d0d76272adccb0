from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from culqi_backend.culqi.schemas import Charge, Refund

MetadataValue = str | int | float | bool


class AntifraudDetails(BaseModel):
    model_config = ConfigDict(extra="allow")

    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    phone_number: Optional[str] = Field(None, pattern=r"^[0-9+]{6,15}$")


class ChargeRequestSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    token: str = Field(..., pattern=r"^tok_[a-zA-Z0-9]+$")
    # Booleans and numeric strings are rejected, not coerced
    amount: float = Field(..., gt=0, strict=True)
    currency_code: str = Field("PEN", min_length=3, max_length=3)
    email: EmailStr
    description: Optional[str] = Field(None, max_length=255)
    metadata: Optional[Dict[str, MetadataValue]] = None
    antifraud_details: Optional[AntifraudDetails] = None
    order_id: Optional[str] = None

    @field_validator("currency_code", mode="before")
    @classmethod
    def uppercase_currency(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("metadata")
    @classmethod
    def limit_metadata(
        cls, v: Optional[Dict[str, MetadataValue]]
    ) -> Optional[Dict[str, MetadataValue]]:
        if v is None:
            return v

        if len(v) > 20:
            raise ValueError("Metadata exceeds the maximum of 20 fields")

        for key in v:
            if len(key) > 50:
                raise ValueError(f"Metadata key '{key[:50]}...' exceeds 50 characters")

        return v


class RefundRequestSchema(BaseModel):
    # Booleans and numeric strings are rejected, not coerced
    amount: float = Field(..., gt=0, strict=True)


class PaymentResponse(BaseModel):
    success: bool = True
    payment_id: str
    charge_id: str
    charge: Charge
    duration_ms: int


class ChargeResponse(BaseModel):
    success: bool = True
    charge: Charge


class RefundResponse(BaseModel):
    success: bool = True
    refund: Refund


class PaymentStatsResponse(BaseModel):
    total_payments: int
    successful_payments: int
    failed_payments: int
    total_amount: float
    success_rate: float


class PaymentLimits(BaseModel):
    min_amount: float
    max_amount: float


class PaymentMethod(BaseModel):
    type: str = "card"
    provider: str = "culqi"
    brands: list[str]
    currencies: list[str]
    limits: PaymentLimits
    supports_recurring: bool = False
    supports_refunds: bool = True


class PaymentMethodsResponse(BaseModel):
    success: bool = True
    methods: list[PaymentMethod]


class WebhookAcknowledgement(BaseModel):
    received: bool = True
    processed: bool = False
    event: str
