from logging import Logger
from typing import Any, Dict

from fastapi import APIRouter, Body, Request

from culqi_backend.utils import resolve_instance

from .schemas import (
    ChargeRequestSchema,
    ChargeResponse,
    PaymentMethodsResponse,
    PaymentResponse,
    PaymentStatsResponse,
    RefundRequestSchema,
    RefundResponse,
    WebhookAcknowledgement,
)
from .services import PaymentService

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.post(
    "",
    response_model=PaymentResponse,
    description="Charges a card token through Culqi.",
)
@router.post("/process", response_model=PaymentResponse, include_in_schema=False)
async def process_payment(
    request: Request,
    charge_request: ChargeRequestSchema,
    payment_service: PaymentService = resolve_instance(PaymentService),
) -> PaymentResponse:
    return await payment_service.process_payment(
        charge_request,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("User-Agent"),
    )


@router.get("/stats", response_model=PaymentStatsResponse)
def get_stats(
    payment_service: PaymentService = resolve_instance(PaymentService),
) -> PaymentStatsResponse:
    return payment_service.get_stats()


@router.get("/methods", response_model=PaymentMethodsResponse)
def get_payment_methods(
    payment_service: PaymentService = resolve_instance(PaymentService),
) -> PaymentMethodsResponse:
    return PaymentMethodsResponse(methods=payment_service.get_payment_methods())


@router.get("/verify/{charge_id}", response_model=ChargeResponse)
async def verify_payment(
    charge_id: str,
    payment_service: PaymentService = resolve_instance(PaymentService),
) -> ChargeResponse:
    return ChargeResponse(charge=await payment_service.verify_payment(charge_id))


@router.post("/{charge_id}/refund", response_model=RefundResponse)
async def refund_payment(
    charge_id: str,
    refund_request: RefundRequestSchema,
    payment_service: PaymentService = resolve_instance(PaymentService),
) -> RefundResponse:
    refund = await payment_service.refund_payment(charge_id, refund_request.amount)
    return RefundResponse(refund=refund)


@router.post("/webhook", response_model=WebhookAcknowledgement)
def receive_webhook(
    event: Dict[str, Any] = Body(default={}),
    logger: Logger = resolve_instance(Logger),
) -> WebhookAcknowledgement:
    event_type = str(event.get("type") or "unknown")
    logger.info("Received Culqi webhook event %s", event_type)

    return WebhookAcknowledgement(event=event_type)
