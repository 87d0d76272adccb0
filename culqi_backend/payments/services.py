import time
import uuid
from logging import Logger
from typing import Any

import inject

from culqi_backend.config.models import CulqiConfig, PaymentsConfig
from culqi_backend.culqi.client import CulqiClient
from culqi_backend.culqi.errors import GatewayError
from culqi_backend.culqi.schemas import Charge, Refund

from .models import PaymentStats
from .schemas import (
    ChargeRequestSchema,
    PaymentLimits,
    PaymentMethod,
    PaymentResponse,
    PaymentStatsResponse,
)


class PaymentService:
    @inject.autoparams()
    def __init__(
        self,
        culqi_client: CulqiClient,
        culqi_config: CulqiConfig,
        payments_config: PaymentsConfig,
        logger: Logger,
    ) -> None:
        self.culqi_client = culqi_client
        self.culqi_config = culqi_config
        self.payments_config = payments_config
        self.logger = logger
        self.stats = PaymentStats()

    async def process_payment(
        self,
        request: ChargeRequestSchema,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> PaymentResponse:
        payment_id = f"pay_{uuid.uuid4().hex[:8]}"
        start_time = time.time()

        self.logger.info("Processing payment %s", payment_id)

        try:
            charge = await self.culqi_client.create_charge(
                self.__charge_data(request, ip_address, user_agent)
            )
        except GatewayError as e:
            self.stats.record_failure()
            self.logger.error(
                "Payment %s failed: %s (%s)", payment_id, e.message, e.code.value
            )
            raise

        self.stats.record_success(charge.amount)
        duration_ms = int((time.time() - start_time) * 1000)

        self.logger.info(
            "Payment %s completed with charge %s (%s) in %dms",
            payment_id,
            charge.id,
            charge.status.value,
            duration_ms,
        )

        return PaymentResponse(
            payment_id=payment_id,
            charge_id=charge.id,
            charge=charge,
            duration_ms=duration_ms,
        )

    async def verify_payment(self, charge_id: str) -> Charge:
        return await self.culqi_client.get_charge(charge_id)

    async def refund_payment(self, charge_id: str, amount: float) -> Refund:
        refund = await self.culqi_client.refund_charge(charge_id, amount)
        self.logger.info("Refunded %.2f of charge %s", refund.amount, charge_id)

        return refund

    def get_stats(self) -> PaymentStatsResponse:
        return PaymentStatsResponse(
            total_payments=self.stats.total_payments,
            successful_payments=self.stats.successful_payments,
            failed_payments=self.stats.failed_payments,
            total_amount=self.stats.total_amount,
            success_rate=self.stats.success_rate,
        )

    def get_payment_methods(self) -> list[PaymentMethod]:
        return [
            PaymentMethod(
                brands=self.payments_config.card_brands,
                currencies=self.culqi_config.currencies,
                limits=PaymentLimits(
                    min_amount=self.payments_config.min_amount,
                    max_amount=self.culqi_config.max_amount,
                ),
            )
        ]

    def __charge_data(
        self,
        request: ChargeRequestSchema,
        ip_address: str | None,
        user_agent: str | None,
    ) -> dict[str, Any]:
        data = request.model_dump(exclude_none=True)
        data["email"] = request.email.lower().strip()
        data["ip_address"] = ip_address

        antifraud_details = data.get("antifraud_details", {})
        if ip_address:
            antifraud_details.setdefault("customer_ip", ip_address)
        if user_agent:
            antifraud_details.setdefault("customer_device", user_agent)
        if antifraud_details:
            data["antifraud_details"] = antifraud_details

        return data
