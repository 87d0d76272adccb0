import re
import time
from logging import Logger
from typing import Any, Mapping

import inject
from anyio import fail_after, sleep
from httpx import AsyncBaseTransport, AsyncClient, Response, TransportError

from culqi_backend.cache.repositories import TokenCacheRepository
from culqi_backend.cache.services import CardFingerprinter
from culqi_backend.circuitbreaker.models import CircuitOpenException
from culqi_backend.circuitbreaker.services import CircuitBreakerService
from culqi_backend.config.models import CulqiConfig, RetryConfig, TokenCacheConfig
from culqi_backend.metrics.service import MetricService

from .errors import ErrorCode, GatewayConfigurationError, GatewayError
from .retry import RetryContext
from .schemas import Charge, Refund, to_minor_units
from .validation import ChargeValidator, validate_card_data, validate_refund_amount

REFUND_REASON = "solicitud_comprador"

# Payload fields that never reach the logs in readable form
REDACTED_FIELDS: dict[str, str] = {
    "card_number": "****",
    "cvv": "***",
    "source_id": "tok_****",
}


def sanitize_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {
        key: REDACTED_FIELDS[key] if key in REDACTED_FIELDS and value else value
        for key, value in payload.items()
    }


class CulqiClient:
    """
    Client for the Culqi REST API.

    Every outbound call goes through a single circuit breaker, so failures on any
    endpoint count towards opening it. Charges are retried with exponential backoff
    while the error is retryable, and token responses are cached per card.
    """

    CIRCUIT_ID: str = "culqi"

    @inject.autoparams(
        "config",
        "retry_config",
        "token_cache_config",
        "circuit_breaker",
        "token_cache",
        "metric_service",
        "logger",
    )
    def __init__(
        self,
        config: CulqiConfig,
        retry_config: RetryConfig,
        token_cache_config: TokenCacheConfig,
        circuit_breaker: CircuitBreakerService,
        token_cache: TokenCacheRepository,
        metric_service: MetricService,
        logger: Logger,
        user_agent: str = "Culqi-Backend/1.0.0",
        transport: AsyncBaseTransport | None = None,
    ) -> None:
        if not config.secret_key:
            raise GatewayConfigurationError("CULQI_SECRET_KEY no configurada")

        self.config = config
        self.retry_config = retry_config
        self.token_cache_config = token_cache_config
        self.circuit_breaker = circuit_breaker
        self.token_cache = token_cache
        self.metric_service = metric_service
        self.logger = logger
        self.validator = ChargeValidator(
            currencies=config.currencies, max_amount=config.max_amount
        )
        self.fingerprinter = CardFingerprinter(config.secret_key)

        self.http_client = AsyncClient(
            base_url=str(config.base_url).rstrip("/"),
            timeout=config.timeout,
            headers={
                "Authorization": f"Bearer {config.secret_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": user_agent,
            },
            transport=transport,
        )

        self.logger.info("CulqiClient initialized for %s", config.base_url)

    async def create_charge(
        self, data: Mapping[str, Any], timeout: float | None = None
    ) -> Charge:
        """
        Validates and creates a charge, retrying retryable failures with backoff.

        `timeout` bounds the whole call including pending retries. When it elapses
        the queued retry is cancelled and a NETWORK_ERROR is raised.
        """
        self.validator.validate(data)

        payload = self.build_charge_payload(data)
        context = RetryContext.from_config(self.retry_config)

        try:
            with fail_after(timeout):
                response = await self.__post_charge_with_retries(payload, context)
        except TimeoutError:
            self.logger.warning(
                "Charge creation timed out after %s seconds and %d retries",
                timeout,
                context.retry_count,
            )
            raise GatewayError.network_error("Tiempo de espera agotado con Culqi")

        return Charge.from_culqi(response)

    async def get_charge(self, charge_id: str) -> Charge:
        response = await self.__request("GET", f"/charges/{charge_id}")
        return Charge.from_culqi(response)

    async def refund_charge(self, charge_id: str, amount: float) -> Refund:
        validate_refund_amount(amount)

        response = await self.__request(
            "POST",
            "/refunds",
            json={
                "charge_id": charge_id,
                "amount": to_minor_units(amount),
                "reason": REFUND_REASON,
            },
        )
        return Refund.from_culqi(response)

    async def create_token(self, card_data: Mapping[str, Any]) -> dict[str, Any]:
        validate_card_data(card_data)

        card_number = re.sub(r"\s", "", str(card_data["card_number"]))
        cvv = str(card_data["cvv"])
        cache_key = self.fingerprinter.fingerprint(card_number, cvv)

        cached = self.token_cache.get(cache_key)
        self.metric_service.increase_token_cache_count(hit=cached is not None)
        if cached is not None:
            self.logger.debug("Token served from cache")
            return cached

        token = await self.__request(
            "POST",
            "/tokens",
            json={
                "card_number": card_number,
                "cvv": cvv,
                "expiration_month": str(card_data["expiration_month"]).zfill(2),
                "expiration_year": str(card_data["expiration_year"])[-2:],
                "email": card_data["email"],
            },
        )

        self.token_cache.set(cache_key, token, self.token_cache_config.ttl)
        return token

    async def ping(self) -> bool:
        try:
            await self.__request(
                "GET",
                "/charges",
                params={"limit": 1},
                timeout=self.config.ping_timeout,
            )
        except GatewayError as e:
            self.logger.warning("Culqi ping failed: %s", e.message)
            return False

        return True

    async def aclose(self) -> None:
        await self.http_client.aclose()

    def build_charge_payload(self, data: Mapping[str, Any]) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "amount": to_minor_units(data["amount"]),
            "currency_code": data["currency_code"],
            "email": data["email"],
            "source_id": data["token"],
            "description": data.get("description") or f"Pago {data['email']}",
            "capture": data.get("capture") is not False,
            "metadata": {
                **(data.get("metadata") or {}),
                "internal_ref": data.get("order_id")
                or f"order_{int(time.time() * 1000)}",
                "ip": data.get("ip_address"),
                "session_id": data.get("session_id"),
            },
        }

        if data.get("antifraud_details"):
            payload["antifraud_details"] = data["antifraud_details"]

        return payload

    async def __post_charge_with_retries(
        self, payload: dict[str, Any], context: RetryContext
    ) -> dict[str, Any]:
        while True:
            try:
                response = await self.__request("POST", "/charges", json=payload)
                self.metric_service.increase_request_attempt_count(context.attempt)
                return response
            except GatewayError as error:
                # An open circuit is retryable for the caller, not for this loop
                if (
                    not error.retryable
                    or error.code == ErrorCode.CIRCUIT_OPEN
                    or context.exhausted
                ):
                    self.metric_service.increase_request_attempt_count(context.attempt)
                    raise

                delay = context.next_delay()
                self.logger.info(
                    "Retrying charge (%d/%d) in %.2f seconds after %s",
                    context.retry_count,
                    context.max_retries,
                    delay,
                    error.code.value,
                )
                await self._backoff(delay)

    async def __request(self, method: str, path: str, **kwargs: Any) -> Any:
        self.logger.debug("Culqi request %s %s", method, path)
        if kwargs.get("json"):
            self.logger.debug("Culqi payload %s", sanitize_payload(kwargs["json"]))

        try:
            return await self.circuit_breaker.call(
                self.CIRCUIT_ID, self.__send, method, path, **kwargs
            )
        except CircuitOpenException:
            raise GatewayError.circuit_open()

    async def __send(self, method: str, path: str, **kwargs: Any) -> Any:
        endpoint = self.metric_service.sanitize_endpoint(method, path)
        self.metric_service.increase_request_count(endpoint)
        start_time = time.time()

        try:
            response: Response = await self.http_client.request(method, path, **kwargs)
        except TransportError as e:
            self.logger.error("Culqi %s %s failed without response: %s", method, path, e)
            error = GatewayError.network_error()
            self.metric_service.increase_request_error_count(endpoint, error.code.value)
            raise error
        finally:
            self.metric_service.measure_request_latency(start_time, endpoint)

        self.logger.debug(
            "Culqi response %s %s: %d", method, path, response.status_code
        )

        if response.is_error:
            error = GatewayError.culqi_error(
                response.status_code, self.__decode(response)
            )
            self.logger.warning(
                "Culqi %s %s returned %d: %s",
                method,
                path,
                response.status_code,
                error.message,
            )
            self.metric_service.increase_request_error_count(endpoint, error.code.value)
            raise error

        try:
            return response.json()
        except ValueError:
            self.logger.error("Culqi %s %s returned an invalid body", method, path)
            raise GatewayError.culqi_error(502, {"body": response.text})

    def __decode(self, response: Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {"body": response.text}

    async def _backoff(self, duration: float) -> None:  # pragma: no cover
        await sleep(duration)
