from enum import Enum
from typing import List, Literal, Self

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)

from culqi_backend.cache.repositories import TokenCacheRepository
from culqi_backend.circuitbreaker.repositories import CircuitStateRepository


class InjectableConfig(BaseModel):
    pass


def _csv_to_list(v: str | List[str]) -> List[str]:
    if isinstance(v, list):
        return v

    return [item.strip() for item in v.split(",") if item.strip() != ""]


class Environment(str, Enum):  # pragma: no cover
    LOCAL = "local"
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class MetricAdapter(str, Enum):  # pragma: no cover
    NO_OP = "no-op"
    STATSD = "statsd"


class NoOpMetricConfig(InjectableConfig):  # pragma: no cover
    adapter: Literal[MetricAdapter.NO_OP] = MetricAdapter.NO_OP


class StatsdMetricConfig(InjectableConfig):  # pragma: no cover
    adapter: Literal[MetricAdapter.STATSD] = MetricAdapter.STATSD
    host: str
    port: int
    prefix: str | None = None


class RetryConfig(InjectableConfig):
    max_retries: int = Field(default=3, ge=0)
    # Base delay (in seconds), multiplied by backoff_factor ** retry_count before each retry
    backoff: float = Field(default=1.0, gt=0)
    backoff_factor: float = Field(default=2.0, gt=0)


class CircuitBreakerConfig(InjectableConfig):
    fail_max: int = Field(default=5, gt=0)
    # Cooldown (in seconds) during which calls are rejected once the circuit is open
    reset_timeout: float = Field(default=30, gt=0)
    state_storage: str = CircuitStateRepository.TYPE_IN_MEMORY

    @model_validator(mode="after")
    def validate_state_storage(self) -> Self:
        if self.state_storage not in [
            CircuitStateRepository.TYPE_IN_MEMORY,
            CircuitStateRepository.TYPE_REDIS,
        ]:
            raise ValueError(
                f"Invalid value for 'state_storage': {self.state_storage}. Must be one of: {CircuitStateRepository.TYPE_IN_MEMORY}, {CircuitStateRepository.TYPE_REDIS}"
            )

        return self


class TokenCacheConfig(InjectableConfig):
    # Lifetime (in seconds) of a cached token response
    ttl: int = Field(default=300, gt=0)
    storage: str = TokenCacheRepository.TYPE_IN_MEMORY

    @model_validator(mode="after")
    def validate_storage(self) -> Self:
        if self.storage not in [
            TokenCacheRepository.TYPE_IN_MEMORY,
            TokenCacheRepository.TYPE_REDIS,
        ]:
            raise ValueError(
                f"Invalid value for 'storage': {self.storage}. Must be one of: {TokenCacheRepository.TYPE_IN_MEMORY}, {TokenCacheRepository.TYPE_REDIS}"
            )

        return self


class Redis(InjectableConfig):  # pragma: no cover
    host: str = Field(default="localhost")
    port: int = Field(default=6379)
    username: str = Field(default="")
    password: str = Field(default="")
    ssl: bool = Field(default=False)
    ssl_ca_certs: str | None = Field(default=None)


class LoggingConfig(InjectableConfig):
    logger_name: str = "culqi_backend"
    log_level: str = "DEBUG"
    json_output: bool = False


class CulqiConfig(InjectableConfig):
    # Secret API key, sent as bearer token. Usually provided through CULQI_SECRET_KEY
    secret_key: str = ""
    public_key: str | None = None
    base_url: AnyHttpUrl = AnyHttpUrl("https://api.culqi.com/v2")
    # Timeout (in seconds) of a single outbound request
    timeout: float = Field(default=30, gt=0)
    ping_timeout: float = Field(default=5, gt=0)
    # Maximum charge amount in major currency units
    max_amount: float = Field(default=500000, gt=0)
    currencies: List[str] = Field(default=["PEN", "USD"])

    @field_validator("public_key", mode="before")
    @classmethod
    def empty_to_none(cls, v: str | None) -> str | None:
        return v or None

    @field_validator("currencies", mode="before")
    @classmethod
    def str_to_list(cls, v: str | List[str]) -> List[str]:
        return [currency.upper() for currency in _csv_to_list(v)]


class PaymentsConfig(InjectableConfig):
    min_amount: float = Field(default=1.0, gt=0)
    card_brands: List[str] = Field(
        default=["Visa", "Mastercard", "American Express", "Diners Club"]
    )

    @field_validator("card_brands", mode="before")
    @classmethod
    def str_to_list(cls, v: str | List[str]) -> List[str]:
        return _csv_to_list(v)


class AppConfig(BaseModel):
    env: Environment
    logging: LoggingConfig = LoggingConfig()
    metric: StatsdMetricConfig | NoOpMetricConfig = Field(discriminator="adapter")
    culqi: CulqiConfig
    retry: RetryConfig = RetryConfig()
    circuit_breaker: CircuitBreakerConfig = CircuitBreakerConfig()
    token_cache: TokenCacheConfig = TokenCacheConfig()
    redis: Redis = Redis()
    payments: PaymentsConfig = PaymentsConfig()

    @property
    def exposes_error_details(self) -> bool:
        return self.env != Environment.PRODUCTION
