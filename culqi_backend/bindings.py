import configparser
import logging
import logging.config

from inject import Binder
from redis import Redis
from statsd import StatsClient

from .cache.repositories import (
    InMemoryTokenCacheRepository,
    RedisTokenCacheRepository,
    TokenCacheRepository,
)
from .circuitbreaker.repositories import (
    CircuitStateRepository,
    InMemoryCircuitStateRepository,
    RedisCircuitStateRepository,
)
from .circuitbreaker.services import CircuitBreakerService
from .config.models import AppConfig, InjectableConfig, MetricAdapter
from .config.services import ConfigParser
from .culqi.client import CulqiClient
from .health.services import HealthService
from .metrics.clients import MetricClient, NoOpMetricClient
from .payments.services import PaymentService
from .utils import root_path
from .version.models import VersionInfo
from .version.services import read_version_info


def configure_bindings(binder: Binder, config_file: str) -> None:
    """
    Configure dependency bindings for the application.
    """
    app_config: AppConfig = __parse_app_config(config_file=config_file)
    binder.bind(AppConfig, app_config)
    logger = __bind_logger(binder, app_config)
    __bind_sub_configs(binder, app_config, logger)

    version_info = read_version_info()
    binder.bind(VersionInfo, version_info)

    __bind_metric_client(binder, app_config)
    __bind_redis_connection(binder, app_config)
    __bind_circuit_breaker(binder, app_config)
    __bind_token_cache(binder, app_config)
    __bind_culqi_client(binder, version_info)

    binder.bind_to_constructor(PaymentService, lambda: PaymentService())
    binder.bind_to_constructor(HealthService, lambda: HealthService())


def __parse_app_config(config_file: str) -> AppConfig:
    config_parser = ConfigParser(
        config_parser=configparser.ConfigParser(
            interpolation=configparser.ExtendedInterpolation(),
        ),
        config_path=root_path(config_file),
    )
    return config_parser.parse()


def __bind_sub_configs(
    binder: Binder, app_config: AppConfig, logger: logging.Logger
) -> None:
    for _, value in app_config.__dict__.items():
        if isinstance(value, InjectableConfig):
            # Keep secrets out of the debug output
            logger.debug(f"Binding {type(value).__name__}")
            binder.bind(type(value), value)


def __bind_logger(binder: Binder, app_config: AppConfig) -> logging.Logger:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "uvicorn": {  # rewrites uvicorn.error to uvicorn
                    "format": "%(asctime)s - uvicorn - %(levelname)s - %(message)s"
                },
                "brief": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
                },
                "precise": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s - %(pathname)s:%(lineno)s"
                },
                "json": {"()": "pythonjsonlogger.json.JsonFormatter"},
            },
            "handlers": {
                "uvicorn": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "uvicorn",
                    "level": app_config.logging.log_level,
                },
                "console.brief": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "brief",
                    "level": app_config.logging.log_level,
                },
                "console.precise": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "precise",
                    "level": app_config.logging.log_level,
                },
                "console.json": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "json",
                    "level": app_config.logging.log_level,
                },
            },
            "root": {
                "level": app_config.logging.log_level,
                "handlers": ["console.brief"],
            },
            "loggers": {
                "uvicorn.error": {
                    "level": "INFO",
                    "handlers": ["uvicorn"],
                    "propagate": False,
                },
                "uvicorn.access": {
                    "level": "INFO",
                    "handlers": ["console.brief"],
                    "propagate": False,
                },
                "httpx": {
                    "level": "WARNING",
                    "handlers": ["console.brief"],
                    "propagate": False,
                },
                app_config.logging.logger_name: {
                    "handlers": [
                        "console.json"
                        if app_config.logging.json_output
                        else "console.precise"
                    ],
                    "level": app_config.logging.log_level,
                    "propagate": False,
                },
            },
        }
    )

    logger = logging.getLogger(app_config.logging.logger_name)
    binder.bind(logging.Logger, logger)
    return logger


def __bind_metric_client(binder: Binder, app_config: AppConfig) -> None:
    if app_config.metric.adapter == MetricAdapter.NO_OP:
        metric_client = NoOpMetricClient()
    elif app_config.metric.adapter == MetricAdapter.STATSD:
        metric_client = StatsClient(
            app_config.metric.host, app_config.metric.port, app_config.metric.prefix
        )

    binder.bind(MetricClient, metric_client)


def __bind_redis_connection(binder: Binder, app_config: AppConfig) -> None:
    # Redis connects lazily, so binding it costs nothing when only in-memory storage is used
    redis = Redis(
        host=app_config.redis.host,
        port=app_config.redis.port,
        decode_responses=True,
        username=app_config.redis.username or None,
        password=app_config.redis.password or None,
        ssl=app_config.redis.ssl,
        ssl_ca_certs=app_config.redis.ssl_ca_certs if app_config.redis.ssl else None,
    )

    binder.bind(Redis, redis)


def __bind_circuit_breaker(binder: Binder, app_config: AppConfig) -> None:
    def __get_circuit_breaker_repository(
        app_config: AppConfig,
    ) -> CircuitStateRepository:
        if (
            app_config.circuit_breaker.state_storage
            == CircuitStateRepository.TYPE_REDIS
        ):
            # Type ignored because this class's constructor is decorated with @inject.autoparams which makes the return type Any
            return RedisCircuitStateRepository()  # type: ignore

        return InMemoryCircuitStateRepository()

    binder.bind_to_constructor(
        CircuitBreakerService,
        lambda: CircuitBreakerService(
            fail_max=app_config.circuit_breaker.fail_max,
            reset_timeout=app_config.circuit_breaker.reset_timeout,
            repository=__get_circuit_breaker_repository(app_config),
        ),
    )


def __bind_token_cache(binder: Binder, app_config: AppConfig) -> None:
    def __get_token_cache_repository(app_config: AppConfig) -> TokenCacheRepository:
        if app_config.token_cache.storage == TokenCacheRepository.TYPE_REDIS:
            return RedisTokenCacheRepository()  # type: ignore

        return InMemoryTokenCacheRepository()

    binder.bind_to_constructor(
        TokenCacheRepository,
        lambda: __get_token_cache_repository(app_config),
    )


def __bind_culqi_client(binder: Binder, version_info: VersionInfo) -> None:
    binder.bind_to_constructor(
        CulqiClient,
        lambda: CulqiClient(
            user_agent=f"Culqi-Backend/{version_info.release_version}"
        ),
    )
