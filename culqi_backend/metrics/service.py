import re
import time

import inject

from .clients import MetricClient
from .enums import Metrics


class MetricService:
    @inject.autoparams()
    def __init__(self, metric_client: MetricClient) -> None:
        self.metric_client = metric_client

    def sanitize_endpoint(self, method: str, path: str) -> str:
        """
        Turns an outbound request into a statsd-safe key, e.g. "GET /charges/chr_1" -> "get_charges".
        """
        segments = [segment for segment in path.strip("/").split("/") if segment]
        # Drop resource identifiers so each endpoint maps to a single key
        segments = [segment for segment in segments if "_" not in segment]
        key = "_".join([method.lower(), *segments])

        return re.sub(r"[^a-z0-9_]", "", key)

    def measure_request_latency(self, start_time: float, endpoint: str) -> None:
        latency = int((time.time() - start_time) * 1000)
        key = Metrics.GATEWAY_REQUEST_LATENCY.format_key({"endpoint": endpoint})
        self.metric_client.timing(key, latency)

    def increase_request_count(self, endpoint: str) -> None:
        key = Metrics.GATEWAY_REQUEST_COUNT.format_key({"endpoint": endpoint})
        self.metric_client.incr(key)

    def increase_request_error_count(self, endpoint: str, code: str) -> None:
        key = Metrics.GATEWAY_REQUEST_ERROR_COUNT.format_key(
            {"endpoint": endpoint, "code": code.lower()}
        )
        self.metric_client.incr(key)

    def increase_request_attempt_count(self, attempt_number: int) -> None:
        key = Metrics.GATEWAY_REQUEST_ATTEMPT_COUNT.format_key(
            {"attempt_number": attempt_number}
        )
        self.metric_client.incr(key)

    def increase_circuit_opened_count(self, circuit: str) -> None:
        key = Metrics.CIRCUIT_OPENED_COUNT.format_key({"circuit": circuit})
        self.metric_client.incr(key)

    def increase_token_cache_count(self, hit: bool) -> None:
        metric = (
            Metrics.TOKEN_CACHE_HIT_COUNT if hit else Metrics.TOKEN_CACHE_MISS_COUNT
        )
        self.metric_client.incr(metric.format_key())

    def measure_circuit_fail_count(self, circuit: str, fail_count: int) -> None:
        key = Metrics.CIRCUIT_FAIL_COUNT.format_key({"circuit": circuit})
        self.metric_client.gauge(key, fail_count)
