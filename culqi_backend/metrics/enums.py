"""This Enum is used to track all the metrics that are being used in the application."""

from enum import Enum
from typing import Any, Dict


class Metrics(Enum):
    GATEWAY_REQUEST_LATENCY = "culqi.{endpoint}.request.latency"
    GATEWAY_REQUEST_COUNT = "culqi.{endpoint}.request.count"
    GATEWAY_REQUEST_ERROR_COUNT = "culqi.{endpoint}.request.error.{code}"
    GATEWAY_REQUEST_ATTEMPT_COUNT = "culqi.request.attempt_count.{attempt_number}"
    CIRCUIT_OPENED_COUNT = "culqi.circuit.{circuit}.opened"
    CIRCUIT_FAIL_COUNT = "culqi.circuit.{circuit}.fail_count"
    TOKEN_CACHE_HIT_COUNT = "culqi.token_cache.hit"
    TOKEN_CACHE_MISS_COUNT = "culqi.token_cache.miss"

    def format_key(self, placeholders: Dict[str, Any] | None = None) -> str:
        return self.value.format(**(placeholders or {}))
