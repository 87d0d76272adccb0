import time
from logging import Logger
from typing import Any, Callable, Coroutine

import inject

from culqi_backend.metrics.service import MetricService

from .models import Circuit, CircuitOpenException, CircuitState
from .repositories import CircuitStateRepository


class CircuitBreakerService:
    """
    Counts consecutive failures of the wrapped calls and rejects calls for
    `reset_timeout` seconds once `fail_max` is reached.

    There is no half-open probe: when the cooldown has elapsed the circuit is
    closed again on the next attempt, before that attempt completes.
    """

    @inject.autoparams("logger", "metric_service")
    def __init__(
        self,
        repository: CircuitStateRepository,
        logger: Logger,
        metric_service: MetricService,
        fail_max: int = 5,
        reset_timeout: float = 30,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.repository = repository
        self.logger = logger
        self.metric_service = metric_service
        self.fail_max = fail_max
        self.reset_timeout = reset_timeout
        self.clock = clock

    def get_circuit(self, identifier: str) -> Circuit:
        return self.repository.get_circuit(identifier)

    def guard(self, identifier: str) -> Circuit:
        """
        Raises CircuitOpenException while the circuit is open, closes it once the
        cooldown has elapsed.
        """
        circuit = self.repository.get_circuit(identifier)

        if circuit.state != CircuitState.OPEN:
            return circuit

        if circuit.is_open_at(self.clock()):
            self.logger.info(
                "Circuit for %s is open. Function call not attempted.", identifier
            )
            raise CircuitOpenException(identifier, circuit.open_until)

        circuit.reset()
        self.repository.save_circuit(circuit)
        self.logger.info("Circuit for %s closed after cooldown", identifier)

        return circuit

    def record_success(self, identifier: str) -> None:
        circuit = self.repository.get_circuit(identifier)
        if circuit.fail_count == 0 and circuit.state == CircuitState.CLOSED:
            return

        circuit.reset()
        self.repository.save_circuit(circuit)

    def record_failure(self, identifier: str) -> None:
        circuit = self.repository.get_circuit(identifier)
        circuit.record_failure()
        self.metric_service.measure_circuit_fail_count(identifier, circuit.fail_count)

        if circuit.fail_count >= self.fail_max and circuit.state != CircuitState.OPEN:
            circuit.open(until=self.clock() + self.reset_timeout)
            self.metric_service.increase_circuit_opened_count(identifier)
            self.logger.warning(
                "Circuit for %s opened after %d consecutive failures",
                identifier,
                circuit.fail_count,
            )

        self.repository.save_circuit(circuit)

    async def call(
        self,
        identifier: str,
        func: Callable[..., Coroutine[Any, Any, Any]],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        self.logger.debug(
            "retrieving circuit from %s: %s", type(self.repository).__name__, identifier
        )
        self.guard(identifier)

        try:
            result = await func(*args, **kwargs)
        except Exception:
            self.record_failure(identifier)
            raise

        self.record_success(identifier)

        return result
