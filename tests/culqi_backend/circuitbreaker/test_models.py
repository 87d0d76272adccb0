import pytest

from culqi_backend.circuitbreaker.models import Circuit, CircuitState


@pytest.fixture
def circuit() -> Circuit:
    return Circuit(id="test_circuit")


def test_new_circuit_is_closed(circuit: Circuit) -> None:
    assert circuit.state == CircuitState.CLOSED
    assert circuit.fail_count == 0
    assert circuit.open_until is None
    assert circuit.is_open_at(0) is False


def test_it_is_open_until_the_cooldown_has_elapsed(circuit: Circuit) -> None:
    circuit.open(until=100.0)

    assert circuit.is_open_at(99.9) is True
    assert circuit.is_open_at(100.0) is False
    assert circuit.is_open_at(130.0) is False
    assert circuit.state == CircuitState.OPEN


def test_reset_closes_the_circuit(circuit: Circuit) -> None:
    circuit.record_failure()
    circuit.record_failure()
    circuit.open(until=100.0)

    circuit.reset()

    assert circuit.state == CircuitState.CLOSED
    assert circuit.fail_count == 0
    assert circuit.open_until is None


def test_fail_count_cannot_be_negative() -> None:
    with pytest.raises(ValueError):
        Circuit(id="test_circuit", fail_count=-1)


def test_state_is_not_shared_between_circuit_instances() -> None:
    circuit_a = Circuit(id="a")
    circuit_b = Circuit(id="b")

    circuit_a.open(until=100.0)

    assert circuit_a.state == CircuitState.OPEN
    assert circuit_b.state == CircuitState.CLOSED
