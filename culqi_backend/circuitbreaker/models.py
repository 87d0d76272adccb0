from enum import Enum

from pydantic import BaseModel, Field


class CircuitState(Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class Circuit(BaseModel):
    id: str
    state: CircuitState = Field(default=CircuitState.CLOSED)
    fail_count: int = Field(default=0, ge=0)
    open_until: float | None = Field(default=None)

    def reset(self) -> None:
        self.state = CircuitState.CLOSED
        self.fail_count = 0
        self.open_until = None

    def record_failure(self) -> None:
        self.fail_count += 1

    def open(self, until: float) -> None:
        self.state = CircuitState.OPEN
        self.open_until = until

    def is_open_at(self, now: float) -> bool:
        return (
            self.state == CircuitState.OPEN
            and self.open_until is not None
            and now < self.open_until
        )


class CircuitOpenException(Exception):
    def __init__(self, identifier: str, open_until: float | None) -> None:
        super().__init__(f"Circuit for {identifier} is open")
        self.identifier = identifier
        self.open_until = open_until
