from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CIRCUIT_OPEN = "CIRCUIT_OPEN"
    NETWORK_ERROR = "NETWORK_ERROR"
    CULQI_ERROR = "CULQI_ERROR"


class GatewayError(Exception):
    """
    Normalized failure of a call towards the payment gateway.

    Every failure the client surfaces, whether raised locally (validation, open circuit)
    or derived from an outbound call, is an instance of this class.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int,
        retryable: bool = False,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.retryable = retryable
        self.details = details

    def __repr__(self) -> str:
        return (
            f"GatewayError(code={self.code.value}, status_code={self.status_code}, "
            f"retryable={self.retryable}, message={self.message!r})"
        )

    def to_dict(self, include_details: bool = True) -> dict[str, Any]:
        error: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "retryable": self.retryable,
        }
        if include_details and self.details is not None:
            error["details"] = self.details

        return error

    @staticmethod
    def validation_error(errors: list[str]) -> "GatewayError":
        return GatewayError(
            code=ErrorCode.VALIDATION_ERROR,
            message="Datos de pago inválidos",
            status_code=400,
            retryable=False,
            details=errors,
        )

    @staticmethod
    def circuit_open() -> "GatewayError":
        return GatewayError(
            code=ErrorCode.CIRCUIT_OPEN,
            message="Servicio de pagos no disponible",
            status_code=503,
            retryable=True,
        )

    @staticmethod
    def network_error(message: str = "Error de conexión con Culqi") -> "GatewayError":
        return GatewayError(
            code=ErrorCode.NETWORK_ERROR,
            message=message,
            status_code=503,
            retryable=True,
        )

    @staticmethod
    def culqi_error(status_code: int, body: Any) -> "GatewayError":
        message = None
        if isinstance(body, dict):
            message = body.get("merchant_message")

        return GatewayError(
            code=ErrorCode.CULQI_ERROR,
            message=message or "Error de pago",
            status_code=status_code,
            retryable=status_code >= 500,
            details=body,
        )


class GatewayConfigurationError(RuntimeError):
    pass
