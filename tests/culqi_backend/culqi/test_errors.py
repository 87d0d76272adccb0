from culqi_backend.culqi.errors import ErrorCode, GatewayError


def test_validation_error() -> None:
    error = GatewayError.validation_error(["Token inválido"])

    assert error.code == ErrorCode.VALIDATION_ERROR
    assert error.status_code == 400
    assert error.retryable is False
    assert error.details == ["Token inválido"]


def test_circuit_open_error() -> None:
    error = GatewayError.circuit_open()

    assert error.code == ErrorCode.CIRCUIT_OPEN
    assert error.status_code == 503
    assert error.retryable is True


def test_network_error() -> None:
    error = GatewayError.network_error()

    assert error.code == ErrorCode.NETWORK_ERROR
    assert error.status_code == 503
    assert error.retryable is True
    assert str(error) == "Error de conexión con Culqi"


def test_culqi_error_takes_the_merchant_message() -> None:
    body = {"merchant_message": "Tarjeta vencida", "user_message": "Tu tarjeta venció"}
    error = GatewayError.culqi_error(400, body)

    assert error.code == ErrorCode.CULQI_ERROR
    assert error.message == "Tarjeta vencida"
    assert error.details == body
    assert error.retryable is False


def test_culqi_error_is_retryable_for_server_errors() -> None:
    assert GatewayError.culqi_error(500, {}).retryable is True
    assert GatewayError.culqi_error(502, None).retryable is True
    assert GatewayError.culqi_error(499, {}).retryable is False


def test_culqi_error_without_dict_body_uses_default_message() -> None:
    assert GatewayError.culqi_error(500, ["unexpected"]).message == "Error de pago"


def test_to_dict() -> None:
    error = GatewayError.validation_error(["Monto inválido"])

    assert error.to_dict() == {
        "code": "VALIDATION_ERROR",
        "message": "Datos de pago inválidos",
        "retryable": False,
        "details": ["Monto inválido"],
    }
    assert "details" not in error.to_dict(include_details=False)
    assert "details" not in GatewayError.circuit_open().to_dict()
