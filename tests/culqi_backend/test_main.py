import os

import inject
import pytest
from fastapi.testclient import TestClient
from pytest_mock import MockerFixture

from culqi_backend.config.services import ConfigParser
from culqi_backend.constants import APP_NAME
from culqi_backend.culqi.client import CulqiClient
from culqi_backend.culqi.errors import GatewayConfigurationError
from culqi_backend.main import create_app
from culqi_backend.utils import root_path
from tests.utils import clear_bindings, configure_bindings


def teardown_function() -> None:
    clear_bindings()


def test_create_app_parses_app_config(mocker: MockerFixture) -> None:
    config_path = root_path("app.conf")
    if not os.path.isfile(config_path):
        pytest.fail(f"This test requires config file {config_path} to exist")

    mocker.patch.dict(os.environ, clear=False)
    os.environ.pop("APP_CONFIG_FILE", None)
    inject_configure_spy = mocker.spy(inject, "configure")
    config_parser_init_spy = mocker.spy(ConfigParser, "__init__")
    create_app()
    inject_configure_spy.assert_called()
    config_parser_init_spy.assert_called_once_with(
        mocker.ANY,
        config_parser=mocker.ANY,
        config_path=root_path("app.conf"),
    )


def test_create_app_reads_config_file_from_environment(
    mocker: MockerFixture,
) -> None:
    mocker.patch.dict(os.environ, {"APP_CONFIG_FILE": "app.conf.test"})
    config_parser_init_spy = mocker.spy(ConfigParser, "__init__")

    create_app()

    config_parser_init_spy.assert_called_once_with(
        mocker.ANY,
        config_parser=mocker.ANY,
        config_path=root_path("app.conf.test"),
    )


def test_create_app_does_not_reconfigure_inject(mocker: MockerFixture) -> None:
    configure_bindings()
    inject_configure_spy = mocker.spy(inject, "configure")
    create_app()
    inject_configure_spy.assert_not_called()


def test_create_app_registers_the_routes() -> None:
    configure_bindings()
    app = create_app()

    paths = {route.path for route in app.routes}  # type: ignore[attr-defined]

    assert app.title == APP_NAME
    assert {
        "/",
        "/health",
        "/health/live",
        "/health/ready",
        "/api/v1/payments",
        "/api/v1/payments/process",
        "/api/v1/payments/stats",
        "/api/v1/payments/methods",
        "/api/v1/payments/verify/{charge_id}",
        "/api/v1/payments/{charge_id}/refund",
        "/api/v1/payments/webhook",
    } <= paths


def test_shutdown_closes_the_culqi_client(mocker: MockerFixture) -> None:
    culqi_client = mocker.Mock(spec=CulqiClient)
    culqi_client.aclose = mocker.AsyncMock()
    configure_bindings(lambda binder: binder.bind(CulqiClient, culqi_client))

    with TestClient(create_app()) as client:
        client.get("/health/live")
        culqi_client.aclose.assert_not_awaited()

    culqi_client.aclose.assert_awaited_once()


def test_shutdown_without_culqi_client_succeeds() -> None:
    def missing_secret_key() -> CulqiClient:
        raise GatewayConfigurationError("Culqi secret key is not configured")

    configure_bindings(
        lambda binder: binder.bind_to_constructor(CulqiClient, missing_secret_key)
    )

    with TestClient(create_app()) as client:
        assert client.get("/health/live").status_code == 200
