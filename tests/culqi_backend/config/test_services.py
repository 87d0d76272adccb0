import configparser
from pathlib import Path

import pytest

from culqi_backend.config.models import AppConfig, Environment, NoOpMetricConfig
from culqi_backend.config.services import ConfigParser
from culqi_backend.utils import root_path


class TestConfigParser:
    def test_config_file_is_valid_to_parse(self) -> None:
        config_parser = ConfigParser(
            config_parser=configparser.ConfigParser(),
            config_path=root_path("app.conf.test"),
            environ={},
        )
        app_config = config_parser.parse()

        assert isinstance(app_config, AppConfig)
        assert app_config.env == Environment.TESTING
        assert isinstance(app_config.metric, NoOpMetricConfig)
        assert app_config.culqi.secret_key == "sk_test_0123456789abcdef"
        assert app_config.circuit_breaker.fail_max == 5
        assert app_config.payments.card_brands == ["Visa", "Mastercard"]

    def test_example_config_file_is_valid_to_parse(self) -> None:
        config_parser = ConfigParser(
            config_parser=configparser.ConfigParser(),
            config_path=root_path("app.conf.example"),
            environ={},
        )
        app_config = config_parser.parse()

        assert app_config.culqi.secret_key == ""
        assert app_config.token_cache.ttl == 300

    def test_environment_variables_override_file_values(self) -> None:
        config_parser = ConfigParser(
            config_parser=configparser.ConfigParser(),
            config_path=root_path("app.conf.test"),
            environ={
                "CULQI_SECRET_KEY": "sk_live_override",
                "CIRCUIT_BREAKER_RESET_TIMEOUT": "60",
            },
        )
        app_config = config_parser.parse()

        assert app_config.culqi.secret_key == "sk_live_override"
        assert app_config.circuit_breaker.reset_timeout == 60

    def test_environment_variables_set_keys_missing_from_the_file(self) -> None:
        config_parser = ConfigParser(
            config_parser=configparser.ConfigParser(),
            config_path=root_path("app.conf.test"),
            environ={"REDIS_USERNAME": "culqi", "LOGGING_JSON_OUTPUT": "true"},
        )
        app_config = config_parser.parse()

        assert app_config.redis.username == "culqi"
        assert app_config.logging.json_output is True

    def test_environment_variables_set_sections_missing_from_the_file(
        self, tmp_path: Path
    ) -> None:
        config_file = tmp_path / "app.conf"
        config_file.write_text("[app]\nenv = testing\n\n[metric]\nadapter = no-op\n")
        config_parser = ConfigParser(
            config_parser=configparser.ConfigParser(),
            config_path=str(config_file),
            environ={"TOKEN_CACHE_TTL": "60", "CULQI_SECRET_KEY": "sk_test_env"},
        )
        app_config = config_parser.parse()

        assert app_config.token_cache.ttl == 60
        assert app_config.culqi.secret_key == "sk_test_env"

    def test_unrelated_environment_variables_are_ignored(self) -> None:
        config_parser = ConfigParser(
            config_parser=configparser.ConfigParser(),
            config_path=root_path("app.conf.test"),
            environ={"REDIS_FLAVOUR": "vanilla", "HOME": "/root"},
        )
        app_config = config_parser.parse()

        assert app_config == ConfigParser(
            config_parser=configparser.ConfigParser(),
            config_path=root_path("app.conf.test"),
            environ={},
        ).parse()

    def test_known_keys_cover_every_section(self) -> None:
        known_keys = ConfigParser.known_keys()

        assert known_keys["app"] == {"env"}
        assert "secret_key" in known_keys["culqi"]
        assert "username" in known_keys["redis"]
        assert {"adapter", "host", "port", "prefix"} <= known_keys["metric"]

    def test_app_section_is_read_into_the_top_level(self, tmp_path: Path) -> None:
        config_file = tmp_path / "app.conf"
        config_file.write_text(
            "[app]\nenv = production\n\n[metric]\nadapter = no-op\n\n[culqi]\n"
        )
        config_parser = ConfigParser(
            config_parser=configparser.ConfigParser(),
            config_path=str(config_file),
            environ={"APP_ENV": "staging"},
        )
        app_config = config_parser.parse()

        assert app_config.env == Environment.STAGING
        assert app_config.retry.max_retries == 3

    def test_parse_config_with_missing_file(self, tmp_path: Path) -> None:
        missing_conf = tmp_path / "missing.conf"
        config_parser = ConfigParser(
            config_parser=configparser.ConfigParser(),
            config_path=str(missing_conf),
        )

        with pytest.raises(FileNotFoundError):
            config_parser.parse()
