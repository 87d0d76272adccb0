import configparser
import os
from typing import Any, Mapping, get_args

from pydantic import BaseModel

from .models import AppConfig


class ConfigParser:
    """
    Reads an INI file into an AppConfig.

    Keys of the [app] section end up at the top level of the config, every other
    section becomes a nested sub config. Environment variables named
    <SECTION>_<KEY> (upper case) take precedence over values from the file and
    can set any field AppConfig knows about, also when the file leaves it out.
    """

    APP_SECTION: str = "app"

    def __init__(
        self,
        config_parser: configparser.ConfigParser,
        config_path: str,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.config_parser = config_parser
        self.config_path = config_path
        self.environ = os.environ if environ is None else environ

    def parse(self) -> AppConfig:
        if not os.path.isfile(self.config_path):
            raise FileNotFoundError(f"Config file {self.config_path} does not exist")

        self.config_parser.read(self.config_path)

        sections: dict[str, dict[str, str]] = {
            section: dict(self.config_parser.items(section))
            for section in self.config_parser.sections()
        }

        known_keys = self.known_keys()
        for section in set(sections) | set(known_keys):
            keys = set(sections.get(section, {})) | known_keys.get(section, set())
            for key in keys:
                override = self.environ.get(f"{section}_{key}".upper())
                if override is not None:
                    sections.setdefault(section, {})[key] = override

        data: dict[str, Any] = dict(sections.pop(self.APP_SECTION, {}))
        data.update(sections)

        return AppConfig.model_validate(data)

    @classmethod
    def known_keys(cls) -> dict[str, set[str]]:
        """
        Maps every section to the keys AppConfig accepts in it.
        """
        keys: dict[str, set[str]] = {cls.APP_SECTION: set()}

        for name, field in AppConfig.model_fields.items():
            models = [
                model
                for model in get_args(field.annotation) or (field.annotation,)
                if isinstance(model, type) and issubclass(model, BaseModel)
            ]

            if not models:
                keys[cls.APP_SECTION].add(name)
                continue

            keys[name] = {key for model in models for key in model.model_fields}

        return keys
