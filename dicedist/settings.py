import logging
import os
import typing

import yaml

from dicedist.errors import SettingsError

DEFAULT_SETTINGS_FILE = os.path.join(
    os.path.dirname(__file__), "settings.default.yaml"
)


def _read_yaml(path: str) -> typing.Dict[str, typing.Any]:
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError("settings file %s must contain a mapping" % path)
    return data


def load_settings(path: typing.Optional[str] = None) -> typing.Dict[str, typing.Any]:
    result = _read_yaml(DEFAULT_SETTINGS_FILE)
    if path is not None:
        for key, value in _read_yaml(path).items():
            if key not in result:
                raise SettingsError("unknown setting %s in %s" % (key, path))
            result[key] = value
    if not isinstance(result["log_level"], int) and not isinstance(
        logging.getLevelName(result["log_level"]), int
    ):
        raise SettingsError("unknown log_level %s" % result["log_level"])
    return result


settings: typing.Dict[str, typing.Any] = load_settings()


def configure(path: typing.Optional[str] = None) -> typing.Dict[str, typing.Any]:
    new_settings = load_settings(path)
    settings.clear()
    settings.update(new_settings)
    return settings
