# ========================================================================== #
#                                                                            #
#    METAL-AGENT - The bare-metal host agent.                                #
#                                                                            #
#    Copyright (C) 2018-2024  Maxim Devaev <mdevaev@gmail.com>               #
#                                                                            #
#    This program is free software: you can redistribute it and/or modify    #
#    it under the terms of the GNU General Public License as published by    #
#    the Free Software Foundation, either version 3 of the License, or       #
#    (at your option) any later version.                                     #
#                                                                            #
#    This program is distributed in the hope that it will be useful,         #
#    but WITHOUT ANY WARRANTY; without even the implied warranty of          #
#    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the           #
#    GNU General Public License for more details.                            #
#                                                                            #
#    You should have received a copy of the GNU General Public License       #
#    along with this program.  If not, see <https://www.gnu.org/licenses/>.  #
#                                                                            #
# ========================================================================== #


import json
import dataclasses

from typing import Callable
from typing import Any


# =====
class ConfigError(ValueError):
    pass


# =====
def build_raw_from_options(options: list[str]) -> dict[str, Any]:
    """ Converts ["agent/ipmi/channel=2", ...] into a nested raw config. """

    raw: dict[str, Any] = {}
    for option in options:
        (key, sep, value) = option.partition("=")
        path = [sub.strip() for sub in key.split("/") if sub.strip()]
        if not path:
            raise ConfigError(f"Empty option key (required 'key=value' instead of {option!r})")
        if not sep:
            raise ConfigError(f"No value for key {key!r}")

        section = raw
        for sub in path[:-1]:
            section = section.setdefault(sub, {})
        section[path[-1]] = _parse_value(value)
    return raw


def _parse_value(value: str) -> Any:
    # JSON literals and containers as they are, anything else is a string.
    # Numbers with a leading zero stay strings, like "0660" for unix_mode.
    value = value.strip()
    if value.isdigit():
        return (value if (len(value) > 1 and value.startswith("0")) else int(value))
    try:
        if value in ["true", "false", "null"] or value.startswith(("{", "[", "\"")):
            return json.loads(value)
    except ValueError as err:
        raise ConfigError(f"Invalid JSON value {value!r}: {err}")
    return value


# =====
@dataclasses.dataclass(frozen=True)
class _OptionMeta:
    default: Any
    unpack_as: str
    help: str


class Section(dict):
    def __init__(self) -> None:
        dict.__init__(self)
        self.__meta: dict[str, _OptionMeta] = {}

    def _unpack(self, ignore: (list[str] | None)=None) -> dict[str, Any]:
        unpacked: dict[str, Any] = {}
        for (key, value) in self.items():
            if key in (ignore or []):
                continue
            if isinstance(value, Section):
                unpacked[key] = value._unpack()  # pylint: disable=protected-access
            else:
                unpacked[self.__meta[key].unpack_as or key] = value
        return unpacked

    def _set_option(self, key: str, value: Any, meta: _OptionMeta) -> None:
        self[key] = value
        self.__meta[key] = meta

    def _get_default(self, key: str) -> Any:
        return self.__meta[key].default

    def _get_help(self, key: str) -> str:
        return self.__meta[key].help

    def __getattribute__(self, key: str) -> Any:
        if key in self:
            return self[key]
        return dict.__getattribute__(self, key)


class Option:
    def __init__(
        self,
        default: Any,
        type: (Callable[[Any], Any] | None)=None,  # pylint: disable=redefined-builtin
        unpack_as: str="",
        help: str="",  # pylint: disable=redefined-builtin
    ) -> None:

        self.default = default
        if type is None:
            type = (default.__class__ if default is not None else str)
        self.type: Callable[[Any], Any] = type
        self.unpack_as = unpack_as
        self.help = help

    def __repr__(self) -> str:
        return f"<Option(default={self.default!r}, type={self.type}, unpack_as={self.unpack_as!r})>"


# =====
def make_config(raw: dict[str, Any], scheme: dict[str, Any], _keys: tuple[str, ...]=()) -> Section:
    if not isinstance(raw, dict):
        raise ConfigError(f"The node {('/'.join(_keys) or '/')!r} must be a dictionary")

    unknown = sorted(set(map(str, raw)) - set(scheme))
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(repr('/'.join(_keys + (key,))) for key in unknown)}")

    config = Section()
    for (key, item) in scheme.items():
        full_name = "/".join(_keys + (key,))
        if isinstance(item, Option):
            value = raw.get(key, item.default)
            try:
                value = item.type(value)
            except (TypeError, ValueError) as err:
                raise ConfigError(f"Invalid value {value!r} for key {full_name!r}: {err}")
            config._set_option(key, value, _OptionMeta(  # pylint: disable=protected-access
                default=item.default,
                unpack_as=item.unpack_as,
                help=item.help,
            ))
        elif isinstance(item, dict):
            config[key] = make_config(raw.get(key, {}), item, _keys + (key,))
        else:
            raise RuntimeError(f"Incorrect scheme definition for key {full_name!r}:"
                               f" the value is {type(item)!r}, not dict() or Option()")
    return config
