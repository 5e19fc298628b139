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


import textwrap

from typing import Generator
from typing import Any

import yaml

from . import Section


# =====
def make_config_dump(config: Section, indent: int=4) -> str:
    return "\n".join(_inner_make_dump(config, indent))


def _inner_make_dump(config: Section, indent: int, _level: int=0) -> Generator[str, None, None]:
    prefix = " " * indent * _level
    for key in sorted(config):
        value = config[key]
        if isinstance(value, Section):
            yield f"{prefix}{key}:"
            yield from _inner_make_dump(value, indent, _level + 1)
            yield ""
            continue

        text = _make_yaml_kv(key, value, indent, prefix)
        default = config._get_default(key)  # pylint: disable=protected-access
        if default != value:
            text += f"  # default: {_make_yaml_value(default, indent).strip()}"
        comment = config._get_help(key)  # pylint: disable=protected-access
        if comment:
            text += f"  # {comment}"
        yield text


def _make_yaml_kv(key: str, value: Any, indent: int, prefix: str) -> str:
    return textwrap.indent(f"{key}:{_make_yaml_value(value, indent)}", prefix=prefix)


def _make_yaml_value(value: Any, indent: int) -> str:
    text = yaml.dump(value, indent=indent, allow_unicode=True, default_flow_style=None)
    text = text.replace("\n...\n", "").strip()
    if isinstance(value, (dict, list)) and value and text[0] not in "{[":
        return "\n" + textwrap.indent(text, prefix=" " * indent)
    return " " + text
