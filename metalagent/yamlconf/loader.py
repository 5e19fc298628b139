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


import re

from typing import Any

import yaml

from .. import tools


# =====
class _ConfigLoader(yaml.SafeLoader):  # pylint: disable=too-many-ancestors
    # Only true/false are bools, "yes", "no", "on" and "off" stay strings.
    # The resolvers are copied, the global SafeLoader is not affected.
    yaml_implicit_resolvers = {
        first: [
            (tag, regexp)
            for (tag, regexp) in resolvers
            if tag != "tag:yaml.org,2002:bool"
        ]
        for (first, resolvers) in yaml.SafeLoader.yaml_implicit_resolvers.items()
    }


_ConfigLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


# =====
def load_yaml_file(path: str) -> dict[str, Any]:
    with open(path) as file:
        try:
            data = yaml.load(file, _ConfigLoader)  # nosec
        except yaml.YAMLError as err:
            # Reraise internal exception as standard ValueError and show the incorrect file
            raise ValueError(f"Invalid YAML in the file {path!r}:\n{tools.efmt(err)}") from None
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"The top level of the file {path!r} must be a mapping, not {type(data).__name__}")
    return data
