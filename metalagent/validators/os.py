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


import os
import string

from typing import Any

from . import raise_error

from .basic import valid_number
from .basic import valid_string_list
from .basic import valid_stripped_string_not_empty


# =====
_UNIX_PATH_MAX = 107  # sockaddr_un.sun_path without the trailing NUL


def valid_abs_path(arg: Any, name: str="") -> str:
    if not name:
        name = "absolute path"
    arg = valid_stripped_string_not_empty(arg, name)
    if "\x00" in arg:
        raise_error(arg, name)
    return os.path.abspath(arg)


def valid_unix_socket_path(arg: Any) -> str:
    name = "UNIX socket path"
    arg = valid_abs_path(arg, name)
    if len(os.fsencode(arg)) > _UNIX_PATH_MAX:
        raise_error(arg, f"{name} (too long, max={_UNIX_PATH_MAX})")
    return arg


def valid_unix_mode(arg: Any) -> int:
    # Strings are octal as for chmod, numbers come from YAML as they are
    name = "UNIX mode"
    if isinstance(arg, str):
        try:
            arg = int(arg.strip(), 8)
        except ValueError:
            raise_error(arg, name)
    return int(valid_number(arg, min=0, max=0o777, name=name))


# =====
def valid_command(arg: Any, placeholders: (list[str] | None)=None) -> list[str]:
    """
    A helper command as a list or as a comma-separated string.
    If placeholders are given, any other {name} in the arguments is an error.
    """

    cmd = valid_string_list(arg, delim=r"[,\t]+", name="command")
    if len(cmd) == 0 or not cmd[0]:
        raise_error(arg, "command")
    cmd[0] = valid_abs_path(cmd[0], name="command entry point")
    if placeholders is not None:
        for part in cmd:
            for key in _get_format_keys(part):
                if key not in placeholders:
                    raise_error(part, f"command argument (unknown placeholder {{{key}}})")
    return cmd


def _get_format_keys(part: str) -> list[str]:
    try:
        return [
            key
            for (_, key, _, _) in string.Formatter().parse(part)
            if key is not None
        ]
    except ValueError:
        raise_error(part, "command argument (broken braces)")
