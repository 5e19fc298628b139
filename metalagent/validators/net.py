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
import ipaddress

from typing import Any

from . import ValidatorError
from . import raise_error

from .basic import valid_number
from .basic import valid_stripped_string
from .basic import valid_stripped_string_not_empty


# =====
_HOST_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)\Z")


def valid_ip(arg: Any) -> str:
    name = "IPv4/6 address"
    arg = valid_stripped_string_not_empty(arg, name)
    try:
        return str(ipaddress.ip_address(arg))
    except ValueError:
        raise_error(arg, name)


def valid_hostname(arg: Any) -> str:
    name = "RFC-1123 hostname"
    arg = valid_stripped_string_not_empty(arg, name)
    if len(arg) > 253 or not all(map(_HOST_LABEL_RE.match, arg.split("."))):
        raise_error(arg, name)
    return arg


def valid_port(arg: Any) -> int:
    # A dial target, so zero is not allowed
    return int(valid_number(arg, min=1, max=65535, name="network port"))


def valid_host_port(arg: Any) -> str:
    """ host:port or [ipv6]:port. An empty string means "not set". """

    name = "host:port address"
    arg = valid_stripped_string(arg, name)
    if len(arg) == 0:
        return ""

    (host, _, port) = arg.rpartition(":")
    if not host:
        raise_error(arg, name)
    if host.startswith("[") and host.endswith("]"):
        host = f"[{valid_ip(host[1:-1])}]"
    elif ":" in host:
        raise_error(arg, f"{name} (IPv6 must be in brackets)")
    else:
        try:
            host = valid_ip(host)
        except ValidatorError:
            host = valid_hostname(host)
    return f"{host}:{valid_port(port)}"
