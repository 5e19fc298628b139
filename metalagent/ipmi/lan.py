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


import ipaddress
import struct
import dataclasses

from .. import tools

from . import NETFN_TRANSPORT
from . import CMD_GET_LAN_CONFIG
from . import BmcError
from . import BaseBmcChannel


# =====
LAN_PARAM_IP_ADDR = 0x03
LAN_PARAM_PRIMARY_RMCP_PORT = 0x08


class LanConfigError(BmcError):
    def __init__(self, param: str, err: Exception) -> None:
        super().__init__(f"Can't read LAN parameter {param!r}: {tools.efmt(err)}")
        self.param = param


@dataclasses.dataclass(frozen=True)
class LanEndpoint:
    ip: str
    port: int


# =====
def decode_ip(data: bytes) -> str:
    if len(data) < 4:
        raise ValueError(f"Too short IP address data: {len(data)} bytes")
    return str(ipaddress.IPv4Address(bytes(data[:4])))


def decode_port(data: bytes) -> int:
    if len(data) < 2:
        raise ValueError(f"Too short port data: {len(data)} bytes")
    return struct.unpack("<H", bytes(data[:2]))[0]


def read_lan_param(channel: BaseBmcChannel, param: int, lan_channel: int=1) -> bytes:
    data = channel.send(NETFN_TRANSPORT, CMD_GET_LAN_CONFIG, bytes([lan_channel & 0x0F, param, 0, 0]))
    if len(data) < 1:
        raise BmcError(f"Empty response for LAN parameter 0x{param:02X}")
    return data[1:]  # Skip the parameter revision


def read_lan_endpoint(channel: BaseBmcChannel, lan_channel: int=1) -> LanEndpoint:
    try:
        ip = decode_ip(read_lan_param(channel, LAN_PARAM_IP_ADDR, lan_channel))
    except (BmcError, ValueError) as err:
        raise LanConfigError("ip address", err)
    try:
        port = decode_port(read_lan_param(channel, LAN_PARAM_PRIMARY_RMCP_PORT, lan_channel))
    except (BmcError, ValueError) as err:
        raise LanConfigError("primary rmcp port", err)
    return LanEndpoint(ip, port)
