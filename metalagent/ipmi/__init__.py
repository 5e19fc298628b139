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


import types

from typing import Self


# =====
# https://www.intel.com/content/dam/www/public/us/en/documents/product-briefs/ipmi-second-gen-interface-spec-v2-rev1-1.pdf

NETFN_APP = 0x06
NETFN_TRANSPORT = 0x0C

CMD_SET_USER_ACCESS = 0x43  # 22.26
CMD_GET_USER_ACCESS = 0x44  # 22.27, used as a user summary
CMD_SET_USER_NAME = 0x45  # 22.28
CMD_GET_USER_NAME = 0x46  # 22.29
CMD_SET_USER_PASSWORD = 0x47  # 22.30, also enables and disables users

CMD_GET_LAN_CONFIG = 0x02  # 23.2


# =====
class BmcError(Exception):
    pass


class BmcUnavailableError(BmcError):
    def __init__(self, msg: str) -> None:
        super().__init__(f"BMC is unavailable: {msg}")


class BmcCommandError(BmcError):
    def __init__(self, netfn: int, command: int, code: int, msg: str) -> None:
        super().__init__(f"IPMI command netfn=0x{netfn:02X} cmd=0x{command:02X} failed (code=0x{code:02X}): {msg}")
        self.netfn = netfn
        self.command = command
        self.code = code


# =====
class BaseBmcChannel:
    """ One raw IPMI request, one raw IPMI response. """

    def send(self, netfn: int, command: int, data: bytes=b"") -> bytes:
        """
        Returns the response data without the completion code.
        Raises BmcCommandError if the BMC has reported a non-zero completion code
        or didn't answer at all.
        """

        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException],
        _exc: BaseException,
        _tb: types.TracebackType,
    ) -> None:

        self.close()
