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


from pyghmi.exceptions import IpmiException
from pyghmi.ipmi.private.localsession import Session as IpmiLocalSession

from ..logging import get_logger

from .. import tools

from . import BmcUnavailableError
from . import BmcCommandError
from . import BaseBmcChannel


# =====
class LocalBmcChannel(BaseBmcChannel):
    """ The in-band channel to the host's own BMC via the IPMI kernel driver. """

    def __init__(self, device_path: str) -> None:
        self.__device_path = device_path
        try:
            self.__session: (IpmiLocalSession | None) = IpmiLocalSession(device_path)
        except Exception as err:
            raise BmcUnavailableError(f"Can't open {device_path}: {tools.efmt(err)}")
        get_logger(0).debug("Opened IPMI device %s", device_path)

    def send(self, netfn: int, command: int, data: bytes=b"") -> bytes:
        assert self.__session is not None, "The channel is closed"
        try:
            rsp = self.__session.raw_command(netfn=netfn, command=command, data=list(data))
        except IpmiException as err:
            raise BmcCommandError(netfn, command, (getattr(err, "ipmicode", 0) or 0xFF), str(err))
        except OSError as err:
            # ioctl() failures of the driver have no completion code
            raise BmcCommandError(netfn, command, 0xFF, tools.efmt(err))
        code = rsp.get("code", 0)
        if "error" in rsp or code:
            raise BmcCommandError(netfn, command, (code or 0xFF), rsp.get("error", "Non-zero completion code"))
        return bytes(rsp.get("data", b""))

    def close(self) -> None:
        if self.__session is not None:
            # The local session doesn't have its own close(), so release the device node here
            try:
                self.__session.ipmidev.close()
            except Exception as err:
                get_logger(0).error("Can't close IPMI device %s: %s", self.__device_path, tools.efmt(err))
            self.__session = None
            get_logger(0).debug("Closed IPMI device %s", self.__device_path)
