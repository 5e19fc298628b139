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
from typing import Any

import aiohttp

from .. import htclient


# =====
MACHINE_ID_HEADER = "X-Metal-Machine-Id"
ROLE_HEADER = "X-Metal-Role"
ADMIN_ROLE = "os:admin"


class ControlPlaneError(Exception):
    def __init__(self, status: int, name: str, msg: str) -> None:
        super().__init__(f"Control plane error {status}: {name}: {msg}")
        self.status = status
        self.name = name
        self.msg = msg


class BadResponseError(ControlPlaneError):
    def __init__(self, msg: str) -> None:
        super().__init__(200, "BadResponse", msg)


# =====
class _BaseApiPart:
    def __init__(self, session: "MachinedClientSession") -> None:
        self.__session = session

    async def _request(self, method: str, handle: str, **kwargs: Any) -> dict:
        http = self.__session.get_http_session()
        async with http.request(method, handle, **kwargs) as resp:
            if resp.status != 200:
                (name, msg) = await htclient.read_error_envelope(resp)
                raise ControlPlaneError(resp.status, name, msg)
            try:
                body = await resp.json(content_type=None)
            except ValueError:
                raise BadResponseError(f"Non-JSON reply on {handle}")
        if not isinstance(body, dict):
            raise BadResponseError(f"The reply on {handle} is not an object")
        result = body.get("result")
        return (result if isinstance(result, dict) else {})


class _SystemApiPart(_BaseApiPart):
    async def get_info(self) -> dict:
        return (await self._request("GET", "/system/info"))


class _MachineApiPart(_BaseApiPart):
    async def reboot(self, mode: str="") -> None:
        await self._request("POST", "/machine/reboot", params=({"mode": mode} if mode else {}))


class _BlockApiPart(_BaseApiPart):
    async def get_disks(self) -> list[dict]:
        disks = (await self._request("GET", "/block/disks")).get("disks", [])
        if not isinstance(disks, list):
            raise BadResponseError("The disks list is not a list")
        for disk in disks:
            if not isinstance(disk, dict) or not isinstance(disk.get("id"), str) or not disk["id"]:
                raise BadResponseError(f"Invalid disk entry: {disk!r}")
        return disks


class _StorageApiPart(_BaseApiPart):
    async def wipe(self, devices: list[dict]) -> None:
        await self._request("POST", "/storage/wipe", json={"devices": devices})


# =====
class MachinedClientSession:
    def __init__(self, client: "MachinedClient", machine_id: str) -> None:
        self.__client = client
        self.__machine_id = machine_id
        self.__http: (aiohttp.ClientSession | None) = None

        self.system = _SystemApiPart(self)
        self.machine = _MachineApiPart(self)
        self.block = _BlockApiPart(self)
        self.storage = _StorageApiPart(self)

    def get_http_session(self) -> aiohttp.ClientSession:
        if self.__http is None:
            self.__http = self.__client.make_http_session(self.__machine_id)
        return self.__http

    async def close(self) -> None:
        if self.__http is not None:
            await self.__http.close()
            self.__http = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException],
        _exc: BaseException,
        _tb: types.TracebackType,
    ) -> None:

        await self.close()


class MachinedClient:
    """
    The local control plane of the host OS. Every request is made on behalf
    of the machine (when its id is already known) with the administrative role.
    """

    def __init__(self, unix_path: str, timeout: float, user_agent: str) -> None:
        self.__unix_path = unix_path
        self.__timeout = timeout
        self.__user_agent = user_agent

    def make_session(self, machine_id: str="") -> MachinedClientSession:
        return MachinedClientSession(self, machine_id)

    def make_http_session(self, machine_id: str) -> aiohttp.ClientSession:
        headers = {
            "User-Agent": self.__user_agent,
            ROLE_HEADER: ADMIN_ROLE,
        }
        if machine_id:
            headers[MACHINE_ID_HEADER] = machine_id
        return aiohttp.ClientSession(
            base_url="http://localhost:0",
            headers=headers,
            connector=aiohttp.UnixConnector(path=self.__unix_path),
            timeout=aiohttp.ClientTimeout(total=self.__timeout),
        )
