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


import asyncio
import json

from typing import Callable
from typing import Coroutine
from typing import Any

from ...logging import get_logger

from ...ipmi import BaseBmcChannel
from ...ipmi.users import BmcUsers
from ...ipmi.lan import read_lan_endpoint

from ...clients.machined import MachinedClient

from ... import tools
from ... import aiotools
from ... import aiocoalesce


# =====
WIPE_METHOD_ZEROES = "zeroes"
WIPE_METHOD_FAST = "fast"

REBOOT_MODE_POWERCYCLE = "powercycle"


def make_request_payload(request: dict) -> bytes:
    return json.dumps(request, sort_keys=True, separators=(",", ":")).encode("utf-8")


def make_wipe_devices(disks: list[dict], zeroes: bool) -> list[dict]:
    method = (WIPE_METHOD_ZEROES if zeroes else WIPE_METHOD_FAST)
    return [
        {
            "device": disk["id"],
            "method": method,
            "skip_volume_check": True,
        }
        for disk in disks
        if not disk.get("readonly") and not disk.get("cdrom")
    ]


# =====
class AgentService:  # pylint: disable=too-many-instance-attributes
    def __init__(
        self,
        make_channel: Callable[[], BaseBmcChannel],
        machined: MachinedClient,
        test_mode: bool,
        lan_channel: int,
        wait_timeout: float,
    ) -> None:

        self.__make_channel = make_channel
        self.__machined = machined
        self.__test_mode = test_mode
        self.__lan_channel = lan_channel
        self.__wait_timeout = wait_timeout

        self.__coalescer = aiocoalesce.AioCoalescer()
        self.__machine_id = ""

    def get_machine_id(self) -> str:
        return self.__machine_id

    async def wait_machine_id(self, retry_delay: float) -> str:
        logger = get_logger(0)
        while not self.__machine_id:
            try:
                async with self.__machined.make_session() as session:
                    info = await session.system.get_info()
                self.__machine_id = str(info.get("uuid", ""))
                if not self.__machine_id:
                    logger.error("The control plane has reported an empty machine id")
            except Exception as err:
                logger.error("Can't get the machine id: %s", tools.efmt(err))
            if not self.__machine_id:
                await asyncio.sleep(retry_delay)
        logger.info("Machine id: %s", self.__machine_id)
        return self.__machine_id

    # =====

    async def hello(self) -> dict:
        get_logger(0).debug("Hello: test_mode=%s", self.__test_mode)
        return {}

    async def get_power_management(self, check_username: str) -> dict:
        get_logger(0).debug("Get power management: test_mode=%s", self.__test_mode)
        return (await self.__run_coalesced(
            "get_power_management",
            {"ipmi": {"check_username": check_username}},
            lambda: self.__get_power_management(check_username),
        ))

    async def set_power_management(self, username: str, passwd: str) -> dict:
        get_logger(0).debug("Set power management: test_mode=%s, username=%r", self.__test_mode, username)
        return (await self.__run_coalesced(
            "set_power_management",
            {"ipmi": {"username": username, "password": passwd}},
            lambda: self.__set_power_management(username, passwd),
        ))

    async def reboot(self) -> dict:
        get_logger(0).info("Reboot requested")
        return (await self.__run_coalesced("reboot", {}, self.__reboot))

    async def wipe_disks(self, zeroes: bool) -> dict:
        get_logger(0).info("Disks wipe requested: zeroes=%s, test_mode=%s", zeroes, self.__test_mode)
        return (await self.__run_coalesced(
            "wipe_disks",
            {"zeroes": zeroes},
            lambda: self.__wipe_disks(zeroes),
        ))

    async def __run_coalesced(
        self,
        name: str,
        request: dict,
        func: Callable[[], Coroutine[Any, Any, dict]],
    ) -> dict:

        return (await self.__coalescer.run(
            name=name,
            payload=make_request_payload(request),
            func=func,
            timeout=(self.__wait_timeout or None),
        ))

    # =====

    async def __get_power_management(self, check_username: str) -> dict:
        if self.__test_mode:
            return {"api": {}}
        return (await aiotools.run_async(self.__inner_get_power_management, check_username))

    def __inner_get_power_management(self, check_username: str) -> dict:
        with self.__make_channel() as channel:
            endpoint = read_lan_endpoint(channel, self.__lan_channel)
            exists = BmcUsers(channel, self.__lan_channel).account_exists(check_username)
        return {"ipmi": {
            "address": endpoint.ip,
            "port": endpoint.port,
            "user_exists": exists,
        }}

    async def __set_power_management(self, username: str, passwd: str) -> dict:
        if self.__test_mode:
            return {}
        await aiotools.run_async(self.__inner_set_power_management, username, passwd)
        return {}

    def __inner_set_power_management(self, username: str, passwd: str) -> None:
        with self.__make_channel() as channel:
            BmcUsers(channel, self.__lan_channel).ensure_account(username, passwd)

    async def __reboot(self) -> dict:
        async with self.__machined.make_session(self.__machine_id) as session:
            await session.machine.reboot(REBOOT_MODE_POWERCYCLE)
        return {}

    async def __wipe_disks(self, zeroes: bool) -> dict:
        async with self.__machined.make_session(self.__machine_id) as session:
            devices = make_wipe_devices((await session.block.get_disks()), zeroes)
            get_logger(0).debug("Going to wipe disks: %s", [device["device"] for device in devices])
            await session.storage.wipe(devices)
        return {}
