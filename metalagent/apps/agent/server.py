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

from typing import Awaitable

import aiohttp

from ...logging import get_logger

from ...ipmi import BmcError

from ...clients.machined import ControlPlaneError
from ...clients.machined import BadResponseError

from ...validators import ValidatorError
from ...validators.basic import valid_strict_bool
from ...validators.bmc import valid_bmc_user
from ...validators.bmc import valid_bmc_passwd

from ...htserver import HttpError
from ...htserver import InternalError
from ...htserver import UpstreamError
from ...htserver import WaitTimeoutError
from ...htserver import exposed_rpc
from ...htserver import RpcServer

from ... import tools
from ... import aiotools
from ... import aiocoalesce

from .service import AgentService
from .tunnel import TunnelRunner


# =====
def _get_subdict(body: dict, key: str) -> dict:
    value = body.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidatorError(f"The field {key!r} must be a JSON object")
    return value


class AgentServer(RpcServer):
    def __init__(
        self,
        service: AgentService,
        tunnel: TunnelRunner,
        machine_id_retry_delay: float,
    ) -> None:

        super().__init__("/agent")

        self.__service = service
        self.__tunnel = tunnel
        self.__machine_id_retry_delay = machine_id_retry_delay

    # =====

    @exposed_rpc("hello")
    async def __hello(self, _: dict) -> dict:
        return (await self.__call(self.__service.hello()))

    @exposed_rpc("get_power_management")
    async def __get_power_management(self, body: dict) -> dict:
        ipmi = _get_subdict(body, "ipmi")
        check_username = valid_bmc_user(ipmi.get("check_username", ""), allow_empty=True)
        return (await self.__call(self.__service.get_power_management(check_username)))

    @exposed_rpc("set_power_management")
    async def __set_power_management(self, body: dict) -> dict:
        ipmi = _get_subdict(body, "ipmi")
        username = valid_bmc_user(ipmi.get("username"))
        passwd = valid_bmc_passwd(ipmi.get("password"))
        return (await self.__call(self.__service.set_power_management(username, passwd)))

    @exposed_rpc("reboot")
    async def __reboot(self, _: dict) -> dict:
        return (await self.__call(self.__service.reboot()))

    @exposed_rpc("wipe_disks")
    async def __wipe_disks(self, body: dict) -> dict:
        zeroes = valid_strict_bool(body.get("zeroes", False))
        return (await self.__call(self.__service.wipe_disks(zeroes)))

    async def __call(self, aw: Awaitable[dict]) -> dict:
        try:
            return (await aw)
        except aiocoalesce.CoalescerTimeoutError:
            raise WaitTimeoutError()
        except BmcError as err:
            raise InternalError(str(err))
        except BadResponseError as err:
            raise UpstreamError(f"Invalid control plane response: {err.msg}")
        except ControlPlaneError as err:
            raise HttpError(str(err), err.status, err.name)
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            raise UpstreamError(f"The control plane is unreachable: {tools.efmt(err)}")

    # =====

    async def _on_startup(self) -> None:
        aiotools.create_deadly_task("Machine ID & tunnel", self.__start_tunnel())

    async def __start_tunnel(self) -> None:
        machine_id = await self.__service.wait_machine_id(self.__machine_id_retry_delay)
        await self.__tunnel.start(machine_id)
        await asyncio.Event().wait()

    async def _on_shutdown(self) -> None:
        logger = get_logger(0)
        logger.info("Waiting short tasks ...")
        await aiotools.stop_all_deadly_tasks()
        await self.__tunnel.stop()
        logger.info("On-Shutdown complete")
