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
import asyncio.subprocess

from ...logging import get_logger

from ... import tools
from ... import aiotools
from ... import aioproc


# =====
class TunnelRunner:
    """
    Keeps the reverse tunnel helper running. The helper connects to the fleet
    manager and forwards its requests to our local endpoint, so if it dies
    it's just restarted after the delay.
    """

    def __init__(
        self,
        cmd: list[str],
        restart_delay: float,
        provider_address: str,
        unix_path: str,
    ) -> None:

        self.__cmd = cmd
        self.__restart_delay = restart_delay
        self.__provider_address = provider_address
        self.__unix_path = unix_path

        self.__task: (asyncio.Task | None) = None
        self.__proc: (asyncio.subprocess.Process | None) = None  # pylint: disable=no-member

    def is_enabled(self) -> bool:
        return bool(self.__provider_address)

    def make_cmd(self, machine_id: str) -> list[str]:
        return tools.format_cmd(
            self.__cmd,
            provider_address=self.__provider_address,
            machine_id=machine_id,
            unix_path=self.__unix_path,
        )

    @aiotools.atomic_fg
    async def start(self, machine_id: str) -> None:
        if not self.is_enabled():
            get_logger(0).info("No provider address, the tunnel is disabled")
            return
        assert not self.__task
        get_logger(0).info("Starting the tunnel to %s ...", self.__provider_address)
        self.__task = asyncio.create_task(self.__loop(self.make_cmd(machine_id)))

    @aiotools.atomic_fg
    async def stop(self) -> None:
        if self.__task:
            get_logger(0).info("Stopping the tunnel ...")
            self.__task.cancel()
            await asyncio.gather(self.__task, return_exceptions=True)
        await self.__kill_proc()
        self.__task = None

    # =====

    async def __loop(self, cmd: list[str]) -> None:
        logger = get_logger(0)
        while True:
            try:
                self.__proc = await aioproc.spawn_helper(cmd)
                logger.info("Started the tunnel pid=%d: %s", self.__proc.pid, tools.cmdfmt(cmd))
                retcode = await aioproc.relay_output(self.__proc, logger, "tunnel")
                logger.error("The tunnel has exited unexpectedly: retcode=%d", retcode)
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Can't run the tunnel")
            await self.__kill_proc()
            logger.info("Restarting the tunnel in %.1f seconds ...", self.__restart_delay)
            await asyncio.sleep(self.__restart_delay)

    async def __kill_proc(self) -> None:
        if self.__proc:
            await aioproc.stop_helper(self.__proc, 5.0, get_logger(0))
        self.__proc = None
