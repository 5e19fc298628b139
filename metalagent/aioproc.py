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
import signal
import asyncio
import asyncio.subprocess
import logging


# =====
async def spawn_helper(cmd: list[str]) -> asyncio.subprocess.Process:  # pylint: disable=no-member
    # The helper leads its own session, so its whole group can be signalled
    return (await asyncio.create_subprocess_exec(
        *cmd,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
        start_new_session=True,
    ))


async def relay_output(proc: asyncio.subprocess.Process, logger: logging.Logger, prefix: str) -> int:  # pylint: disable=no-member
    """ Logs the helper output line by line until it exits. Returns the exit code. """

    assert proc.stdout is not None
    while True:
        line = await proc.stdout.readline()
        if not line:
            break
        text = line.decode(errors="replace").rstrip()
        if text:
            logger.info("%s => %s", prefix, text)
    return (await proc.wait())


async def stop_helper(proc: asyncio.subprocess.Process, timeout: float, logger: logging.Logger) -> None:  # pylint: disable=no-member
    if proc.returncode is not None:
        return
    _signal_group(proc, signal.SIGTERM)
    try:
        await asyncio.wait_for(proc.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("Helper pid=%d is still alive after %.1f seconds, killing it ...", proc.pid, timeout)
        _signal_group(proc, signal.SIGKILL)
        await proc.wait()
    logger.info("Helper pid=%d has been stopped: retcode=%d", proc.pid, proc.returncode)


def _signal_group(proc: asyncio.subprocess.Process, signum: int) -> None:  # pylint: disable=no-member
    try:
        os.killpg(proc.pid, signum)  # pgid == pid for a session leader
    except ProcessLookupError:
        pass  # Already reaped, wait() returns immediately
