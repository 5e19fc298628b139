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
import functools
import typing

from typing import Callable
from typing import Coroutine
from typing import TypeVar
from typing import Any

from .logging import get_logger


# =====
_FunctionT = TypeVar("_FunctionT", bound=Callable[..., Any])
_RetvalT = TypeVar("_RetvalT")


# =====
def atomic_fg(func: _FunctionT) -> _FunctionT:
    """
    The wrapped coroutine is always completed, even if the caller is cancelled.
    In this case the cancellation is delivered to the caller after that.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        task = asyncio.ensure_future(func(*args, **kwargs))
        cancelled = False
        while True:
            try:
                result = await asyncio.shield(task)
                break
            except asyncio.CancelledError:
                if task.done():
                    raise
                cancelled = True
        if cancelled:
            raise asyncio.CancelledError()
        return result

    return typing.cast(_FunctionT, wrapper)


# =====
_deadly_tasks: set[asyncio.Task] = set()


def create_deadly_task(name: str, coro: Coroutine) -> asyncio.Task:
    """ The task must live until the shutdown. Any other end terminates the whole process. """

    async def wrapper() -> None:
        logger = get_logger(0)
        try:
            await coro
            logger.error("Deadly task %r has finished unexpectedly, killing myself ...", name)
        except asyncio.CancelledError:
            return
        except Exception:
            logger.exception("Unhandled exception in deadly task %r, killing myself ...", name)
        _kill_myself()

    task = asyncio.create_task(wrapper(), name=name)
    _deadly_tasks.add(task)
    task.add_done_callback(_deadly_tasks.discard)
    return task


async def stop_all_deadly_tasks() -> None:
    tasks = list(_deadly_tasks)
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


def _kill_myself() -> None:
    pid = os.getpid()
    if pid == 1:
        os._exit(1)  # PID 1 in a container ignores SIGTERM without a handler  # pylint: disable=protected-access
    os.kill(pid, signal.SIGTERM)


# =====
async def run_async(func: Callable[..., _RetvalT], *args: Any, **kwargs: Any) -> _RetvalT:
    call = functools.partial(func, *args, **kwargs)
    return (await asyncio.get_running_loop().run_in_executor(None, call))
