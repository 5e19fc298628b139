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
import hashlib

from typing import Callable
from typing import Coroutine
from typing import Any

from .logging import get_logger

from . import tools


# =====
class CoalescerTimeoutError(asyncio.TimeoutError):
    def __init__(self, key: str, timeout: float) -> None:
        super().__init__(f"Timed out waiting for operation {key} after {timeout} seconds")
        self.key = key


# =====
class AioCoalescer:
    """
    Collapses concurrent calls with the same name and payload into one operation.

    The first caller for a key starts the operation, everybody who arrives
    before it finishes joins it and receives the very same result or exception.
    A waiter that is cancelled or runs out of its own timeout just stops waiting,
    the operation keeps running for the others. The entry is dropped when
    the operation is done, so the next identical call starts a new one.
    """

    def __init__(self) -> None:
        self.__lock = asyncio.Lock()
        self.__tasks: dict[str, asyncio.Task] = {}

    @staticmethod
    def make_key(name: str, payload: bytes) -> str:
        return f"{name}-{hashlib.md5(payload).hexdigest()}"

    def is_running(self, key: str) -> bool:
        return (key in self.__tasks)

    def get_running_count(self) -> int:
        return len(self.__tasks)

    async def run(
        self,
        name: str,
        payload: bytes,
        func: Callable[[], Coroutine[Any, Any, Any]],
        timeout: (float | None)=None,
    ) -> Any:

        key = self.make_key(name, payload)
        async with self.__lock:
            task = self.__tasks.get(key)
            if task is None:
                get_logger(0).debug("Starting operation %s", key)
                task = asyncio.create_task(func())
                task.add_done_callback(lambda done: self.__on_done(key, done))
                self.__tasks[key] = task
            else:
                get_logger(0).debug("Joining in-flight operation %s", key)

        if timeout:
            try:
                return (await asyncio.wait_for(asyncio.shield(task), timeout=timeout))
            except asyncio.TimeoutError:
                if task.done():
                    raise  # The operation itself has failed with a timeout
                raise CoalescerTimeoutError(key, timeout)
        return (await asyncio.shield(task))

    def __on_done(self, key: str, task: asyncio.Task) -> None:
        if self.__tasks.get(key) is task:
            del self.__tasks[key]
        if not task.cancelled():
            err = task.exception()  # Mark as retrieved even if all the waiters are gone
            if err is not None:
                get_logger(0).debug("Operation %s failed: %s", key, tools.efmt(err))  # type: ignore
