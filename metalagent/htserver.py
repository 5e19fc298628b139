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
import socket
import dataclasses
import inspect
import json

from typing import Callable
from typing import Awaitable

from aiohttp.web import Request
from aiohttp.web import Response
from aiohttp.web import Application
from aiohttp.web import run_app

from .logging import get_logger

from .validators import ValidatorError

from . import tools


# =====
class HttpError(Exception):
    def __init__(self, msg: str, status: int, name: str="") -> None:
        super().__init__(msg)
        self.status = status
        self.name = (name or type(self).__name__)


class InternalError(HttpError):
    def __init__(self, msg: str) -> None:
        super().__init__(msg, 500)


class UpstreamError(HttpError):
    def __init__(self, msg: str) -> None:
        super().__init__(msg, 502)


class WaitTimeoutError(HttpError):
    def __init__(self) -> None:
        super().__init__("The operation is still running, please try again later", 504)


# =====
_RpcHandler = Callable[[dict], Awaitable[dict]]


@dataclasses.dataclass(frozen=True)
class RpcExposed:
    name: str
    handler: _RpcHandler


_RPC_NAME = "_rpc_name"


def exposed_rpc(name: str) -> Callable:
    def set_name(handler: Callable) -> Callable:
        setattr(handler, _RPC_NAME, name)
        return handler
    return set_name


def _get_exposed_rpc(obj: object) -> list[RpcExposed]:
    exposed: list[RpcExposed] = []
    for attr in dir(obj):
        handler = getattr(obj, attr)
        if inspect.ismethod(handler) and getattr(handler, _RPC_NAME, ""):
            exposed.append(RpcExposed(getattr(handler, _RPC_NAME), handler))
    return exposed


# =====
def make_json_response(result: (dict | None)=None, status: int=200) -> Response:
    return Response(
        text=json.dumps({
            "ok": (status == 200),
            "result": (result or {}),
        }, sort_keys=True, indent=4),
        status=status,
        content_type="application/json",
    )


def make_json_exception(err: Exception, status: int=500) -> Response:
    name = type(err).__name__
    if isinstance(err, HttpError):
        (status, name) = (err.status, err.name)
    if status >= 500:
        get_logger().error("RPC error: %s: %s", name, err)
    return make_json_response({
        "error": name,
        "error_msg": str(err),
    }, status=status)


async def read_json_request(request: Request) -> dict:
    text = await request.text()
    if not text.strip():
        return {}
    try:
        body = json.loads(text)
    except ValueError:
        raise ValidatorError("The request body is not a valid JSON")
    if not isinstance(body, dict):
        raise ValidatorError("The request body must be a JSON object")
    return body


def bind_unix_socket(path: str, rm: bool, mode: int) -> socket.socket:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    if rm and os.path.exists(path):
        os.remove(path)
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.bind(path)
        if mode:
            os.chmod(path, mode)
    except Exception:
        sock.close()
        raise
    return sock


# =====
class RpcServer:
    """
    JSON RPC over HTTP: every method is "POST <prefix>/<name>" with a JSON object
    in the body. Any reply is wrapped into {"ok": bool, "result": dict}.
    """

    def __init__(self, prefix: str) -> None:
        self.__prefix = prefix.rstrip("/")

    def run(
        self,
        unix_path: str,
        unix_rm: bool,
        unix_mode: int,
        access_log_format: str,
    ) -> None:

        get_logger(0).info("Listening RPC on UNIX socket %s ...", unix_path)
        run_app(
            sock=bind_unix_socket(unix_path, unix_rm, unix_mode),
            app=self.make_app(),
            shutdown_timeout=1,
            access_log_format=access_log_format,
            print=None,
        )

    async def make_app(self) -> Application:
        app = Application()

        async def on_startup(_: Application) -> None:
            await self._on_startup()
        app.on_startup.append(on_startup)

        async def on_shutdown(_: Application) -> None:
            await self._on_shutdown()
        app.on_shutdown.append(on_shutdown)

        for exposed in _get_exposed_rpc(self):
            app.router.add_post(f"{self.__prefix}/{exposed.name}", self.__make_route(exposed))
        return app

    def __make_route(self, exposed: RpcExposed) -> Callable[[Request], Awaitable[Response]]:
        async def route(request: Request) -> Response:
            try:
                body = await read_json_request(request)
                return make_json_response(await exposed.handler(body))
            except ValidatorError as err:
                return make_json_exception(err, 400)
            except HttpError as err:
                return make_json_exception(err)
            except Exception as err:
                get_logger(0).exception("Unhandled error in RPC method %r", exposed.name)
                return make_json_exception(InternalError(tools.efmt(err)))
        return route

    # =====

    async def _on_startup(self) -> None:
        pass

    async def _on_shutdown(self) -> None:
        pass
