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


import aiohttp

from . import __version__


# =====
def make_user_agent(app: str) -> str:
    return f"{app}/{__version__}"


async def read_error_envelope(response: aiohttp.ClientResponse) -> tuple[str, str]:
    # Errors of the local control plane use the same envelope as our own API
    try:
        result = (await response.json(content_type=None))["result"]
        return (str(result["error"]), str(result["error_msg"]))
    except Exception:
        return ("HttpError", (response.reason or f"HTTP {response.status}"))
