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


import functools

from ...ipmi.local import LocalBmcChannel

from ...clients.machined import MachinedClient

from ... import htclient

from .. import init

from .service import AgentService
from .tunnel import TunnelRunner
from .server import AgentServer


# =====
def main(argv: (list[str] | None)=None) -> None:
    config = init(
        prog="metal-agent",
        description="The bare-metal host agent",
        check_run=True,
        agent_flags=True,
        read_kernel_cmdline=True,
        argv=argv,
    )[2]

    AgentServer(
        service=AgentService(
            make_channel=functools.partial(LocalBmcChannel, config.agent.ipmi.device),
            machined=MachinedClient(
                user_agent=htclient.make_user_agent("metal-agent"),
                **config.machined._unpack(),
            ),
            test_mode=config.agent.test_mode,
            lan_channel=config.agent.ipmi.channel,
            wait_timeout=config.agent.wait_timeout,
        ),
        tunnel=TunnelRunner(
            provider_address=config.agent.provider_address,
            unix_path=config.agent.server.unix,
            **config.agent.tunnel._unpack(),
        ),
        machine_id_retry_delay=5.0,
    ).run(**config.agent.server._unpack())
