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
import pathlib

import pytest

from metalagent.apps.agent.tunnel import TunnelRunner


# =====
def test_ok__make_cmd() -> None:
    runner = TunnelRunner(
        cmd=["/usr/bin/metal-tunnel", "--provider={provider_address}", "--id={machine_id}", "--target=unix:{unix_path}"],
        restart_delay=1.0,
        provider_address="10.5.0.1:8090",
        unix_path="/run/metal-agent/agent.sock",
    )
    assert runner.is_enabled()
    assert runner.make_cmd("9f8e7d6c") == [
        "/usr/bin/metal-tunnel",
        "--provider=10.5.0.1:8090",
        "--id=9f8e7d6c",
        "--target=unix:/run/metal-agent/agent.sock",
    ]


@pytest.mark.asyncio
async def test_ok__disabled() -> None:
    runner = TunnelRunner(["/nonexistent"], 0.1, "", "/run/metal-agent/agent.sock")
    assert not runner.is_enabled()
    await runner.start("9f8e7d6c")
    await runner.stop()


@pytest.mark.asyncio
async def test_ok__restart(tmp_path: pathlib.Path) -> None:
    log_path = tmp_path / "starts.log"
    runner = TunnelRunner(
        cmd=["/bin/sh", "-c", f"echo {{machine_id}} >> {log_path}"],
        restart_delay=0.1,
        provider_address="10.5.0.1:8090",
        unix_path="/run/metal-agent/agent.sock",
    )
    await runner.start("9f8e7d6c")
    await asyncio.sleep(1.0)
    await runner.stop()
    starts = log_path.read_text().split()
    assert len(starts) >= 2
    assert set(starts) == {"9f8e7d6c"}


@pytest.mark.asyncio
async def test_ok__stop_running() -> None:
    runner = TunnelRunner(
        cmd=["/bin/sh", "-c", "echo {machine_id}; exec sleep 30"],
        restart_delay=0.1,
        provider_address="10.5.0.1:8090",
        unix_path="/run/metal-agent/agent.sock",
    )
    await runner.start("9f8e7d6c")
    await asyncio.sleep(0.3)
    await asyncio.wait_for(runner.stop(), timeout=10)
