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


import pathlib

import pytest

from metalagent.cmdline import parse_cmdline
from metalagent.cmdline import read_cmdline
from metalagent.cmdline import parse_kernel_bool
from metalagent.cmdline import get_agent_overrides


# =====
def test_ok__parse_cmdline() -> None:
    kargs = parse_cmdline(
        "BOOT_IMAGE=/vmlinuz root=/dev/sda1 ro quiet"
        " metal.provider.address=10.5.0.1:8090 console=tty0 console=ttyS0,115200"
        " init_args=\"a b\"\n"
    )
    assert kargs["BOOT_IMAGE"] == "/vmlinuz"
    assert kargs["ro"] == ""
    assert kargs["metal.provider.address"] == "10.5.0.1:8090"
    assert kargs["console"] == "ttyS0,115200"
    assert kargs["init_args"] == "a b"


def test_ok__parse_cmdline__unbalanced_quote() -> None:
    kargs = parse_cmdline("console=ttyS0 foo=\"bar metal.provider.address=10.0.0.1:8090\n")
    assert kargs == {
        "console": "ttyS0",
        "foo": "bar",
        "metal.provider.address": "10.0.0.1:8090",
    }


def test_ok__read_cmdline__unbalanced_quote(tmp_path: pathlib.Path) -> None:
    path = tmp_path / "cmdline"
    path.write_text("quiet init_args=\"a b metal.provider.test.mode=yes\n")
    assert get_agent_overrides(read_cmdline(str(path))) == {"test_mode": True}


def test_ok__read_cmdline(tmp_path: pathlib.Path) -> None:
    path = tmp_path / "cmdline"
    path.write_text("quiet metal.provider.test.mode=1\n")
    assert read_cmdline(str(path)) == {"quiet": "", "metal.provider.test.mode": "1"}


# =====
@pytest.mark.parametrize("value, retval", [
    ("1",     True),
    ("true",  True),
    ("True",  True),
    ("t",     True),
    ("0",     False),
    ("false", False),
    ("FALSE", False),
    ("f",     False),
])
def test_ok__parse_kernel_bool(value: str, retval: bool) -> None:
    assert parse_kernel_bool(value) is retval


@pytest.mark.parametrize("value", ["", "maybe", "2", "yesno"])
def test_fail__parse_kernel_bool(value: str) -> None:
    with pytest.raises(ValueError):
        parse_kernel_bool(value)


# =====
def test_ok__get_agent_overrides() -> None:
    assert get_agent_overrides({}) == {}
    assert get_agent_overrides({"quiet": ""}) == {}
    assert get_agent_overrides({
        "metal.provider.address": "10.5.0.1:8090",
        "metal.provider.test.mode": "true",
    }) == {"provider_address": "10.5.0.1:8090", "test_mode": True}


def test_ok__get_agent_overrides__invalid_test_mode() -> None:
    assert get_agent_overrides({
        "metal.provider.address": "10.5.0.1:8090",
        "metal.provider.test.mode": "maybe",
    }) == {"provider_address": "10.5.0.1:8090"}
