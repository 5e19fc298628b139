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


from typing import Any

import pytest

from metalagent.validators import ValidatorError
from metalagent.validators.net import valid_ip
from metalagent.validators.net import valid_hostname
from metalagent.validators.net import valid_port
from metalagent.validators.net import valid_host_port


# =====
@pytest.mark.parametrize("arg, retval", [
    ("127.0.0.1 ",               "127.0.0.1"),
    ("::1",                      "::1"),
    ("2001:0db8:0000::0001",     "2001:db8::1"),
])
def test_ok__valid_ip(arg: Any, retval: str) -> None:
    assert valid_ip(arg) == retval


@pytest.mark.parametrize("arg", ["foobar", "1.1.1.", "256.1.1.1", "", None])
def test_fail__valid_ip(arg: Any) -> None:
    with pytest.raises(ValidatorError):
        print(valid_ip(arg))


# =====
@pytest.mark.parametrize("arg", ["localhost", "foo-bar.ru", "a.b.c", "x" * 63 + ".example.com"])
def test_ok__valid_hostname(arg: Any) -> None:
    assert valid_hostname(arg) == arg


@pytest.mark.parametrize("arg", ["foo_bar", "-foo", "foo-.bar", "a..b", "x" * 64 + ".example.com", "", None])
def test_fail__valid_hostname(arg: Any) -> None:
    with pytest.raises(ValidatorError):
        print(valid_hostname(arg))


# =====
@pytest.mark.parametrize("arg", ["1 ", 1, "22", 443, 65535])
def test_ok__valid_port(arg: Any) -> None:
    assert valid_port(arg) == int(str(arg).strip())


@pytest.mark.parametrize("arg", ["test", "", None, 1.1, 0, -1, 65536])
def test_fail__valid_port(arg: Any) -> None:
    with pytest.raises(ValidatorError):
        print(valid_port(arg))


# =====
@pytest.mark.parametrize("arg, retval", [
    ("",                      ""),
    ("  ",                    ""),
    ("10.5.0.1:8090",         "10.5.0.1:8090"),
    (" omni.example.com:443", "omni.example.com:443"),
    ("[2001:db8::1]:8090",    "[2001:db8::1]:8090"),
    ("[2001:db8:0::1]:8090",  "[2001:db8::1]:8090"),
])
def test_ok__valid_host_port(arg: Any, retval: str) -> None:
    assert valid_host_port(arg) == retval


@pytest.mark.parametrize("arg", [
    None,
    "10.5.0.1",
    "10.5.0.1:",
    ":8090",
    "host:port",
    "[foo]:8090",
    "2001:db8::1:8090",
    "10.5.0.1:0",
    "10.5.0.1:70000",
    "foo_bar:8090",
])
def test_fail__valid_host_port(arg: Any) -> None:
    with pytest.raises(ValidatorError):
        print(valid_host_port(arg))
