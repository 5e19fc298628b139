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
import textwrap

from typing import Any

import yaml
import pytest

from metalagent.yamlconf import ConfigError
from metalagent.yamlconf import Option
from metalagent.yamlconf import make_config
from metalagent.yamlconf import build_raw_from_options
from metalagent.yamlconf.loader import load_yaml_file
from metalagent.yamlconf.dumper import make_config_dump

from metalagent.validators.basic import valid_bool
from metalagent.validators.basic import valid_float_f0


# =====
def test_load_yaml_file__bools(tmp_path: pathlib.Path) -> None:  # type: ignore
    pobj = tmp_path / "test.yaml"
    pobj.write_text(textwrap.dedent("""
        a: true
        b: false
        c: yes
        d: no
    """))
    data = load_yaml_file(str(pobj))
    assert data["a"] is True
    assert data["b"] is False
    assert data["c"] == "yes"
    assert data["d"] == "no"


def test_load_yaml_file__global_loader_is_intact(tmp_path: pathlib.Path) -> None:  # type: ignore
    pobj = tmp_path / "test.yaml"
    pobj.write_text("a: yes\n")
    assert load_yaml_file(str(pobj)) == {"a": "yes"}
    assert yaml.safe_load("a: yes") == {"a": True}


def test_load_yaml_file__empty(tmp_path: pathlib.Path) -> None:  # type: ignore
    pobj = tmp_path / "test.yaml"
    pobj.write_text("# Nothing here\n")
    assert load_yaml_file(str(pobj)) == {}


def test_load_yaml_file__invalid(tmp_path: pathlib.Path) -> None:  # type: ignore
    pobj = tmp_path / "test.yaml"
    pobj.write_text("a: [1, 2")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_yaml_file(str(pobj))


def test_load_yaml_file__not_a_mapping(tmp_path: pathlib.Path) -> None:  # type: ignore
    pobj = tmp_path / "test.yaml"
    pobj.write_text("- agent\n- machined\n")
    with pytest.raises(ValueError, match="must be a mapping"):
        load_yaml_file(str(pobj))


# =====
@pytest.mark.parametrize("options, raw", [
    ([],                              {}),
    (["agent/test_mode=true"],        {"agent": {"test_mode": True}}),
    (["agent/wait_timeout=10"],       {"agent": {"wait_timeout": 10}}),
    (["agent/ipmi/device=/dev/ipmi1"], {"agent": {"ipmi": {"device": "/dev/ipmi1"}}}),
    (["a/b=[1, 2]", "a/c=null"],      {"a": {"b": [1, 2], "c": None}}),
    (["agent/server/unix_mode=0660"], {"agent": {"server": {"unix_mode": "0660"}}}),
    (["agent/tunnel/cmd=/bin/true"], {"agent": {"tunnel": {"cmd": "/bin/true"}}}),
])
def test_ok__build_raw_from_options(options: list[str], raw: dict) -> None:
    assert build_raw_from_options(options) == raw


@pytest.mark.parametrize("options", [["=1"], ["agent/test_mode"], ["a/b=[1, 2"]])
def test_fail__build_raw_from_options(options: list[str]) -> None:
    with pytest.raises(ConfigError):
        build_raw_from_options(options)


# =====
def _make_scheme() -> dict:
    return {
        "agent": {
            "test_mode":    Option(False, type=valid_bool),
            "wait_timeout": Option(0.0, type=valid_float_f0, help="Seconds"),
            "server": {
                "unix": Option("/run/agent.sock", unpack_as="unix_path"),
            },
        },
    }


def test_ok__make_config() -> None:
    config = make_config({"agent": {"test_mode": "yes"}}, _make_scheme())
    assert config.agent.test_mode is True
    assert config.agent.wait_timeout == 0.0
    assert config.agent.server.unix == "/run/agent.sock"
    assert config.agent.server._unpack() == {"unix_path": "/run/agent.sock"}  # pylint: disable=protected-access
    assert config.agent._unpack(ignore=["server"]) == {  # pylint: disable=protected-access
        "test_mode": True,
        "wait_timeout": 0.0,
    }


@pytest.mark.parametrize("raw", [
    {"agent": {"test_mode": "maybe"}},
    {"agent": {"wait_timeout": -1}},
    {"agent": []},
    {"agent": {"tes_mode": True}},
    {"agnet": {}},
])
def test_fail__make_config(raw: Any) -> None:
    with pytest.raises(ConfigError):
        make_config(raw, _make_scheme())


# =====
def test_ok__make_config_dump() -> None:
    config = make_config({"agent": {"wait_timeout": 5}}, _make_scheme())
    assert make_config_dump(config).split("\n") == [
        "agent:",
        "    server:",
        "        unix: /run/agent.sock",
        "",
        "    test_mode: false",
        "    wait_timeout: 5.0  # default: 0.0  # Seconds",
        "",
    ]
