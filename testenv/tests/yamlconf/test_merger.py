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


import pytest

from metalagent.yamlconf import merger


# =====
def test_ok__merge__override() -> None:
    base = {"agent": {"test_mode": False, "provider_address": ""}, "logging": {}}
    merger.yaml_merge(base, {"agent": {"test_mode": True}})
    assert base == {"agent": {"test_mode": True, "provider_address": ""}, "logging": {}}


def test_ok__merge__new_keys() -> None:
    base: dict = {"agent": {"test_mode": False}}
    merger.yaml_merge(base, {"agent": {"ipmi": {"channel": 2}}, "machined": {"timeout": 5}})
    assert base == {
        "agent": {"test_mode": False, "ipmi": {"channel": 2}},
        "machined": {"timeout": 5},
    }


def test_ok__merge__replace_non_dict() -> None:
    base = {"agent": {"tunnel": {"cmd": ["/bin/a"]}}, "logging": {"version": 1}}
    merger.yaml_merge(base, {"agent": {"tunnel": {"cmd": ["/bin/b", "-v"]}}, "logging": None})
    assert base == {"agent": {"tunnel": {"cmd": ["/bin/b", "-v"]}}, "logging": None}


def test_ok__merge__src_none_or_empty() -> None:
    base = {"key": "value"}
    merger.yaml_merge(base, None)
    merger.yaml_merge(base, {})
    assert base == {"key": "value"}


def test_fail__merge__dest_none() -> None:
    with pytest.raises(ValueError, match="destination cannot be None"):
        merger.yaml_merge(None, {"key": "value"}, "kernel cmdline")  # type: ignore[arg-type]
