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


import shlex

from .logging import get_logger


# =====
KARG_PROVIDER_ADDRESS = "metal.provider.address"
KARG_TEST_MODE = "metal.provider.test.mode"

_TRUE_WORDS = frozenset(["1", "t", "true", "y", "yes", "on"])
_FALSE_WORDS = frozenset(["0", "f", "false", "n", "no", "off"])


# =====
def parse_cmdline(text: str) -> dict[str, str]:
    """
    Parses the kernel command line into a dict. The last occurrence
    of an argument wins, flags without a value are mapped to an empty string.
    """

    try:
        items = shlex.split(text)
    except ValueError as err:
        # The kernel accepts an unbalanced quote, so do we
        get_logger(0).error("Can't parse the kernel cmdline: %s; splitting it by whitespaces", err)
        items = [item.replace("\"", "") for item in text.split()]

    kargs: dict[str, str] = {}
    for item in items:
        (key, _, value) = item.partition("=")
        kargs[key] = value
    return kargs


def read_cmdline(path: str="/proc/cmdline") -> dict[str, str]:
    with open(path) as file:
        return parse_cmdline(file.read())


def parse_kernel_bool(value: str) -> bool:
    word = value.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def get_agent_overrides(kargs: dict[str, str]) -> dict:
    logger = get_logger(0)
    overrides: dict = {}
    if KARG_PROVIDER_ADDRESS in kargs:
        overrides["provider_address"] = kargs[KARG_PROVIDER_ADDRESS]
    if KARG_TEST_MODE in kargs:
        try:
            overrides["test_mode"] = parse_kernel_bool(kargs[KARG_TEST_MODE])
        except ValueError:
            logger.error("Ignoring invalid kernel argument %s=%r", KARG_TEST_MODE, kargs[KARG_TEST_MODE])
    return overrides
