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

from . import check_re_match
from . import check_len

from .basic import valid_number


# =====
def valid_bmc_user(arg: Any, allow_empty: bool=False) -> str:
    name = "BMC username"
    pattern = (r"^[\x21-\x7e]*\Z" if allow_empty else r"^[\x21-\x7e]+\Z")
    arg = check_re_match(arg, name, pattern)
    return check_len(arg, name, 16)


def valid_bmc_passwd(arg: Any) -> str:
    name = "BMC password"
    arg = check_re_match(arg, name, r"^[\x20-\x7e]*\Z", strip=False, hide=True)
    return check_len(arg, name, 16, hide=True)


def valid_ipmi_channel(arg: Any) -> int:
    return int(valid_number(arg, min=1, max=15, name="IPMI channel"))
