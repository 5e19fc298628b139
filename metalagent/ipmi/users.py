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


import dataclasses
import enum

from ..logging import get_logger

from .. import tools

from . import NETFN_APP
from . import CMD_SET_USER_ACCESS
from . import CMD_GET_USER_ACCESS
from . import CMD_SET_USER_NAME
from . import CMD_GET_USER_NAME
from . import CMD_SET_USER_PASSWORD
from . import BmcError
from . import BaseBmcChannel


# =====
RESERVED_UID = 1  # Always the unnamed default admin, never touch it

_EMPTY_USER = "(Empty User)"

_PASSWD_OP_ENABLE = 0x01
_PASSWD_OP_SET = 0x02

_FIELD_LEN = 16


# =====
class NoSlotAvailableError(BmcError):
    def __init__(self, user: str) -> None:
        super().__init__(f"No slot available for user {user!r}")


class UserSetupError(BmcError):
    def __init__(self, step: str, uid: int, err: Exception) -> None:
        super().__init__(f"Can't {step} for user slot {uid}: {tools.efmt(err)}")


# =====
class SlotState(enum.Enum):
    OCCUPIED = "occupied"
    EMPTY = "empty"
    UNRESOLVABLE = "unresolvable"  # The query has failed, the slot may be unused


@dataclasses.dataclass(frozen=True)
class UserSlot:
    uid: int
    username: str
    state: SlotState


# =====
class BmcUsers:
    def __init__(self, channel: BaseBmcChannel, lan_channel: int=1) -> None:
        self.__channel = channel
        self.__lan_channel = lan_channel

    def get_max_users(self) -> int:
        data = self.__channel.send(NETFN_APP, CMD_GET_USER_ACCESS, bytes([self.__lan_channel, RESERVED_UID]))
        if len(data) < 1:
            raise BmcError("Empty user summary response")
        return (data[0] & 0x1F)  # Only bits [4:0] provide this number

    def read_slot(self, uid: int) -> UserSlot:
        # Firmwares differ here: an unused slot may fail the query,
        # or it may answer with an empty or a "(Empty User)" name.
        try:
            data = self.__channel.send(NETFN_APP, CMD_GET_USER_NAME, bytes([uid]))
        except BmcError as err:
            get_logger(0).debug("Can't read user slot %d: %s", uid, tools.efmt(err))
            return UserSlot(uid, "", SlotState.UNRESOLVABLE)
        username = data[:_FIELD_LEN].rstrip(b"\x00").decode("ascii", errors="replace")
        if username == "" or username.strip() == _EMPTY_USER:
            return UserSlot(uid, username, SlotState.EMPTY)
        return UserSlot(uid, username, SlotState.OCCUPIED)

    # =====

    def ensure_account(self, user: str, passwd: str) -> int:
        """
        Makes sure that the user exists, is enabled, has the password and the admin privilege.
        An existing slot with the same name is always preferred to an unused one,
        even if the unused one has a lower number. Returns the slot number.
        """

        logger = get_logger(0)
        max_users = self.get_max_users()

        target: (UserSlot | None) = None
        for uid in range(RESERVED_UID + 1, max_users + 1):
            slot = self.read_slot(uid)
            if slot.state == SlotState.OCCUPIED:
                if slot.username == user:
                    logger.info("User %r is already present in slot %d, claiming it", user, uid)
                    target = slot
                    break
            elif target is None:
                logger.info("Found a possibly free slot %d (%s), noting it for user %r",
                            uid, slot.state.value, user)
                target = slot

        if target is None:
            raise NoSlotAvailableError(user)

        if target.state != SlotState.OCCUPIED:
            logger.info("Adding user %r to slot %d ...", user, target.uid)
            self.__run_step("set username", target.uid, CMD_SET_USER_NAME, bytes([target.uid]) + _pack_field(user))

        self.__run_step("set password", target.uid, CMD_SET_USER_PASSWORD,
                        bytes([target.uid, _PASSWD_OP_SET]) + _pack_field(passwd))

        # 0x90 = enable changing bits, IPMI messaging; limits 0x04 = administrator; no session limit
        access = (0x90 | (self.__lan_channel & 0x0F))
        self.__run_step("set access", target.uid, CMD_SET_USER_ACCESS,
                        bytes([access, target.uid & 0x3F, 0x04, 0x00]))

        self.__run_step("enable user", target.uid, CMD_SET_USER_PASSWORD,
                        bytes([target.uid, _PASSWD_OP_ENABLE]))

        logger.info("User %r is ready in slot %d", user, target.uid)
        return target.uid

    def account_exists(self, user: str) -> bool:
        max_users = self.get_max_users()
        for uid in range(RESERVED_UID, max_users + 1):
            slot = self.read_slot(uid)
            if slot.state == SlotState.OCCUPIED and slot.username == user:
                return True
        return False

    def __run_step(self, step: str, uid: int, command: int, data: bytes) -> None:
        try:
            self.__channel.send(NETFN_APP, command, data)
        except BmcError as err:
            raise UserSetupError(step, uid, err)


def _pack_field(text: str) -> bytes:
    raw = text.encode("ascii")
    if len(raw) > _FIELD_LEN:
        raise ValueError(f"Too long IPMI field: max={_FIELD_LEN} bytes")
    return raw.ljust(_FIELD_LEN, b"\x00")
