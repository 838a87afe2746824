"""Search kinds and backlog message types.

Bit values match the Quassel core's Message::Type enum and must not change.
"""

from enum import IntEnum, IntFlag


class SearchKind(IntEnum):
    """Keys of the criteria mapping passed to QuasselDB.search()"""
    STRING = 1
    SENDER = 2
    DATE = 3


class BacklogType(IntFlag):
    """Backlog entry types as stored in backlog.type"""
    PLAIN = 0x00001
    NOTICE = 0x00002
    ACTION = 0x00004
    NICK = 0x00008
    MODE = 0x00010
    JOIN = 0x00020
    PART = 0x00040
    QUIT = 0x00080
    KICK = 0x00100
    KILL = 0x00200
    SERVER = 0x00400
    INFO = 0x00800
    ERROR = 0x01000
    DAY_CHANGE = 0x02000
    TOPIC = 0x04000
    NETSPLIT_JOIN = 0x08000
    NETSPLIT_QUIT = 0x10000
    INVITE = 0x20000


ALL_TYPES = tuple(int(t) for t in BacklogType)
