from roomsync.model.user import UserPublic, UserRecord
from roomsync.model.room import Membership, RoomRecord
from roomsync.model.message import MessageRecord

__all__ = ["UserPublic", "UserRecord", "Membership", "RoomRecord", "MessageRecord"]
