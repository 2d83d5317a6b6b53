from roomsync.crud.user_crud import user_crud
from roomsync.crud.room_crud import room_crud
from roomsync.crud.message_crud import message_crud

__all__ = [
    "user_crud",
    "room_crud",
    "message_crud",
]
