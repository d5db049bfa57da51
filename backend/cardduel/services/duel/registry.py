import random
import string
from typing import Dict, Iterator, NamedTuple, Optional

from cardduel.models import MatchState


def generate_room_code(length=6):
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))


class Seat(NamedTuple):
    room_id: str
    player_index: int


class RoomRepository:
    """Live rooms keyed by generated room id."""

    def __init__(self, code_length: int = 6):
        self._rooms: Dict[str, MatchState] = {}
        self._code_length = code_length

    def new_id(self) -> str:
        """Generate a room id unique among live rooms."""
        while True:
            code = generate_room_code(self._code_length)
            if code not in self._rooms:
                return code

    def add(self, state: MatchState) -> MatchState:
        if state.room_id in self._rooms:
            raise KeyError(f'room {state.room_id} already exists')
        self._rooms[state.room_id] = state
        return state

    def get(self, room_id: str) -> Optional[MatchState]:
        return self._rooms.get(room_id)

    def delete(self, room_id: str) -> Optional[MatchState]:
        return self._rooms.pop(room_id, None)

    def __contains__(self, room_id) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def __iter__(self) -> Iterator[MatchState]:
        return iter(list(self._rooms.values()))


class SessionRegistry:
    """Maps a connection id to the seat it occupies."""

    def __init__(self):
        self._seats: Dict[str, Seat] = {}

    def bind(self, sid: str, room_id: str, player_index: int) -> Seat:
        seat = Seat(room_id, player_index)
        self._seats[sid] = seat
        return seat

    def get(self, sid: str) -> Optional[Seat]:
        return self._seats.get(sid)

    def release(self, sid: str) -> Optional[Seat]:
        return self._seats.pop(sid, None)

    def is_seated(self, sid: str) -> bool:
        return sid in self._seats
