"""In-memory room registry: room codes, seats and the games they own."""

from __future__ import annotations

import logging
import random
import string
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .board import PLAYER_MARKS, Mark
from .errors import RoomFullError, RoomNotFoundError
from .game import Game, TieRule

logger = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
ROOM_CODE_LENGTH = 5
MAX_SEATS = len(PLAYER_MARKS)


def normalize_room_id(room_id: str) -> str:
    return room_id.strip().upper()


@dataclass(frozen=True)
class Seat:
    connection_id: str
    mark: Mark


@dataclass
class Room:
    """A room code bound to one game and at most two seated connections."""

    room_id: str
    game: Game
    seats: List[Seat] = field(default_factory=list)
    created_at: float = field(default_factory=lambda: time.time())
    closed: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def is_full(self) -> bool:
        return len(self.seats) >= MAX_SEATS

    @property
    def connection_ids(self) -> Tuple[str, ...]:
        return tuple(seat.connection_id for seat in self.seats)

    def mark_of(self, connection_id: str) -> Optional[Mark]:
        for seat in self.seats:
            if seat.connection_id == connection_id:
                return seat.mark
        return None


class RoomRegistry:
    """Owns every room and therefore every game.

    The map of rooms is guarded by the registry lock; a room's seats and
    game are guarded by that room's own lock.
    """

    def __init__(
        self,
        code_length: int = ROOM_CODE_LENGTH,
        tie_rule: TieRule = TieRule.WINNER_BOARD_FULL,
        rng: Optional[random.Random] = None,
    ) -> None:
        if code_length < 1:
            raise ValueError("Room codes need at least one character")
        self.code_length = code_length
        self.tie_rule = tie_rule
        self._rng = rng or random.Random()
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, room_id: str) -> bool:
        with self._lock:
            return normalize_room_id(room_id) in self._rooms

    def _generate_room_code(self) -> str:
        return "".join(self._rng.choices(ROOM_CODE_ALPHABET, k=self.code_length))

    def create_room(self) -> str:
        for _ in range(10):
            room_id = self._generate_room_code()
            with self._lock:
                if room_id not in self._rooms:
                    self._rooms[room_id] = Room(
                        room_id=room_id, game=Game(tie_rule=self.tie_rule)
                    )
                    break
        else:
            raise RuntimeError("Unable to allocate room")
        logger.info("Room %s created", room_id)
        return room_id

    def get_room(self, room_id: str) -> Room:
        with self._lock:
            room = self._rooms.get(normalize_room_id(room_id))
        if room is None:
            raise RoomNotFoundError()
        return room

    def get_game(self, room_id: str) -> Game:
        return self.get_room(room_id).game

    def add_seat(self, room_id: str, connection_id: str) -> Mark:
        room = self.get_room(room_id)
        with room.lock:
            if room.closed:
                raise RoomNotFoundError()
            if room.is_full:
                raise RoomFullError()
            mark = PLAYER_MARKS[len(room.seats)]
            room.seats.append(Seat(connection_id=connection_id, mark=mark))
        logger.info("Connection %s seated as %s in room %s", connection_id, mark.value, room.room_id)
        return mark

    def remove_connection(self, room_id: str, connection_id: str) -> Optional[Room]:
        """Tear the room down if ``connection_id`` holds a seat in it.

        Returns the removed room so the remaining seat can be told, or
        ``None`` when nothing was removed.
        """

        normalized = normalize_room_id(room_id)
        with self._lock:
            room = self._rooms.get(normalized)
            if room is None or room.mark_of(connection_id) is None:
                return None
            del self._rooms[normalized]
        with room.lock:
            room.closed = True
        logger.info("Room %s torn down after %s left", normalized, connection_id)
        return room
