"""Session coordination: connections, seats and the messages they produce.

The coordinator never talks to sockets. Each operation returns the
:class:`Outbound` messages the transport has to deliver, or raises a
:class:`~ultimatexo.errors.GameError` meant for the calling connection only.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .board import Mark
from .errors import (
    AlreadySeatedError,
    GameNotStartedError,
    IllegalMoveError,
    NotYourTurnError,
    PlayerNotSeatedError,
    RoomNotFoundError,
)
from .rooms import Room, RoomRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outbound:
    event: str
    payload: Dict[str, object]
    targets: Tuple[str, ...]

    def to_message(self) -> Dict[str, object]:
        return {"type": self.event, **self.payload}


def _room_state(room: Room) -> Dict[str, object]:
    return {"roomCode": room.room_id, **room.game.snapshot()}


class SessionCoordinator:
    def __init__(self, registry: RoomRegistry) -> None:
        self.registry = registry
        self._connections: Dict[str, str] = {}
        self._lock = threading.Lock()

    def room_of(self, connection_id: str) -> Optional[str]:
        with self._lock:
            return self._connections.get(connection_id)

    def _ensure_unseated(self, connection_id: str) -> None:
        if self.room_of(connection_id) is not None:
            raise AlreadySeatedError()

    def _seated_room(self, connection_id: str, room_id: str) -> Tuple[Room, Mark]:
        room = self.registry.get_room(room_id)
        mark = room.mark_of(connection_id)
        if mark is None:
            raise PlayerNotSeatedError()
        return room, mark

    # ---- intents ----

    def create_room(self, connection_id: str) -> List[Outbound]:
        self._ensure_unseated(connection_id)
        room_id = self.registry.create_room()
        mark = self.registry.add_seat(room_id, connection_id)
        with self._lock:
            self._connections[connection_id] = room_id
        room = self.registry.get_room(room_id)
        with room.lock:
            payload = {**_room_state(room), "player": mark.value}
        return [Outbound("room-created", payload, (connection_id,))]

    def join_room(self, connection_id: str, room_id: str) -> List[Outbound]:
        self._ensure_unseated(connection_id)
        room = self.registry.get_room(room_id)
        self.registry.add_seat(room.room_id, connection_id)
        with self._lock:
            self._connections[connection_id] = room.room_id
        with room.lock:
            if room.closed:
                raise RoomNotFoundError()
            state = _room_state(room)
            return [
                Outbound("start-game", {**state, "player": seat.mark.value}, (seat.connection_id,))
                for seat in room.seats
            ]

    def make_move(
        self, connection_id: str, room_id: str, small_board_index: int, row: int, col: int
    ) -> List[Outbound]:
        room, mark = self._seated_room(connection_id, room_id)
        with room.lock:
            if room.closed:
                raise RoomNotFoundError()
            if not room.is_full:
                raise GameNotStartedError()
            game = room.game
            if game.game_over:
                raise IllegalMoveError("Game is over")
            if mark is not game.current_turn:
                raise NotYourTurnError()
            if not game.is_legal(mark, small_board_index, row, col):
                raise IllegalMoveError()
            game.apply_move(mark, small_board_index, row, col)
            if game.game_over:
                logger.info(
                    "Room %s finished: %s",
                    room.room_id,
                    f"{game.winner.value} wins" if game.winner else "tie",
                )
            return [Outbound("move-made", _room_state(room), room.connection_ids)]

    def restart_game(self, connection_id: str, room_id: str) -> List[Outbound]:
        room, _ = self._seated_room(connection_id, room_id)
        with room.lock:
            if room.closed:
                raise RoomNotFoundError()
            room.game.restart()
            logger.info("Room %s restarted by %s", room.room_id, connection_id)
            return [Outbound("game-restarted", _room_state(room), room.connection_ids)]

    def disconnect(self, connection_id: str) -> List[Outbound]:
        with self._lock:
            room_id = self._connections.pop(connection_id, None)
        if room_id is None:
            return []
        room = self.registry.remove_connection(room_id, connection_id)
        if room is None:
            return []
        survivors = tuple(cid for cid in room.connection_ids if cid != connection_id)
        with self._lock:
            for cid in survivors:
                self._connections.pop(cid, None)
        if not survivors:
            return []
        with room.lock:
            payload = _room_state(room)
        return [Outbound("player-disconnected", payload, survivors)]
