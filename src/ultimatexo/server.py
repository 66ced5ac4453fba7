"""FastAPI app serving UltimateXO rooms over a websocket."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import Settings
from .coordinator import Outbound, SessionCoordinator
from .errors import BadRequestError, GameError, RoomNotFoundError
from .rooms import RoomRegistry, normalize_room_id

logger = logging.getLogger(__name__)


class RoomRequest(BaseModel):
    """Payload naming an existing room."""

    model_config = ConfigDict(populate_by_name=True)

    room_code: str = Field(alias="roomCode", min_length=1)


class Position(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Range checks belong to the move rules so that they surface as IllegalMove.
    small_board: int = Field(alias="smallBoard")
    row: int
    cell: int


class MoveRequest(RoomRequest):
    """Payload for submitting a move in a room."""

    position: Position


class ConnectionManager:
    """Live sockets by connection id plus one asyncio lock per room."""

    def __init__(self) -> None:
        self._sockets: Dict[str, WebSocket] = {}
        self._room_locks: Dict[str, asyncio.Lock] = {}

    def register(self, websocket: WebSocket) -> str:
        connection_id = uuid.uuid4().hex
        self._sockets[connection_id] = websocket
        return connection_id

    def unregister(self, connection_id: str) -> None:
        self._sockets.pop(connection_id, None)

    def room_lock(self, room_id: str) -> asyncio.Lock:
        return self._room_locks.setdefault(normalize_room_id(room_id), asyncio.Lock())

    def release_room(self, room_id: str) -> None:
        self._room_locks.pop(normalize_room_id(room_id), None)

    async def send(self, connection_id: str, message: Dict[str, object]) -> None:
        websocket = self._sockets.get(connection_id)
        if websocket is None:
            return
        try:
            await websocket.send_json(message)
        except RuntimeError:
            # Socket already closed; its own handler cleans up.
            logger.debug("Dropped %s for closed connection %s", message.get("type"), connection_id)

    async def dispatch(self, outbound: Iterable[Outbound]) -> None:
        for item in outbound:
            message = item.to_message()
            for connection_id in item.targets:
                await self.send(connection_id, message)


def _parse(model: type[BaseModel], message: Dict[str, object]) -> BaseModel:
    try:
        return model.model_validate(message)
    except ValidationError as exc:
        raise BadRequestError(f"Invalid {message.get('type')} payload") from exc


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    registry = RoomRegistry(code_length=settings.room_code_length, tie_rule=settings.tie_rule)
    coordinator = SessionCoordinator(registry)
    manager = ConnectionManager()

    app = FastAPI(title="UltimateXO", description="Ultimate tic-tac-toe rooms for two players")
    app.state.settings = settings
    app.state.registry = registry
    app.state.coordinator = coordinator
    app.state.connections = manager

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    async def in_room(room_id: str, action: Callable[[], List[Outbound]]) -> None:
        # Locks exist only for live rooms; unknown codes never allocate one.
        if room_id not in registry:
            raise RoomNotFoundError()
        try:
            async with manager.room_lock(room_id):
                await manager.dispatch(action())
        finally:
            if room_id not in registry:
                manager.release_room(room_id)

    async def handle_create(connection_id: str, message: Dict[str, object]) -> None:
        await manager.dispatch(coordinator.create_room(connection_id))

    async def handle_join(connection_id: str, message: Dict[str, object]) -> None:
        request = _parse(RoomRequest, message)
        await in_room(
            request.room_code, lambda: coordinator.join_room(connection_id, request.room_code)
        )

    async def handle_move(connection_id: str, message: Dict[str, object]) -> None:
        request = _parse(MoveRequest, message)
        position = request.position
        await in_room(
            request.room_code,
            lambda: coordinator.make_move(
                connection_id, request.room_code, position.small_board, position.row, position.cell
            ),
        )

    async def handle_restart(connection_id: str, message: Dict[str, object]) -> None:
        request = _parse(RoomRequest, message)
        await in_room(
            request.room_code, lambda: coordinator.restart_game(connection_id, request.room_code)
        )

    handlers: Dict[str, Callable[[str, Dict[str, object]], Awaitable[None]]] = {
        "create-room": handle_create,
        "join-room": handle_join,
        "make-move": handle_move,
        "restart-game": handle_restart,
    }

    async def handle_frame(connection_id: str, raw: str) -> None:
        try:
            try:
                message = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise BadRequestError("Frames must be JSON objects") from exc
            if not isinstance(message, dict):
                raise BadRequestError("Frames must be JSON objects")
            message_type = message.get("type")
            handler = handlers.get(message_type) if isinstance(message_type, str) else None
            if handler is None:
                raise BadRequestError(f"Unknown message type {message_type!r}")
            await handler(connection_id, message)
        except BadRequestError as exc:
            logger.warning("Bad frame from %s: %s", connection_id, exc.message)
            await manager.send(connection_id, {"type": "error", **exc.to_payload()})
        except GameError as exc:
            await manager.send(connection_id, {"type": "error", **exc.to_payload()})

    async def handle_disconnect(connection_id: str) -> None:
        room_id = coordinator.room_of(connection_id)
        if room_id is None:
            return
        async with manager.room_lock(room_id):
            await manager.dispatch(coordinator.disconnect(connection_id))
        manager.release_room(room_id)

    @app.websocket("/ws")
    async def play(websocket: WebSocket) -> None:
        await websocket.accept()
        connection_id = manager.register(websocket)
        logger.info("Connection %s opened", connection_id)
        try:
            while True:
                raw = await websocket.receive_text()
                await handle_frame(connection_id, raw)
        except WebSocketDisconnect:
            pass
        finally:
            logger.info("Connection %s closed", connection_id)
            try:
                await handle_disconnect(connection_id)
            finally:
                manager.unregister(connection_id)

    @app.get("/api/room/{room_id}")
    def inspect_room(room_id: str) -> Dict[str, object]:
        try:
            room = registry.get_room(room_id)
        except RoomNotFoundError as exc:
            raise HTTPException(status_code=404, detail=exc.message) from exc
        with room.lock:
            return {
                "roomId": room.room_id,
                "seats": len(room.seats),
                "available": not room.is_full,
                "gameOver": room.game.game_over,
            }

    return app


app = create_app()
