"""Errors reported back to the connection that caused them."""

from __future__ import annotations


class GameError(Exception):
    """Base class for rejected requests.

    ``code`` is stable and sent to clients; ``message`` is for humans.
    """

    code = "GameError"
    message = "Request rejected"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_payload(self) -> dict:
        return {"code": self.code, "message": self.message}


class RoomNotFoundError(GameError):
    code = "RoomNotFound"
    message = "Room not found!"


class RoomFullError(GameError):
    code = "RoomFull"
    message = "Room is full!"


class PlayerNotSeatedError(GameError):
    code = "PlayerNotSeated"
    message = "Player not found!"


class NotYourTurnError(GameError):
    code = "NotYourTurn"
    message = "Not your turn!"


class IllegalMoveError(GameError):
    code = "IllegalMove"
    message = "Invalid move!"


class GameNotStartedError(GameError):
    code = "GameNotStarted"
    message = "Waiting for an opponent to join"


class GameNotOverError(GameError):
    code = "GameNotOver"
    message = "Game is still in progress"


class AlreadySeatedError(GameError):
    code = "AlreadySeated"
    message = "Connection already holds a seat"


class BadRequestError(GameError):
    code = "BadRequest"
    message = "Malformed request"
