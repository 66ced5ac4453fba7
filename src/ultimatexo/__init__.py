"""UltimateXO package exposing the rules engine, rooms and the web application."""

from .board import Mark
from .coordinator import Outbound, SessionCoordinator
from .game import Game, GameStatus, TieRule
from .rooms import RoomRegistry
from .server import app, create_app

__all__ = [
    "Game",
    "GameStatus",
    "Mark",
    "Outbound",
    "RoomRegistry",
    "SessionCoordinator",
    "TieRule",
    "app",
    "create_app",
]
