"""Tests for the UltimateXO room registry."""

import random

import pytest

from ultimatexo.board import Mark
from ultimatexo.errors import RoomFullError, RoomNotFoundError
from ultimatexo.game import TieRule
from ultimatexo.rooms import ROOM_CODE_ALPHABET, RoomRegistry


def test_create_room_returns_fixed_length_code():
    registry = RoomRegistry(code_length=5)
    room_id = registry.create_room()
    assert len(room_id) == 5
    assert set(room_id) <= set(ROOM_CODE_ALPHABET)
    assert room_id in registry
    assert registry.get_room(room_id).seats == []


def test_room_codes_are_looked_up_case_insensitively():
    registry = RoomRegistry()
    room_id = registry.create_room()
    assert registry.get_room(f"  {room_id.lower()} ").room_id == room_id


def test_room_codes_stay_unique():
    registry = RoomRegistry(code_length=1, rng=random.Random(3))
    codes = {registry.create_room() for _ in range(5)}
    assert len(codes) == 5
    assert len(registry) == 5


def test_registry_gives_up_when_codes_run_out():
    registry = RoomRegistry(code_length=1, rng=random.Random(0))
    with pytest.raises(RuntimeError):
        for _ in range(len(ROOM_CODE_ALPHABET) + 1):
            registry.create_room()


def test_seats_get_x_then_o_and_third_is_rejected():
    registry = RoomRegistry()
    room_id = registry.create_room()
    assert registry.add_seat(room_id, "alice") is Mark.X
    assert registry.add_seat(room_id, "bob") is Mark.O
    with pytest.raises(RoomFullError):
        registry.add_seat(room_id, "carol")
    room = registry.get_room(room_id)
    assert room.is_full
    assert room.mark_of("bob") is Mark.O
    assert room.mark_of("carol") is None


def test_unknown_room_is_reported():
    registry = RoomRegistry()
    with pytest.raises(RoomNotFoundError):
        registry.get_game("NOPE1")
    with pytest.raises(RoomNotFoundError):
        registry.add_seat("NOPE1", "alice")


def test_removing_a_seated_connection_tears_room_down():
    registry = RoomRegistry()
    room_id = registry.create_room()
    registry.add_seat(room_id, "alice")
    registry.add_seat(room_id, "bob")

    assert registry.remove_connection(room_id, "mallory") is None
    removed = registry.remove_connection(room_id, "bob")

    assert removed is not None
    assert removed.closed
    assert room_id not in registry
    with pytest.raises(RoomNotFoundError):
        registry.get_game(room_id)
    assert registry.remove_connection(room_id, "alice") is None


def test_games_use_registry_tie_rule():
    registry = RoomRegistry(tie_rule=TieRule.NO_PLAYABLE_BOARD)
    room_id = registry.create_room()
    assert registry.get_game(room_id).tie_rule is TieRule.NO_PLAYABLE_BOARD


def test_code_length_must_be_positive():
    with pytest.raises(ValueError):
        RoomRegistry(code_length=0)
