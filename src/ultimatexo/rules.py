"""Move legality for UltimateXO."""

from __future__ import annotations

import logging
from typing import Optional

from .board import BOARD_SIZE, ROW_LENGTH, MainBoard, Mark, is_playable

logger = logging.getLogger(__name__)


def in_bounds(small_board_index: int, row: int, col: int) -> bool:
    return 0 <= small_board_index < BOARD_SIZE and 0 <= row < ROW_LENGTH and 0 <= col < ROW_LENGTH


def rejection_reason(
    board: MainBoard,
    small_board_index: int,
    row: int,
    col: int,
    active_board: Optional[int],
    game_over: bool,
    mark: Mark,
    current_turn: Mark,
) -> Optional[str]:
    """Name the first rule a move breaks, or ``None`` when it is legal."""

    if not in_bounds(small_board_index, row, col):
        return "out of bounds"
    if game_over:
        return "game already over"
    if mark is not current_turn:
        return "not the current turn"
    if active_board is not None and small_board_index != active_board:
        return f"must play in board {active_board}"
    grid = board[small_board_index]
    if grid[row][col] is not Mark.EMPTY:
        return "cell occupied"
    if not is_playable(grid):
        return "board already decided or full"
    return None


def is_legal(
    board: MainBoard,
    small_board_index: int,
    row: int,
    col: int,
    active_board: Optional[int],
    game_over: bool,
    mark: Mark,
    current_turn: Mark,
) -> bool:
    reason = rejection_reason(
        board, small_board_index, row, col, active_board, game_over, mark, current_turn
    )
    if reason is not None:
        logger.debug(
            "Rejected %s at board=%s row=%s col=%s: %s",
            mark.value or "?",
            small_board_index,
            row,
            col,
            reason,
        )
        return False
    return True
