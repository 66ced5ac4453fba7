"""Board model for UltimateXO: marks, 3x3 grids and pure queries over them."""

from __future__ import annotations

from enum import Enum
from typing import List, Tuple


class Mark(str, Enum):
    """Content of a single cell. ``EMPTY`` travels as an empty string."""

    EMPTY = ""
    X = "X"
    O = "O"

    @property
    def opponent(self) -> "Mark":
        if self is Mark.X:
            return Mark.O
        if self is Mark.O:
            return Mark.X
        raise ValueError("EMPTY has no opponent")


PLAYER_MARKS: Tuple[Mark, Mark] = (Mark.X, Mark.O)

BOARD_SIZE = 9
ROW_LENGTH = 3

Grid = List[List[Mark]]
MainBoard = List[Grid]

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


# ---------- construction ----------


def empty_grid() -> Grid:
    return [[Mark.EMPTY] * ROW_LENGTH for _ in range(ROW_LENGTH)]


def empty_main_board() -> MainBoard:
    return [empty_grid() for _ in range(BOARD_SIZE)]


# ---------- queries ----------


def cell_at(grid: Grid, index: int) -> Mark:
    row, col = divmod(index, ROW_LENGTH)
    return grid[row][col]


def empty_cell_indexes(grid: Grid) -> List[int]:
    """Row-major positions (0..8) of the cells that have not been played."""

    return [
        row * ROW_LENGTH + col
        for row, cells in enumerate(grid)
        for col, mark in enumerate(cells)
        if mark is Mark.EMPTY
    ]


def has_line(grid: Grid, mark: Mark) -> bool:
    """True if ``mark`` fills a row, a column or a diagonal of ``grid``.

    Works on a small board as well as on the derived winner-board, since
    both are 3x3 grids of marks.
    """

    if mark is Mark.EMPTY:
        raise ValueError("Only player marks can complete a line")
    return any(
        cell_at(grid, a) is mark and cell_at(grid, b) is mark and cell_at(grid, c) is mark
        for a, b, c in WINNING_LINES
    )


def line_owner(grid: Grid) -> Mark:
    for mark in PLAYER_MARKS:
        if has_line(grid, mark):
            return mark
    return Mark.EMPTY


def is_decided(grid: Grid) -> bool:
    return line_owner(grid) is not Mark.EMPTY


def is_full(grid: Grid) -> bool:
    return not empty_cell_indexes(grid)


def is_playable(grid: Grid) -> bool:
    """A small board accepts moves while it is undecided and has space left."""

    return not is_decided(grid) and not is_full(grid)


def winner_board(board: MainBoard) -> Grid:
    """Summarise the main board: small board ``i`` lands at (i // 3, i % 3)."""

    summary = empty_grid()
    for index, grid in enumerate(board):
        row, col = divmod(index, ROW_LENGTH)
        summary[row][col] = line_owner(grid)
    return summary


def serialize_grid(grid: Grid) -> List[List[str]]:
    return [[mark.value for mark in row] for row in grid]
