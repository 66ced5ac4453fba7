"""Unit tests for the UltimateXO board model."""

import pytest

from ultimatexo.board import (
    Mark,
    empty_cell_indexes,
    empty_grid,
    empty_main_board,
    has_line,
    is_decided,
    is_full,
    is_playable,
    winner_board,
)

X, O, _ = Mark.X, Mark.O, Mark.EMPTY


def test_empty_grid_lists_every_cell():
    assert empty_cell_indexes(empty_grid()) == list(range(9))


def test_empty_cell_indexes_are_row_major():
    grid = [
        [X, _, O],
        [_, X, _],
        [O, O, _],
    ]
    assert empty_cell_indexes(grid) == [1, 3, 5, 8]


@pytest.mark.parametrize(
    "grid",
    [
        [[X, X, X], [_, O, _], [O, _, _]],
        [[O, X, _], [_, X, O], [_, X, _]],
        [[X, O, _], [O, X, _], [_, _, X]],
        [[O, _, X], [_, X, O], [X, _, _]],
    ],
)
def test_has_line_detects_rows_columns_and_diagonals(grid):
    assert has_line(grid, X)
    assert not has_line(grid, O)


def test_has_line_rejects_empty_mark():
    with pytest.raises(ValueError):
        has_line(empty_grid(), Mark.EMPTY)


def test_full_undecided_board_is_not_playable():
    drawn = [
        [X, O, X],
        [X, O, O],
        [O, X, X],
    ]
    assert is_full(drawn)
    assert not is_decided(drawn)
    assert not is_playable(drawn)


def test_won_board_with_space_is_not_playable():
    grid = [[O, O, O], [_, _, _], [_, _, _]]
    assert is_decided(grid)
    assert not is_full(grid)
    assert not is_playable(grid)


def test_winner_board_places_small_boards_row_major():
    board = empty_main_board()
    board[0][0] = [X, X, X]
    board[5][1] = [O, O, O]
    summary = winner_board(board)
    assert summary[0][0] is X
    assert summary[1][2] is O
    assert empty_cell_indexes(summary) == [1, 2, 3, 4, 6, 7, 8]


def test_same_line_check_applies_to_winner_board():
    board = empty_main_board()
    for index in (2, 4, 6):
        board[index][index // 3] = [O, O, O]
    assert has_line(winner_board(board), O)


def test_mark_opponent():
    assert X.opponent is O
    assert O.opponent is X
    with pytest.raises(ValueError):
        Mark.EMPTY.opponent
