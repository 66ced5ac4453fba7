"""Game state machine for UltimateXO (ultimate tic-tac-toe)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .board import (
    ROW_LENGTH,
    MainBoard,
    Mark,
    empty_cell_indexes,
    empty_main_board,
    has_line,
    is_playable,
    serialize_grid,
    winner_board,
)
from .errors import GameNotOverError, IllegalMoveError
from .rules import is_legal


class GameStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    TIED = "tied"


class TieRule(str, Enum):
    """How a finished-without-winner game is recognised.

    ``WINNER_BOARD_FULL`` only counts small boards that somebody won, so a
    locally drawn board keeps the game open even when no move is left.
    ``NO_PLAYABLE_BOARD`` ends the game once every small board is decided
    or full.
    """

    WINNER_BOARD_FULL = "winner-board-full"
    NO_PLAYABLE_BOARD = "no-playable-board"


@dataclass(frozen=True)
class Move:
    mark: Mark
    small_board: int
    row: int
    col: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "player": self.mark.value,
            "smallBoard": self.small_board,
            "row": self.row,
            "cell": self.col,
        }


@dataclass
class Game:
    board: MainBoard = field(default_factory=empty_main_board)
    current_turn: Mark = Mark.X
    # None means any playable small board is eligible
    active_board: Optional[int] = None
    game_over: bool = False
    winner: Optional[Mark] = None
    is_tie: bool = False
    tie_rule: TieRule = TieRule.WINNER_BOARD_FULL
    move_log: List[Move] = field(default_factory=list)

    @property
    def status(self) -> GameStatus:
        if self.winner is not None:
            return GameStatus.WON
        if self.is_tie:
            return GameStatus.TIED
        return GameStatus.IN_PROGRESS

    @property
    def last_move(self) -> Optional[Move]:
        return self.move_log[-1] if self.move_log else None

    def is_legal(self, mark: Mark, small_board_index: int, row: int, col: int) -> bool:
        return is_legal(
            self.board,
            small_board_index,
            row,
            col,
            self.active_board,
            self.game_over,
            mark,
            self.current_turn,
        )

    def apply_move(self, mark: Mark, small_board_index: int, row: int, col: int) -> None:
        """Play ``mark`` and derive the outcome, the next turn and the next board.

        The next active board is picked from the position inside the small
        board (``row * 3 + col``), not from the small board just played.
        """

        if not self.is_legal(mark, small_board_index, row, col):
            raise IllegalMoveError()

        self.board[small_board_index][row][col] = mark
        self.move_log.append(Move(mark, small_board_index, row, col))

        summary = winner_board(self.board)
        if has_line(summary, mark):
            self.winner = mark
            self.game_over = True
        elif self._is_tied(summary):
            self.is_tie = True
            self.game_over = True
        else:
            self.current_turn = mark.opponent
            target = row * ROW_LENGTH + col
            self.active_board = target if is_playable(self.board[target]) else None

    def restart(self) -> None:
        if not self.game_over:
            raise GameNotOverError()
        self.board = empty_main_board()
        self.current_turn = Mark.X
        self.active_board = None
        self.game_over = False
        self.winner = None
        self.is_tie = False
        self.move_log = []

    def snapshot(self) -> Dict[str, object]:
        last = self.last_move
        return {
            "board": [serialize_grid(grid) for grid in self.board],
            "currentPlayer": self.current_turn.value,
            "currentBoard": self.active_board,
            "winner": self.winner.value if self.winner is not None else None,
            "isTie": self.is_tie,
            "gameOver": self.game_over,
            "lastMove": last.to_dict() if last is not None else None,
        }

    # ---- helpers ----

    def _is_tied(self, summary) -> bool:
        if self.tie_rule is TieRule.NO_PLAYABLE_BOARD:
            return not any(is_playable(grid) for grid in self.board)
        return not empty_cell_indexes(summary)
