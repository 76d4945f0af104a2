"""Pure 3x3 board rules.

Nothing here holds state; every function takes the 9-cell board it works on.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from tictactoe_live.api.models import DRAW, Cell, Outcome, Symbol, WinningLine
from tictactoe_live.errors import InvalidMove

BOARD_SIZE = 9

# Scan order is fixed: rows, then columns, then diagonals.
WINNING_LINES: tuple[WinningLine, ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


@dataclass(frozen=True, slots=True)
class Evaluation:
    winner: Outcome | None = None
    winning_line: WinningLine | None = None

    @property
    def is_terminal(self) -> bool:
        return self.winner is not None


def empty_board() -> list[Cell]:
    return [None] * BOARD_SIZE


def is_valid_move(board: Sequence[Cell], index: object) -> bool:
    if isinstance(index, bool) or not isinstance(index, int):
        return False
    if index < 0 or index >= BOARD_SIZE:
        return False
    return board[index] is None


def apply_move(board: Sequence[Cell], index: int, symbol: Symbol) -> list[Cell]:
    """Return a copy of `board` with `symbol` at `index`.

    Callers are expected to check `is_valid_move` first.
    """

    if not is_valid_move(board, index):
        raise InvalidMove(f"Invalid move at cell {index}")
    new_board = list(board)
    new_board[index] = symbol
    return new_board


def evaluate(board: Sequence[Cell]) -> Evaluation:
    for line in WINNING_LINES:
        a, b, c = line
        if board[a] is not None and board[a] == board[b] == board[c]:
            return Evaluation(winner=Symbol(board[a]), winning_line=line)

    if all(cell is not None for cell in board):
        return Evaluation(winner=DRAW)

    return Evaluation()


def next_turn(symbol: Symbol) -> Symbol:
    return Symbol.O if symbol == Symbol.X else Symbol.X
