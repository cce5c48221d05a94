import numpy as np
import pytest

from c4term.game.board import Board
from c4term.utils import ROWS, COLS, Player

SYMBOLS = {".": Player.EMPTY, "X": Player.ONE, "O": Player.TWO}


def make_board(rows):
    """
    Build a board from ROWS strings of COLS characters, top row first.
    '.' is empty, 'X' player one, 'O' player two. Gravity is not checked.
    """
    assert len(rows) == ROWS
    board = Board()
    for r, line in enumerate(rows):
        assert len(line) == COLS, line
        for c, ch in enumerate(line):
            board.grid[r, c] = SYMBOLS[ch].value
    board.turn = int(np.count_nonzero(board.grid))
    return board


# Full board with no four-in-a-row anywhere: runs of three per row,
# rows alternating so no column or diagonal repeats four times.
DRAW_ROWS = [
    "XXXOOOX",
    "OOOXXXO",
    "XXXOOOX",
    "OOOXXXO",
    "XXXOOOX",
    "OOOXXXO",
]


@pytest.fixture
def board_from_rows():
    return make_board


@pytest.fixture
def draw_rows():
    return list(DRAW_ROWS)
