"""
utils.py - Constants, enumerations and helper functions for c4term

This module provides the board dimensions, the key bytes the input decoder
understands, the cell/result enumerations and the low-level helpers used by
the board, the controller and the renderer.
"""

from enum import Enum, auto
from typing import List, NamedTuple, Tuple

import numpy as np

# Game constants
ROWS = 6
COLS = 7
CONNECT_N = 4  # Number of pieces in a row to win

# Raw keyboard bytes
KEY_ENTER = 0x0D
KEY_NEWLINE = 0x0A
KEY_CTRL_Q = 0x11
KEY_ESCAPE = 0x1B
KEY_BRACKET = ord('[')
KEY_RIGHT = ord('C')
KEY_LEFT = ord('D')

# Terminal read timeout, in tenths of a second (termios VTIME)
READ_TIMEOUT_DECISECONDS = 1


class Player(Enum):
    """Enumeration representing players and cell states."""
    EMPTY = 0
    ONE = 1    # First player
    TWO = 2    # Second player

    @property
    def label(self) -> str:
        if self == Player.ONE:
            return "Yellow"
        elif self == Player.TWO:
            return "Red"
        return ""

    def __str__(self):
        if self == Player.EMPTY:
            return " "
        elif self == Player.ONE:
            return "X"
        else:
            return "O"


class GameResult(Enum):
    """Enumeration representing the game outcome."""
    IN_PROGRESS = auto()
    PLAYER_ONE_WIN = auto()
    PLAYER_TWO_WIN = auto()
    DRAW = auto()

    def is_game_over(self) -> bool:
        """Check if the game is over."""
        return self != GameResult.IN_PROGRESS

    @classmethod
    def win_for(cls, player: Player) -> 'GameResult':
        if player == Player.ONE:
            return cls.PLAYER_ONE_WIN
        if player == Player.TWO:
            return cls.PLAYER_TWO_WIN
        raise ValueError(f"No win result for {player!r}")

    @property
    def winner(self) -> Player:
        if self == GameResult.PLAYER_ONE_WIN:
            return Player.ONE
        if self == GameResult.PLAYER_TWO_WIN:
            return Player.TWO
        return Player.EMPTY


class DropResult(Enum):
    """Outcome of dropping a token into a column."""
    SUCCESS = auto()
    COLUMN_FULL = auto()


class Direction(Enum):
    """Directions for win checking, in the order they are tested per cell."""
    HORIZONTAL = auto()
    LEFT_DIAGONAL = auto()   # top-left to bottom-right
    VERTICAL = auto()
    RIGHT_DIAGONAL = auto()  # top-right to bottom-left


# Step (row, col) walked from an anchor cell for each direction. Cells are
# scanned bottom-right first, so every step points up and/or left except
# the right diagonal, which has to climb to the right.
DIRECTION_VECTORS = {
    Direction.HORIZONTAL: (0, -1),
    Direction.LEFT_DIAGONAL: (-1, -1),
    Direction.VERTICAL: (-1, 0),
    Direction.RIGHT_DIAGONAL: (-1, 1),
}


class WinLine(NamedTuple):
    """A four-in-a-row found on the board."""
    player: Player
    start: Tuple[int, int]
    direction: Direction
    cells: Tuple[Tuple[int, int], ...]


class InvalidColumnError(ValueError):
    """Raised when a column index falls outside the board."""


def is_valid_position(row: int, col: int) -> bool:
    """
    Check if a position is within the board boundaries.

    Args:
        row: Row index
        col: Column index

    Returns:
        True if position is valid, False otherwise
    """
    return 0 <= row < ROWS and 0 <= col < COLS


def line_cells(row: int, col: int, direction: Direction) -> List[Tuple[int, int]]:
    """Cells of the CONNECT_N window anchored at (row, col), possibly off-board."""
    dr, dc = DIRECTION_VECTORS[direction]
    return [(row + i * dr, col + i * dc) for i in range(CONNECT_N)]


def check_line_at(grid: np.ndarray, row: int, col: int, direction: Direction) -> bool:
    """
    Check the fixed window of CONNECT_N cells starting at an anchor.

    Args:
        grid: The game board
        row: Anchor row
        col: Anchor column
        direction: Direction to walk from the anchor

    Returns:
        True if every cell of the window holds the anchor's token
    """
    player_value = grid[row, col]
    if player_value == Player.EMPTY.value:
        return False

    for r, c in line_cells(row, col, direction)[1:]:
        if not is_valid_position(r, c) or grid[r, c] != player_value:
            return False
    return True


def render_board_ascii(grid: np.ndarray) -> str:
    """
    Render the board as ASCII art.

    Args:
        grid: The game board

    Returns:
        ASCII representation of the board
    """
    separator = "+" + "---+" * COLS
    result = [separator]

    for row in range(ROWS):
        cells = [str(Player(int(grid[row, col]))) for col in range(COLS)]
        result.append("| " + " | ".join(cells) + " |")
        result.append(separator)

    result.append("  " + "   ".join(str(col) for col in range(COLS)))
    return "\n".join(result)
