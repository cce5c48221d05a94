"""
board.py - Board representation and core game mechanics for Connect Four

This module implements the Board class which holds the 7x6 grid and the turn
counter, drops tokens with gravity and scans the grid for four-in-a-row.
Row 0 is the top of the board; tokens stack up from row ROWS-1.
"""

from typing import List, Optional, Tuple

import numpy as np

from c4term.debug import debug
from c4term.utils import (ROWS, COLS, Player, GameResult, Direction, DropResult,
                          WinLine, InvalidColumnError, check_line_at, line_cells,
                          is_valid_position, render_board_ascii)


class Board:
    """
    Represents a Connect Four game board.

    The active player is derived from the turn counter: even turns belong to
    Player.ONE, odd turns to Player.TWO. drop() is the only method that
    writes to the grid.
    """

    def __init__(self):
        """Initialize an empty Connect Four board."""
        debug.debug("Initializing new Board", "board")
        self.reset()

    def reset(self):
        """Reset the board to an empty state."""
        debug.debug("Resetting board", "board")
        self.grid = np.zeros((ROWS, COLS), dtype=int)
        self.turn = 0
        self.last_move: Optional[Tuple[int, int]] = None

    @classmethod
    def from_string(cls, position: str) -> 'Board':
        """
        Load a board from a comma-separated list of ROWS * COLS cell values.

        Values are 0 (empty), 1 (player one) and 2 (player two), listed row
        by row from the top. The turn counter is set to the number of tokens.

        Raises:
            ValueError: If the position is malformed or has floating tokens
        """
        values = [int(v) for v in position.replace("\n", ",").split(",") if v.strip()]
        if len(values) != ROWS * COLS:
            raise ValueError(f"Position string must have {ROWS * COLS} values, got {len(values)}")
        if any(v not in (0, 1, 2) for v in values):
            raise ValueError("Cell values must be 0, 1 or 2")

        grid = np.array(values, dtype=int).reshape(ROWS, COLS)
        for col in range(COLS):
            column = grid[:, col]
            filled = np.nonzero(column)[0]
            if filled.size and filled[0] + filled.size != ROWS:
                raise ValueError(f"Column {col} has a token floating above an empty cell")

        board = cls()
        board.grid = grid
        board.turn = int(np.count_nonzero(grid))
        return board

    def copy(self) -> 'Board':
        """
        Create a deep copy of the current board.

        Returns:
            A new Board instance with the same state
        """
        new_board = Board()
        new_board.grid = self.grid.copy()
        new_board.turn = self.turn
        new_board.last_move = self.last_move
        return new_board

    @property
    def current_player(self) -> Player:
        """The player whose token the next drop writes."""
        return Player.ONE if self.turn % 2 == 0 else Player.TWO

    def cell(self, row: int, col: int) -> Player:
        """
        Get the content of a cell.

        Raises:
            IndexError: If (row, col) is outside the board
        """
        if not is_valid_position(row, col):
            raise IndexError(f"Cell ({row}, {col}) is outside the board")
        return Player(int(self.grid[row, col]))

    def is_valid_move(self, column: int) -> bool:
        """
        Check if a token can be dropped into a column.

        Args:
            column: The column to place a piece (0-indexed)

        Returns:
            True if the column exists and its top cell is empty
        """
        if not (0 <= column < COLS):
            return False
        return self.grid[0, column] == Player.EMPTY.value

    def get_valid_moves(self) -> List[int]:
        """
        Get a list of valid columns where a piece can be placed.

        Returns:
            List of valid column indices
        """
        return [col for col in range(COLS) if self.is_valid_move(col)]

    def is_full(self) -> bool:
        """True when no column can take another token."""
        return not self.get_valid_moves()

    def drop(self, column: int, player: Optional[Player] = None) -> DropResult:
        """
        Drop a token into the specified column.

        Args:
            column: The column to place a piece (0-indexed)
            player: Token to write instead of the active player's

        Returns:
            DropResult.SUCCESS, or DropResult.COLUMN_FULL with no change made

        Raises:
            InvalidColumnError: If the column is outside the board
        """
        if not (0 <= column < COLS):
            raise InvalidColumnError(f"Column {column} out of range 0..{COLS - 1}")

        token = player if player is not None else self.current_player
        if token == Player.EMPTY:
            raise ValueError("Cannot drop an empty token")

        if self.grid[0, column] != Player.EMPTY.value:
            debug.debug(f"Column {column} is full", "board")
            return DropResult.COLUMN_FULL

        # Find the lowest empty row in the column
        for row in range(ROWS - 1, -1, -1):
            if self.grid[row, column] == Player.EMPTY.value:
                debug.trace(f"Placing {token.name} at ({row}, {column})", "board")
                self.grid[row, column] = token.value
                self.last_move = (row, column)
                break

        self.turn += 1
        debug.debug(f"Turn {self.turn}: next player {self.current_player.name}", "board")
        return DropResult.SUCCESS

    def check_win(self) -> Optional[WinLine]:
        """
        Scan the whole board for a four-in-a-row.

        Cells are visited from the bottom row up and from the right column
        leftwards; each occupied cell is tested horizontally, on the left
        diagonal, vertically and on the right diagonal, and the first match
        is returned.

        Returns:
            The winning line, or None if there is none
        """
        debug.start_timer("win_check")
        for row in range(ROWS - 1, -1, -1):
            for col in range(COLS - 1, -1, -1):
                if self.grid[row, col] == Player.EMPTY.value:
                    continue
                for direction in Direction:
                    if check_line_at(self.grid, row, col, direction):
                        debug.end_timer("win_check", "board")
                        player = Player(int(self.grid[row, col]))
                        debug.info(f"{player.name} has four in a row from ({row}, {col}) "
                                   f"{direction.name.lower()}", "board")
                        return WinLine(player, (row, col), direction,
                                       tuple(line_cells(row, col, direction)))
        debug.end_timer("win_check", "board")
        return None

    def result(self) -> GameResult:
        """
        Work out the game result for the current position.

        Returns:
            The winner's result if there is a four-in-a-row, DRAW if the board
            is full without one, otherwise IN_PROGRESS
        """
        win = self.check_win()
        if win is not None:
            return GameResult.win_for(win.player)
        if self.is_full():
            return GameResult.DRAW
        return GameResult.IN_PROGRESS

    def count_tokens(self) -> int:
        return int(np.count_nonzero(self.grid))

    def get_state(self) -> np.ndarray:
        """
        Get the current board state as a numpy array.

        Returns:
            2D numpy array representing the board
        """
        return self.grid.copy()

    def render(self) -> str:
        """
        Render the board as a string.

        Returns:
            String representation of the board
        """
        return render_board_ascii(self.grid)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.turn == other.turn and np.array_equal(self.grid, other.grid)

    def __str__(self) -> str:
        """String representation of the board."""
        return self.render()
