"""
rules.py - Turn and session control for Connect Four

This module provides ConnectFourGame, which owns the board, the column cursor
and the game result, applies keyboard commands to them and runs the
render/read/apply loop, including the replay-or-quit prompt at the end of a
game.
"""

from typing import Callable, Dict, Optional

from c4term.debug import debug
from c4term.game.board import Board
from c4term.interfaces.keys import Command
from c4term.utils import COLS, DropResult, GameResult, Player, WinLine


class ConnectFourGame:
    """
    High-level Connect Four game manager.

    Args:
        renderer: Object with a draw(game) method, called after every
            state transition (None to run headless)
    """

    def __init__(self, renderer=None):
        """Initialize a new Connect Four game."""
        debug.debug("Initializing ConnectFourGame", "game")
        self.board = Board()
        self.renderer = renderer
        self.scores: Dict[GameResult, int] = {
            GameResult.PLAYER_ONE_WIN: 0,
            GameResult.PLAYER_TWO_WIN: 0,
            GameResult.DRAW: 0,
        }
        self.games_completed = 0
        self.reset()

    def reset(self) -> None:
        """Start a new game on an empty board. Scores are kept."""
        debug.debug("Resetting game", "game")
        self.board.reset()
        self.cursor = 0
        self.result = GameResult.IN_PROGRESS
        self.win_line: Optional[WinLine] = None
        self.message: Optional[str] = None

    def is_game_over(self) -> bool:
        """
        Check if the game is over.

        Returns:
            True if the game is over, False otherwise
        """
        return self.result.is_game_over()

    def get_winner(self) -> Optional[Player]:
        """
        Get the winner of the game.

        Returns:
            The winning player, or None if no winner yet or draw
        """
        winner = self.result.winner
        return None if winner == Player.EMPTY else winner

    def get_current_player(self) -> Player:
        return self.board.current_player

    def move_cursor(self, step: int) -> None:
        """Move the cursor by step columns, wrapping around the board edges."""
        self.cursor = (self.cursor + step) % COLS
        self.message = None
        debug.trace(f"Cursor at column {self.cursor}", "game")

    def drop_at_cursor(self) -> DropResult:
        """
        Drop the active player's token into the cursor column.

        On success the board is checked for a win, then for a draw; the turn
        ends and the cursor goes back to the first column. A full column
        leaves everything unchanged apart from the status message.

        Returns:
            The result of the drop
        """
        column = self.cursor
        player = self.board.current_player
        outcome = self.board.drop(column)

        if outcome == DropResult.COLUMN_FULL:
            self.message = f"Column {column + 1} is full"
            debug.debug(f"{player.name} tried full column {column}", "game")
            return outcome

        self.message = None
        self.win_line = self.board.check_win()
        if self.win_line is not None:
            self._finish(GameResult.win_for(self.win_line.player))
        elif self.board.is_full():
            self._finish(GameResult.DRAW)
        else:
            self.cursor = 0
        return outcome

    def _finish(self, result: GameResult) -> None:
        self.result = result
        self.scores[result] += 1
        self.games_completed += 1
        debug.info(f"Game {self.games_completed} over: {result.name} after {self.board.turn} moves", "game")

    def apply(self, command: Command) -> bool:
        """
        Apply one command to the game.

        Args:
            command: Decoded keyboard command

        Returns:
            False if the session should end, True otherwise
        """
        debug.trace(f"Applying {command.name}", "game")

        if command == Command.QUIT:
            debug.info("Quit requested", "game")
            return False

        if command == Command.MALFORMED:
            return True

        if self.is_game_over():
            # Only replay or quit are accepted on the game-over screen
            if command == Command.DROP:
                self.reset()
            return True

        if command == Command.MOVE_LEFT:
            self.move_cursor(-1)
        elif command == Command.MOVE_RIGHT:
            self.move_cursor(1)
        elif command == Command.DROP:
            self.drop_at_cursor()
        return True

    def render(self) -> None:
        if self.renderer is not None:
            self.renderer.draw(self)

    def play(self, read_command: Callable[[], Command]) -> GameResult:
        """
        Run the session loop until the players quit.

        Args:
            read_command: Blocks until the next command is available

        Returns:
            The result of the game on screen when the session ended
        """
        debug.info("Session started", "game")
        while True:
            self.render()
            if not self.apply(read_command()):
                break
        debug.info(f"Session ended after {self.games_completed} completed game(s)", "game")
        return self.result
