"""
render.py - ANSI rendering of the game screen

TerminalRenderer draws the title, the token floating above the selected
column, the board grid and the status bars, centered in the terminal. The
frame is built as a string first so it can be inspected without a terminal;
lines end in CRLF because raw mode turns off output post-processing.
"""

import os
import re
import shutil
import sys
from typing import Callable, List, Optional, TextIO, Tuple

from c4term.debug import debug
from c4term.utils import ROWS, COLS, Player, GameResult

# ANSI codes
RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
REVERSE = "\033[7m"
FG_RED = "\033[31m"
FG_YELLOW = "\033[33m"
FG_BLUE = "\033[34m"
FG_CYAN = "\033[36m"
CLEAR_SCREEN = "\033[H\033[2J"

PLAYER_COLORS = {
    Player.ONE: FG_YELLOW,
    Player.TWO: FG_RED,
}

TOKEN = "O"
TITLE = "C O N N E C T   F O U R"
DIRECTIONS = "Left/Right: move   Enter: drop   Ctrl+Q: quit"

ANSI_PATTERN = re.compile(r"\033\[[0-9;?]*[A-Za-z]")


def visible_width(text: str) -> int:
    """Width of a line once escape sequences are removed."""
    return len(ANSI_PATTERN.sub("", text))


def screen_size() -> Tuple[int, int]:
    """
    Size of the screen for redraws.

    RawTerminal checks the real geometry before the game starts; between
    frames a failed query falls back to 24x80 rather than ending the game.
    """
    size = shutil.get_terminal_size(fallback=(80, 24))
    return size.lines, size.columns


def color_enabled() -> bool:
    return "NO_COLOR" not in os.environ


class TerminalRenderer:
    """
    Draws game frames to a text stream.

    Args:
        output: Stream to write frames to
        use_color: Emit colour escape sequences
        size: Callable returning (rows, cols) of the screen
    """

    def __init__(self, output: Optional[TextIO] = None, use_color: Optional[bool] = None,
                 size: Callable[[], Tuple[int, int]] = screen_size):
        self.output = output if output is not None else sys.stdout
        self.use_color = color_enabled() if use_color is None else use_color
        self.size = size

    def _c(self, text: str, *codes: str) -> str:
        if not self.use_color or not codes:
            return text
        return "".join(codes) + text + RESET

    def _token(self, player: Player, highlight: bool = False) -> str:
        if player == Player.EMPTY:
            return " "
        if not self.use_color:
            return str(player)
        codes = [BOLD, PLAYER_COLORS[player]]
        if highlight:
            codes.append(REVERSE)
        return self._c(TOKEN, *codes)

    def board_lines(self, game) -> List[str]:
        """Lines for the floating token row, the grid and the column numbers."""
        board = game.board
        highlight = set(game.win_line.cells) if game.win_line is not None else set()

        floating = [" "] * COLS
        if not game.result.is_game_over():
            floating[game.cursor] = self._token(board.current_player)
        lines = ["  " + "   ".join(floating) + "  "]

        separator = self._c("+" + "---+" * COLS, FG_BLUE)
        bar = self._c("|", FG_BLUE)
        lines.append(separator)
        for row in range(ROWS):
            cells = [self._token(board.cell(row, col), (row, col) in highlight)
                     for col in range(COLS)]
            lines.append(bar + bar.join(f" {cell} " for cell in cells) + bar)
            lines.append(separator)

        numbers = []
        for col in range(COLS):
            label = str(col + 1)
            if col == game.cursor and not game.result.is_game_over():
                label = self._c(label, BOLD, REVERSE)
            numbers.append(label)
        lines.append("  " + "   ".join(numbers) + "  ")
        return lines

    def status_lines(self, game) -> List[str]:
        """Turn or winner bar, message line, score line and directions bar."""
        result = game.result
        if result == GameResult.DRAW:
            headline = self._c("It's a draw!", BOLD, FG_CYAN)
        elif result.is_game_over():
            winner = result.winner
            headline = self._c(f"{winner.label} wins!", BOLD, PLAYER_COLORS[winner])
        else:
            player = game.board.current_player
            headline = (self._c(f"{player.label}'s turn", BOLD, PLAYER_COLORS[player])
                        + f"  (move {game.board.turn + 1})")

        if result.is_game_over():
            prompt = "Enter: play again   Ctrl+Q: quit"
        else:
            prompt = DIRECTIONS

        scores = game.scores
        score_line = (f"{Player.ONE.label} {scores[GameResult.PLAYER_ONE_WIN]}"
                      f"  -  {scores[GameResult.PLAYER_TWO_WIN]} {Player.TWO.label}"
                      f"   (draws {scores[GameResult.DRAW]})")

        return [headline, game.message or "", self._c(score_line, DIM), self._c(prompt, DIM)]

    def render_frame(self, game) -> str:
        """
        Build the full screen for the current game state.

        Args:
            game: The ConnectFourGame being displayed

        Returns:
            The frame, including the clear-screen prefix
        """
        rows, cols = self.size()

        def centered(line: str) -> str:
            return " " * max(0, (cols - visible_width(line)) // 2) + line

        board = self.board_lines(game)
        board_pad = " " * max(0, (cols - max(visible_width(line) for line in board)) // 2)

        lines = [centered(self._c(TITLE, BOLD)), ""]
        lines.extend(board_pad + line for line in board)
        lines.append("")
        lines.extend(centered(line) for line in self.status_lines(game))

        top = max(0, (rows - len(lines)) // 2)
        return CLEAR_SCREEN + "\r\n".join([""] * top + lines)

    def draw(self, game):
        """Write the current frame to the output stream."""
        debug.start_timer("render")
        self.output.write(self.render_frame(game))
        self.output.flush()
        debug.end_timer("render", "render")
