"""
cli.py - Command-line interface for the terminal Connect Four game

This module provides the `play` command, which runs a two-player game in the
terminal, and the `check` command, which loads a board position and reports
its state without touching the terminal mode.
"""

import argparse
import sys
from typing import List, Optional

from c4term.debug import debug, DebugLevel
from c4term.game.board import Board
from c4term.game.rules import ConnectFourGame
from c4term.interfaces.keys import KeyDecoder, read_command
from c4term.interfaces.render import TerminalRenderer
from c4term.interfaces.terminal import RawTerminal, TerminalSetupError, DeviceReadError
from c4term.utils import GameResult, Player


def add_debug_arguments(parser: argparse.ArgumentParser) -> None:
    """Logging options shared by every command."""
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--debug-level', default='warning',
                        choices=[level.name.lower() for level in DebugLevel],
                        help='Logging level (default: warning)')
    parser.add_argument('--debug-components', metavar='NAMES',
                        help='Comma-separated components to log (board, game, input, '
                             'terminal, render, cli); all if omitted')
    parser.add_argument('--log-file', help='Write logs to this file')


class SimpleCLI:
    """Command-line interface for Connect Four."""

    def __init__(self, stdout=None, stderr=None):
        """Initialize the CLI."""
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.args = None

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(prog='c4term', description='Two-player Connect Four for the terminal')

        subparsers = parser.add_subparsers(dest='command', help='Command to run')

        # Play command
        play_parser = subparsers.add_parser('play', help='Play a game in this terminal')
        add_debug_arguments(play_parser)
        play_parser.add_argument('--no-color', action='store_true', help='Disable colours')

        # Check command
        check_parser = subparsers.add_parser('check', help='Report the state of a board position')
        check_parser.add_argument('--position', required=True,
                                  help='42 comma-separated cells, row by row from the top '
                                       '(0 empty, 1 player one, 2 player two)')
        add_debug_arguments(check_parser)

        return parser

    def parse_args(self, argv: Optional[List[str]] = None) -> None:
        """Parse command-line arguments."""
        self.args = self.build_parser().parse_args(argv)

        if self.args.command is None:
            return

        # Set debug level
        if self.args.debug:
            debug.configure(level=DebugLevel.DEBUG)
        else:
            debug.set_level(self.args.debug_level)
        if self.args.debug_components:
            debug.configure(components=self.args.debug_components.split(','))
        if self.args.log_file:
            debug.configure(log_file=self.args.log_file)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Run the CLI and return the process exit status."""
        if not self.args:
            self.parse_args(argv)

        if self.args.command == 'play':
            return self.play_game()
        elif self.args.command == 'check':
            return self.check_position()

        print("Please specify a command. Use --help for options.", file=self.stderr)
        return 2

    def play_game(self) -> int:
        """Play a Connect Four game in the terminal."""
        # The screen belongs to the renderer while the game runs
        debug.detach_console()
        renderer = TerminalRenderer(output=self.stdout,
                                    use_color=False if self.args.no_color else None)
        game = ConnectFourGame(renderer)
        decoder = KeyDecoder()

        try:
            with RawTerminal(output=self.stdout) as terminal:
                game.play(lambda: read_command(terminal.read_byte, decoder))
        except TerminalSetupError as e:
            debug.error(f"Terminal setup failed: {e}", "cli")
            print(f"c4term: {e}", file=self.stderr)
            return 1
        except DeviceReadError as e:
            debug.error(f"Terminal read failed: {e}", "cli")
            print(f"c4term: {e}", file=self.stderr)
            return 1
        finally:
            debug.attach_console()

        scores = game.scores
        print(f"Thanks for playing! {Player.ONE.label} {scores[GameResult.PLAYER_ONE_WIN]}, "
              f"{Player.TWO.label} {scores[GameResult.PLAYER_TWO_WIN]}, "
              f"draws {scores[GameResult.DRAW]}", file=self.stdout)
        return 0

    def check_position(self) -> int:
        """Load a board position and report win, draw and valid moves."""
        try:
            board = Board.from_string(self.args.position)
        except ValueError as e:
            print(f"Error parsing position: {e}", file=self.stderr)
            return 2

        out = self.stdout
        print("Loaded position:", file=out)
        print(board.render(), file=out)

        win = board.check_win()
        if win is not None:
            cells = ", ".join(f"({r}, {c})" for r, c in win.cells)
            print(f"Win for {win.player.label} ({win.player}): "
                  f"{win.direction.name.lower()} {cells}", file=out)
        else:
            print("No win detected for any player", file=out)

        result = board.result()
        if result == GameResult.DRAW:
            print("Board is full: draw", file=out)
        elif not result.is_game_over():
            print(f"Empty spaces: {board.grid.size - board.count_tokens()}", file=out)
            print(f"Next player: {board.current_player.label} ({board.current_player})", file=out)
            print(f"Valid moves: {board.get_valid_moves()}", file=out)
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    cli = SimpleCLI()
    return cli.run(argv)


if __name__ == "__main__":
    sys.exit(main())
