"""
c4term.game - Core game mechanics for Connect Four

This package contains the board representation with win detection and the
turn/session controller that applies keyboard commands to it.
"""

from c4term.game.board import Board
from c4term.game.rules import ConnectFourGame

__all__ = ['Board', 'ConnectFourGame']
