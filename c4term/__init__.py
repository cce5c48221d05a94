"""
c4term - Two-player Connect Four for the terminal

This package provides a Connect Four board with gravity drops and
four-in-a-row detection, a decoder that turns raw keyboard bytes into game
commands, a turn/session controller, and an ANSI renderer that draws the
game in a terminal put into raw mode.
"""

# Version number
__version__ = '0.1.0'
