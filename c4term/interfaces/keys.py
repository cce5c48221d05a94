"""
keys.py - Keyboard decoding for the terminal game

Turns the byte stream of a terminal in raw mode into game commands. Arrow
keys arrive as three-byte escape sequences (ESC [ C / ESC [ D), enter as a
single carriage return and Ctrl+Q as 0x11. KeyDecoder is a small state
machine fed one byte at a time, so partial and malformed sequences can be
tested without a terminal; read_command() drives it from a byte source.
"""

from enum import Enum, auto
from typing import Callable, List, Optional

from c4term.debug import debug
from c4term.utils import (KEY_ENTER, KEY_NEWLINE, KEY_CTRL_Q, KEY_ESCAPE,
                          KEY_BRACKET, KEY_RIGHT, KEY_LEFT)


class Command(Enum):
    """Commands the game loop understands."""
    MOVE_LEFT = auto()
    MOVE_RIGHT = auto()
    DROP = auto()
    QUIT = auto()
    MALFORMED = auto()


class DecoderState(Enum):
    AWAIT_FIRST_BYTE = auto()
    AWAIT_BRACKET = auto()
    AWAIT_DIRECTION = auto()


ARROW_COMMANDS = {
    KEY_RIGHT: Command.MOVE_RIGHT,
    KEY_LEFT: Command.MOVE_LEFT,
}


class KeyDecoder:
    """Incremental decoder from raw key bytes to commands."""

    def __init__(self):
        self.state = DecoderState.AWAIT_FIRST_BYTE

    def reset(self):
        self.state = DecoderState.AWAIT_FIRST_BYTE

    def feed(self, byte: int) -> Optional[Command]:
        """
        Feed one byte to the decoder.

        Args:
            byte: The byte value read from the terminal (0-255)

        Returns:
            The completed command, or None if more bytes are needed or the
            byte is not bound to anything
        """
        # Ctrl+Q quits from any state, even halfway through a sequence
        if byte == KEY_CTRL_Q:
            self.reset()
            return Command.QUIT

        if self.state == DecoderState.AWAIT_FIRST_BYTE:
            if byte == KEY_ESCAPE:
                self.state = DecoderState.AWAIT_BRACKET
                return None
            if byte in (KEY_ENTER, KEY_NEWLINE):
                return Command.DROP
            debug.trace(f"Ignoring unbound byte 0x{byte:02x}", "input")
            return None

        if self.state == DecoderState.AWAIT_BRACKET:
            if byte == KEY_BRACKET:
                self.state = DecoderState.AWAIT_DIRECTION
                return None
            return self._malformed(byte)

        command = ARROW_COMMANDS.get(byte)
        if command is None:
            return self._malformed(byte)
        self.reset()
        return command

    def _malformed(self, byte: int) -> Command:
        debug.debug(f"Malformed escape sequence at 0x{byte:02x} in state {self.state.name}", "input")
        self.reset()
        return Command.MALFORMED


def read_command(read_byte: Callable[[], Optional[int]],
                 decoder: Optional[KeyDecoder] = None) -> Command:
    """
    Block until the byte source yields a complete command.

    Args:
        read_byte: Returns the next byte, or None when the read timed out
            with nothing available
        decoder: Decoder carrying state between calls (a fresh one if None)

    Returns:
        The decoded command

    Raises:
        Whatever read_byte raises on a device failure
    """
    if decoder is None:
        decoder = KeyDecoder()

    while True:
        byte = read_byte()
        if byte is None:
            continue
        command = decoder.feed(byte)
        if command is not None:
            debug.trace(f"Decoded {command.name}", "input")
            return command


def decode_bytes(data: bytes) -> List[Command]:
    """Decode a complete byte string into the list of commands it contains."""
    decoder = KeyDecoder()
    commands = []
    for byte in data:
        command = decoder.feed(byte)
        if command is not None:
            commands.append(command)
    return commands
