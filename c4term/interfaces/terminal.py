"""
terminal.py - Raw-mode terminal session for the game

RawTerminal puts a tty into raw mode for the duration of a with-block and
restores the original settings on every exit path. Reads use termios VMIN=0
and VTIME so a read returns after a short timeout with no bytes instead of
blocking forever.
"""

import errno
import os
import sys
import termios
from typing import Optional, TextIO, Tuple

from c4term.debug import debug
from c4term.utils import READ_TIMEOUT_DECISECONDS

# Output escape sequences
ALT_SCREEN_ON = "\033[?1049h"
ALT_SCREEN_OFF = "\033[?1049l"
HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"

# termios attribute list indexes
IFLAG, OFLAG, CFLAG, LFLAG, ISPEED, OSPEED, CC = range(7)

RETRY_ERRNOS = (errno.EAGAIN, errno.EWOULDBLOCK, errno.EINTR)


class TerminalSetupError(Exception):
    """Raised when the terminal cannot be queried or put into raw mode."""


class DeviceReadError(OSError):
    """Raised when reading from the terminal fails for a reason other than a timeout."""


def get_terminal_size(fd: Optional[int] = None) -> Tuple[int, int]:
    """
    Get the terminal size.

    Args:
        fd: Descriptor of the terminal (stdout if None)

    Returns:
        (rows, cols) of the terminal

    Raises:
        TerminalSetupError: If fd is not a terminal
    """
    try:
        size = os.get_terminal_size(sys.stdout.fileno() if fd is None else fd)
    except (OSError, ValueError) as e:
        raise TerminalSetupError(f"Cannot query terminal size: {e}") from e
    return size.lines, size.columns


class RawTerminal:
    """
    Context manager owning a terminal in raw mode.

    Args:
        fd: File descriptor of the input tty
        output: Stream the screen control sequences are written to
        timeout: Read timeout in tenths of a second
        alternate_screen: Switch to the alternate screen while active
    """

    def __init__(self, fd: Optional[int] = None, output: Optional[TextIO] = None,
                 timeout: int = READ_TIMEOUT_DECISECONDS, alternate_screen: bool = True):
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.output = output if output is not None else sys.stdout
        self.timeout = timeout
        self.alternate_screen = alternate_screen
        self._saved_attrs = None
        self.size: Optional[Tuple[int, int]] = None

    @property
    def active(self) -> bool:
        return self._saved_attrs is not None

    def __enter__(self) -> 'RawTerminal':
        self.enter_raw_mode()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.restore_mode()
        return False

    def enter_raw_mode(self):
        """
        Save the current attributes and switch the tty to raw mode.

        Raises:
            TerminalSetupError: If the descriptor is not a terminal or its
                attributes cannot be changed
        """
        if not os.isatty(self.fd):
            raise TerminalSetupError(f"File descriptor {self.fd} is not a terminal")

        self.size = get_terminal_size(self.fd)

        try:
            saved = termios.tcgetattr(self.fd)
        except termios.error as e:
            raise TerminalSetupError(f"Cannot read terminal attributes: {e}") from e

        attrs = termios.tcgetattr(self.fd)
        attrs[IFLAG] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK
                          | termios.ISTRIP | termios.IXON)
        attrs[OFLAG] &= ~termios.OPOST
        attrs[CFLAG] |= termios.CS8
        attrs[LFLAG] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
        attrs[CC][termios.VMIN] = 0
        attrs[CC][termios.VTIME] = self.timeout

        try:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, attrs)
        except termios.error as e:
            raise TerminalSetupError(f"Cannot enter raw mode: {e}") from e

        self._saved_attrs = saved
        debug.debug(f"Entered raw mode on fd {self.fd}", "terminal")

        try:
            if self.alternate_screen:
                self.output.write(ALT_SCREEN_ON)
            self.output.write(HIDE_CURSOR)
            self.output.flush()
        except BaseException:
            self.restore_mode()
            raise

    def restore_mode(self):
        """Restore the attributes saved by enter_raw_mode(). Safe to call twice."""
        if self._saved_attrs is None:
            return

        saved, self._saved_attrs = self._saved_attrs, None
        try:
            self.output.write(SHOW_CURSOR)
            if self.alternate_screen:
                self.output.write(ALT_SCREEN_OFF)
            self.output.flush()
        finally:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, saved)
        debug.debug(f"Restored terminal mode on fd {self.fd}", "terminal")

    def read_byte(self) -> Optional[int]:
        """
        Read a single byte from the terminal.

        Returns:
            The byte value, or None if the read timed out

        Raises:
            DeviceReadError: On any read failure other than a timeout
        """
        try:
            data = os.read(self.fd, 1)
        except OSError as e:
            if e.errno in RETRY_ERRNOS:
                return None
            debug.error(f"Read from fd {self.fd} failed: {e}", "terminal")
            raise DeviceReadError(e.errno, f"Cannot read from terminal: {e.strerror}") from e

        if not data:
            return None
        return data[0]
