import errno
import fcntl
import io
import os
import struct
import termios

import pytest

from c4term.interfaces.terminal import (HIDE_CURSOR, SHOW_CURSOR, ALT_SCREEN_ON, ALT_SCREEN_OFF,
                                        DeviceReadError, RawTerminal, TerminalSetupError,
                                        get_terminal_size)


@pytest.fixture
def pty_pair():
    master, slave = os.openpty()
    yield master, slave
    os.close(master)
    os.close(slave)


def test_raw_mode_is_entered_and_restored(pty_pair):
    _, slave = pty_pair
    original = termios.tcgetattr(slave)

    with RawTerminal(fd=slave, output=io.StringIO(), timeout=1) as terminal:
        assert terminal.active
        attrs = termios.tcgetattr(slave)
        assert not attrs[3] & termios.ECHO
        assert not attrs[3] & termios.ICANON
        assert not attrs[3] & termios.ISIG
        assert not attrs[0] & termios.ICRNL
        assert attrs[6][termios.VMIN] in (0, b"\x00")
        assert attrs[6][termios.VTIME] in (1, b"\x01")

    assert not terminal.active
    assert termios.tcgetattr(slave) == original


def test_mode_is_restored_when_the_block_raises(pty_pair):
    _, slave = pty_pair
    original = termios.tcgetattr(slave)

    with pytest.raises(RuntimeError):
        with RawTerminal(fd=slave, output=io.StringIO()):
            raise RuntimeError("boom")

    assert termios.tcgetattr(slave) == original


def test_screen_control_sequences():
    master, slave = os.openpty()
    out = io.StringIO()
    try:
        terminal = RawTerminal(fd=slave, output=out)
        terminal.enter_raw_mode()
        assert out.getvalue() == ALT_SCREEN_ON + HIDE_CURSOR
        terminal.restore_mode()
        terminal.restore_mode()
        assert out.getvalue() == ALT_SCREEN_ON + HIDE_CURSOR + SHOW_CURSOR + ALT_SCREEN_OFF
    finally:
        os.close(master)
        os.close(slave)


def test_read_byte_returns_keys_then_times_out(pty_pair):
    master, slave = pty_pair
    with RawTerminal(fd=slave, output=io.StringIO(), timeout=1) as terminal:
        os.write(master, b"\x1b[C\r")
        assert [terminal.read_byte() for _ in range(4)] == [0x1B, ord("["), ord("C"), 0x0D]
        assert terminal.read_byte() is None


def test_non_terminal_is_rejected():
    read_fd, write_fd = os.pipe()
    out = io.StringIO()
    try:
        with pytest.raises(TerminalSetupError):
            with RawTerminal(fd=read_fd, output=out):
                pass
        assert out.getvalue() == ""
    finally:
        os.close(read_fd)
        os.close(write_fd)


@pytest.mark.parametrize("code", [errno.EAGAIN, errno.EINTR])
def test_read_byte_treats_would_block_as_timeout(monkeypatch, code):
    def fail(fd, n):
        raise OSError(code, os.strerror(code))

    monkeypatch.setattr(os, "read", fail)
    assert RawTerminal(fd=0, output=io.StringIO()).read_byte() is None


def test_read_byte_raises_on_device_failure(monkeypatch):
    def fail(fd, n):
        raise OSError(errno.EIO, os.strerror(errno.EIO))

    monkeypatch.setattr(os, "read", fail)
    with pytest.raises(DeviceReadError) as excinfo:
        RawTerminal(fd=0, output=io.StringIO()).read_byte()
    assert excinfo.value.errno == errno.EIO


class BrokenOutput(io.StringIO):
    """Stream whose writes start failing after a number of successful ones."""

    def __init__(self, good_writes):
        super().__init__()
        self.good_writes = good_writes

    def write(self, text):
        if self.good_writes <= 0:
            raise BrokenPipeError(errno.EPIPE, "Broken pipe")
        self.good_writes -= 1
        return super().write(text)


def test_mode_is_restored_when_screen_setup_write_fails(pty_pair):
    _, slave = pty_pair
    original = termios.tcgetattr(slave)
    terminal = RawTerminal(fd=slave, output=BrokenOutput(good_writes=0))

    with pytest.raises(BrokenPipeError):
        with terminal:
            pytest.fail("block should not run")

    assert not terminal.active
    assert termios.tcgetattr(slave) == original


def test_mode_is_restored_when_screen_teardown_write_fails(pty_pair):
    _, slave = pty_pair
    original = termios.tcgetattr(slave)
    terminal = RawTerminal(fd=slave, output=BrokenOutput(good_writes=2))

    with pytest.raises(BrokenPipeError):
        with terminal:
            assert terminal.active

    assert not terminal.active
    assert termios.tcgetattr(slave) == original


def test_terminal_size_of_pty(pty_pair):
    _, slave = pty_pair
    fcntl.ioctl(slave, termios.TIOCSWINSZ, struct.pack("HHHH", 30, 100, 0, 0))
    assert get_terminal_size(slave) == (30, 100)

    with RawTerminal(fd=slave, output=io.StringIO()) as terminal:
        assert terminal.size == (30, 100)


def test_terminal_size_of_non_terminal_fails():
    read_fd, write_fd = os.pipe()
    try:
        with pytest.raises(TerminalSetupError):
            get_terminal_size(read_fd)
    finally:
        os.close(read_fd)
        os.close(write_fd)


def test_geometry_failure_happens_before_raw_mode(monkeypatch, pty_pair):
    _, slave = pty_pair
    original = termios.tcgetattr(slave)

    def fail(fd):
        raise OSError(errno.ENOTTY, os.strerror(errno.ENOTTY))

    monkeypatch.setattr(os, "get_terminal_size", fail)
    out = io.StringIO()
    with pytest.raises(TerminalSetupError):
        with RawTerminal(fd=slave, output=out):
            pass
    assert out.getvalue() == ""
    assert termios.tcgetattr(slave) == original
