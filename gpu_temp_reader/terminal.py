"""
Raw terminal input for the poll loop (POSIX termios)
"""

import os
import select
import sys
import termios
import logging
from collections import deque
from typing import List, Optional

logger = logging.getLogger(__name__)


class TerminalError(OSError):
    """Terminal could not be switched, restored or read"""
    pass


def split_keys(text) -> List[str]:
    """Split raw input into individual keys

    CSI and SS3 sequences (arrows, function keys) and Alt-modified keys
    are kept together as one key.
    """
    keys = []
    i = 0
    n = len(text)
    while i < n:
        if text[i] != "\x1b" or i == n - 1:
            keys.append(text[i])
            i += 1
            continue
        end = i + 2
        if text[i + 1] in "[O":
            while end < n and not "\x40" <= text[end] <= "\x7e":
                end += 1
            end = min(end + 1, n)
        keys.append(text[i:end])
        i = end
    return keys


class RawTerminal:
    """Keeps the controlling terminal in raw input mode while active

    Canonical line buffering, echo and signal characters are disabled so a
    single key press is delivered immediately. Output processing is left
    untouched so log lines still wrap normally.
    """

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdin
        self.fd = None
        self._saved = None
        self._pending = deque()

    @property
    def active(self):
        return self._saved is not None

    def enable(self):
        """Switch to raw input mode, remembering the current attributes"""
        if self.active:
            return
        try:
            fd = self.stream.fileno()
            is_tty = os.isatty(fd)
        except (OSError, ValueError) as e:
            raise TerminalError(f"Input stream has no usable file descriptor: {e}") from e
        if not is_tty:
            raise TerminalError(f"File descriptor {fd} is not a terminal")

        try:
            saved = termios.tcgetattr(fd)
            attrs = termios.tcgetattr(fd)
            attrs[3] &= ~(termios.ICANON | termios.ECHO | termios.ISIG)
            attrs[6][termios.VMIN] = 1
            attrs[6][termios.VTIME] = 0
            termios.tcsetattr(fd, termios.TCSANOW, attrs)
        except termios.error as e:
            raise TerminalError(f"Failed to enable raw mode: {e}") from e
        self.fd = fd
        self._saved = saved
        logger.debug(f"Raw mode enabled on fd {fd}")

    def disable(self):
        """Restore the attributes saved by enable()"""
        if not self.active:
            return
        fd, saved = self.fd, self._saved
        self.fd = None
        self._saved = None
        self._pending.clear()
        try:
            termios.tcsetattr(fd, termios.TCSANOW, saved)
        except termios.error as e:
            raise TerminalError(f"Failed to disable raw mode: {e}") from e
        logger.debug(f"Raw mode disabled on fd {fd}")

    def read_key(self, timeout) -> Optional[str]:
        """Wait up to ``timeout`` seconds for a key press

        Keys that arrive together in one read are handed out one per call;
        the rest stay queued and are returned without waiting.

        Returns:
            str: A single key (escape sequences stay whole), or None on timeout
        """
        if not self.active:
            raise TerminalError("Raw mode is not enabled")
        if self._pending:
            return self._pending.popleft()
        try:
            ready, _, _ = select.select([self.fd], [], [], timeout)
            if not ready:
                return None
            data = os.read(self.fd, 64)
        except OSError as e:
            raise TerminalError(f"Failed to read terminal input: {e}") from e
        if not data:
            raise TerminalError("Terminal input closed")
        self._pending.extend(split_keys(data.decode('utf-8', errors='replace')))
        return self._pending.popleft()

    def __enter__(self):
        self.enable()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disable()
        return False
