# ---------------------------------------------------------------------
# Gufo ICMP Watch: InputWatcher
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

"""Keyboard stop request detection."""

# Python modules
import os
import sys
import termios
from types import TracebackType
from typing import Any, List, Optional, TextIO, Type

STOP_KEYS = b"qQ\x1b"


class InputWatcher(object):
    """
    Detect `q`, `Q` or `Esc` keypress without blocking.

    Switches the terminal to no-echo, non-canonical mode
    while active, restores original settings on exit.
    Inert when input is not a terminal.

    Args:
        stream: Input stream, `sys.stdin` when empty.

    Example:
        ``` py
        with InputWatcher() as watcher:
            while not watcher.stop_requested():
                ...
        ```
    """

    def __init__(
        self: "InputWatcher", stream: Optional[TextIO] = None
    ) -> None:
        self.__stream = stream or sys.stdin
        self.__fd: Optional[int] = None
        self.__saved: Optional[List[Any]] = None
        self.__stopped = False

    def _get_tty_fd(self: "InputWatcher") -> Optional[int]:
        try:
            fd = self.__stream.fileno()
        except (AttributeError, OSError, ValueError):
            return None
        return fd if os.isatty(fd) else None

    def __enter__(self: "InputWatcher") -> "InputWatcher":
        fd = self._get_tty_fd()
        if fd is None:
            return self
        self.__saved = termios.tcgetattr(fd)
        mode = termios.tcgetattr(fd)
        mode[3] &= ~(termios.ECHO | termios.ICANON)  # lflags
        mode[6][termios.VMIN] = 0
        mode[6][termios.VTIME] = 0
        termios.tcsetattr(fd, termios.TCSAFLUSH, mode)
        self.__fd = fd
        return self

    def __exit__(
        self: "InputWatcher",
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        if self.__fd is not None and self.__saved is not None:
            termios.tcsetattr(self.__fd, termios.TCSAFLUSH, self.__saved)
        self.__fd = None
        self.__saved = None

    @property
    def is_active(self: "InputWatcher") -> bool:
        """True, when terminal is in watched mode."""
        return self.__fd is not None

    def stop_requested(self: "InputWatcher") -> bool:
        """
        Check for stop request.

        Consumes all pending keypresses.

        Returns:
            True, if a stop key has been pressed.
        """
        if self.__stopped or self.__fd is None:
            return self.__stopped
        data = os.read(self.__fd, 1024)
        if any(c in STOP_KEYS for c in data):
            self.__stopped = True
        return self.__stopped
