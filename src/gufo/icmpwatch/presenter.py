# ---------------------------------------------------------------------
# Gufo ICMP Watch: Presenter
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

"""
Full-screen status table.

Attributes:
    MIN_LABEL_WIDTH: Minimal width of the destination column.
"""

# Python modules
import sys
from typing import Optional, Sequence, TextIO

# Gufo ICMP Watch modules
from .addr import Destination
from .result import ProbeResult, Replied, SendFailed

ESC = "\x1b"
RESET = f"{ESC}[0m"
CLEAR_SCREEN = f"{ESC}[H{ESC}[2J{ESC}[3J"
FG_WHITE = f"{ESC}[1;37m"
BG_RED = f"{ESC}[1;41m"
BG_GREEN = f"{ESC}[1;42m"

MIN_LABEL_WIDTH = 19


class Presenter(object):
    """
    Render round results as a colored table.

    Args:
        stream: Output stream.
        color: Force colors on or off. Enabled for TTY when empty.
    """

    def __init__(
        self: "Presenter",
        stream: Optional[TextIO] = None,
        color: Optional[bool] = None,
    ) -> None:
        self.__stream = stream or sys.stdout
        if color is None:
            color = self.__stream.isatty()
        self.__color = color

    def _paint(self: "Presenter", bg: str, text: str) -> str:
        if not self.__color:
            return text
        return f"{FG_WHITE}{bg}{text}{RESET}"

    def format_result(self: "Presenter", result: ProbeResult) -> str:
        """
        Format single status cell.

        Args:
            result: Probe result.

        Returns:
            Formatted cell.
        """
        if isinstance(result, Replied):
            return self._paint(BG_GREEN, f"{int(result.ms):5d} ms")
        if isinstance(result, SendFailed):
            return f"{self._paint(BG_RED, '   ERROR')} ({result.strerror})"
        return self._paint(BG_RED, "NO REPLY")

    @staticmethod
    def get_label_width(destinations: Sequence[Destination]) -> int:
        """Get destination column width, including separator."""
        longest = max((len(d.label) for d in destinations), default=0)
        return max(MIN_LABEL_WIDTH, longest) + 1

    def render(
        self: "Presenter",
        destinations: Sequence[Destination],
        results: Sequence[ProbeResult],
    ) -> None:
        """
        Redraw the screen.

        Args:
            destinations: Probed destinations.
            results: Round results, aligned with destinations.
        """
        width = self.get_label_width(destinations)
        out = [CLEAR_SCREEN] if self.__color else []
        for dest, result in zip(destinations, results):
            out.append(f"{dest.label:<{width}}{self.format_result(result)}\n")
        self.__stream.write("".join(out))
        self.__stream.flush()

    def clear(self: "Presenter") -> None:
        """Clear screen on exit."""
        if self.__color:
            self.__stream.write(CLEAR_SCREEN)
            self.__stream.flush()
