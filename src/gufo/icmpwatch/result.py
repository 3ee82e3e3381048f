# ---------------------------------------------------------------------
# Gufo ICMP Watch: Probe results
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

"""Per-destination probe outcomes."""

# Python modules
import os
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Replied(object):
    """
    Echo reply received in time.

    Args:
        latency: Round-trip time, in seconds.
    """

    latency: float

    @property
    def ms(self: "Replied") -> float:
        """Round-trip time, in milliseconds."""
        return self.latency * 1000.0


@dataclass(frozen=True)
class TimedOut(object):
    """No reply before the deadline."""


@dataclass(frozen=True)
class SendFailed(object):
    """
    Echo request was not sent.

    Args:
        errno: OS error code.
    """

    errno: int

    @property
    def strerror(self: "SendFailed") -> str:
        """System error description."""
        return os.strerror(self.errno)


ProbeResult = Union[Replied, TimedOut, SendFailed]
