# ---------------------------------------------------------------------
# Gufo ICMP Watch: ICMPv4/ICMPv6 reachability monitor
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

"""
Gufo ICMP Watch is the round-based IPv4/IPv6 reachability monitor.

Attributes:
    __version__: Current version.
"""

# Gufo ICMP Watch modules
from .addr import IPv4, IPv6, Destination
from .engine import ProbeEngine
from .result import ProbeResult, Replied, SendFailed, TimedOut
from .socket import SelectionPolicy

__version__: str = "0.1.0"
__all__ = [
    "Destination",
    "IPv4",
    "IPv6",
    "ProbeEngine",
    "ProbeResult",
    "Replied",
    "SelectionPolicy",
    "SendFailed",
    "TimedOut",
    "__version__",
]
