# ---------------------------------------------------------------------
# Gufo ICMP Watch: Exceptions
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

"""Gufo ICMP Watch exceptions."""

# Python modules
from typing import Optional

PERMISSION_HINT = (
    "To allow root to use icmp sockets, run:\n"
    '$ sudo sysctl -w net.ipv4.ping_group_range="0 0"\n'
    "To allow all users to use icmp sockets, run:\n"
    '$ sudo sysctl -w net.ipv4.ping_group_range="0 2147483647"'
)


class IcmpWatchError(Exception):
    """Base class for all Gufo ICMP Watch errors."""


class SocketSetupError(IcmpWatchError):
    """
    Failed to open ICMP socket.

    Args:
        afi: Address family.
        error: Last OS error reported.
    """

    def __init__(
        self: "SocketSetupError", afi: int, error: Optional[OSError] = None
    ) -> None:
        self.afi = afi
        self.error = error
        reason = error.strerror if error and error.strerror else str(error)
        super().__init__(f"cannot open ICMP socket for IPv{afi}: {reason}")

    @property
    def hint(self: "SocketSetupError") -> str:
        """Suggested remedy for the operator."""
        return PERMISSION_HINT


class ResolveError(IcmpWatchError):
    """
    Failed to resolve destination name.

    Args:
        name: Name as given by user.
        reason: Resolver's explanation.
    """

    def __init__(self: "ResolveError", name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"cannot resolve {name}: {reason}")


class DecodeError(IcmpWatchError):
    """Inbound datagram is not a valid echo reply."""


class TooShortError(DecodeError):
    """Datagram is shorter than the protocol header."""


class UnexpectedTypeError(DecodeError):
    """Datagram is not an echo reply."""

    def __init__(
        self: "UnexpectedTypeError", afi: int, icmp_type: int
    ) -> None:
        self.afi = afi
        self.icmp_type = icmp_type
        super().__init__(f"unexpected ICMP type {icmp_type} for IPv{afi}")


class ProtocolError(IcmpWatchError):
    """
    Round aborted due to malformed inbound data.

    Raised in strict mode only.

    Args:
        afi: Address family of the socket.
        error: Decoder's error.
    """

    def __init__(self: "ProtocolError", afi: int, error: DecodeError) -> None:
        self.afi = afi
        self.error = error
        super().__init__(f"protocol error on IPv{afi} socket: {error}")
