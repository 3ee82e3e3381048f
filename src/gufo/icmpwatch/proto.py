# ---------------------------------------------------------------------
# Gufo ICMP Watch: EchoSocketProto
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

"""EchoSocket protocol definition."""

# Python modules
from typing import Optional, Protocol, Tuple

# Gufo ICMP Watch modules
from .addr import Destination


class EchoSocketProto(Protocol):
    """
    Echo socket protocol.

    Transport used by the ProbeEngine to exchange echo
    messages for a single address family.
    """

    @property
    def afi(self: "EchoSocketProto") -> int:
        """Address family, 4 or 6."""
        ...

    @property
    def is_raw(self: "EchoSocketProto") -> bool:
        """
        Check if socket sees all ICMP traffic.

        Raw sockets receive replies to foreign requests
        and must be filtered by identifier. Datagram sockets
        are demultiplexed by the kernel.
        """
        ...

    def fileno(self: "EchoSocketProto") -> int:
        """
        Get socket's file descriptor.

        Returns:
            File descriptor or -1 when closed.
        """
        ...

    def sendto(
        self: "EchoSocketProto", data: bytes, dest: Destination
    ) -> None:
        """
        Send ICMP message.

        Args:
            data: Message, starting from the ICMP header.
            dest: Destination.

        Raises:
            OSError: When the message cannot be sent.
        """
        ...

    def recvfrom(self: "EchoSocketProto") -> Optional[Tuple[bytes, bytes]]:
        """
        Receive single datagram.

        Returns:
            * `None` - when no datagram is waiting.
            * Tuple of (`message`, `source address`),
                where message starts from the ICMP header
                and the address is in network byte order.

        Raises:
            DecodeError: When datagram cannot be unwrapped.
            OSError: On socket error.
        """
        ...

    def close(self: "EchoSocketProto") -> None:
        """Close socket."""
        ...
