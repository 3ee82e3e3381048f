# ---------------------------------------------------------------------
# Gufo ICMP Watch: EchoSocket implementation
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

"""
EchoSocket implementation.

Attributes:
    MAX_TTL: Maximal TTL/hop limit value.
    MAX_TOS: Maximal ToS/traffic class value.
    RECV_SIZE: Receive buffer for a single datagram.
"""

# Python modules
import logging
import socket
from enum import IntEnum
from typing import Dict, Optional, Tuple

# Gufo ICMP Watch modules
from .addr import IPv4, IPv6, VALID_AFI, Destination, get_family
from .codec import strip_ipv4_header
from .error import SocketSetupError

MAX_TTL = 255
MAX_TOS = 255
RECV_SIZE = 4096

logger = logging.getLogger(__name__)


class SelectionPolicy(IntEnum):
    """
    Socket type selection policy.

    Attributes:
        RAW: Use raw sockets only.
        DGRAM: Use datagram ICMP sockets only.
        RAW_DGRAM: Try raw socket, fall back to datagram.
        DGRAM_RAW: Try datagram socket, fall back to raw.
    """

    RAW = 0
    DGRAM = 1
    RAW_DGRAM = 2
    DGRAM_RAW = 3


_POLICY_TYPES: Dict[SelectionPolicy, Tuple[int, ...]] = {
    SelectionPolicy.RAW: (socket.SOCK_RAW,),
    SelectionPolicy.DGRAM: (socket.SOCK_DGRAM,),
    SelectionPolicy.RAW_DGRAM: (socket.SOCK_RAW, socket.SOCK_DGRAM),
    SelectionPolicy.DGRAM_RAW: (socket.SOCK_DGRAM, socket.SOCK_RAW),
}

_PROTO = {IPv4: socket.IPPROTO_ICMP, IPv6: socket.IPPROTO_ICMPV6}


class EchoSocket(object):
    """
    Long-lived ICMP socket for the given address family.

    Args:
        afi: Address Family. Either 4 or 6
        policy: Socket type selection policy.
        ttl: Set outgoing packet's TTL/hop limit.
            Use OS defaults when empty.
        tos: Set DSCP/TOS/TCLASS field to outgoing packets.
            Use OS defaults when empty.
        send_buffer_size: Send buffer size.
            Use OS defaults when empty.
        recv_buffer_size: Receive buffer size.
            Use OS defaults when empty.

    Raises:
        ValueError: On invalid settings.
        SocketSetupError: When no socket type allowed
            by policy can be opened.

    Note:
        Opening the Raw Socket may require super-user priveleges.
        Datagram ICMP sockets on Linux are controlled
        by the `net.ipv4.ping_group_range` sysctl.
    """

    def __init__(
        self: "EchoSocket",
        afi: int = IPv4,
        policy: SelectionPolicy = SelectionPolicy.DGRAM_RAW,
        ttl: Optional[int] = None,
        tos: Optional[int] = None,
        send_buffer_size: Optional[int] = None,
        recv_buffer_size: Optional[int] = None,
    ) -> None:
        if afi not in VALID_AFI:
            msg = f"afi must be {IPv4} or {IPv6}"
            raise ValueError(msg)
        # Check settings
        if ttl is not None and (ttl < 1 or ttl > MAX_TTL):
            msg = f"ttl must be in 1..{MAX_TTL} range"
            raise ValueError(msg)
        if tos is not None and (tos < 0 or tos > MAX_TOS):
            msg = f"tos must be in 0..{MAX_TOS} range"
            raise ValueError(msg)
        self.__afi = afi
        self.__family = get_family(afi)
        self.__sock, self.__is_raw = self._open(afi, policy)
        try:
            self._setup(ttl, tos, send_buffer_size, recv_buffer_size)
        except OSError:
            self.__sock.close()
            raise

    def _open(
        self: "EchoSocket", afi: int, policy: SelectionPolicy
    ) -> Tuple[socket.socket, bool]:
        """
        Open socket according to policy.

        Returns:
            Tuple of (`socket`, `is raw`).
        """
        last_error: Optional[OSError] = None
        for sock_type in _POLICY_TYPES[SelectionPolicy(policy)]:
            try:
                sock = socket.socket(self.__family, sock_type, _PROTO[afi])
            except OSError as e:
                logger.debug(
                    "IPv%d: cannot open %s socket: %s",
                    afi,
                    sock_type.name,
                    e,
                )
                last_error = e
                continue
            sock.setblocking(False)
            logger.debug("IPv%d: %s socket opened", afi, sock_type.name)
            return sock, sock_type == socket.SOCK_RAW
        raise SocketSetupError(afi, last_error)

    def _setup(
        self: "EchoSocket",
        ttl: Optional[int],
        tos: Optional[int],
        send_buffer_size: Optional[int],
        recv_buffer_size: Optional[int],
    ) -> None:
        """Apply socket options."""
        if ttl is not None:
            if self.__afi == IPv4:
                self.__sock.setsockopt(socket.IPPROTO_IP, socket.IP_TTL, ttl)
            else:
                self.__sock.setsockopt(
                    socket.IPPROTO_IPV6, socket.IPV6_UNICAST_HOPS, ttl
                )
        if tos is not None:
            if self.__afi == IPv4:
                self.__sock.setsockopt(socket.IPPROTO_IP, socket.IP_TOS, tos)
            elif hasattr(socket, "IPV6_TCLASS"):
                self.__sock.setsockopt(
                    socket.IPPROTO_IPV6, socket.IPV6_TCLASS, tos
                )
        if send_buffer_size is not None:
            self.__sock.setsockopt(
                socket.SOL_SOCKET, socket.SO_SNDBUF, send_buffer_size
            )
        if recv_buffer_size is not None:
            self.__sock.setsockopt(
                socket.SOL_SOCKET, socket.SO_RCVBUF, recv_buffer_size
            )

    @property
    def afi(self: "EchoSocket") -> int:
        """Address family."""
        return self.__afi

    @property
    def is_raw(self: "EchoSocket") -> bool:
        """True for raw socket, False for datagram one."""
        return self.__is_raw

    def fileno(self: "EchoSocket") -> int:
        """Get socket's file descriptor, -1 when closed."""
        return self.__sock.fileno()

    def sendto(self: "EchoSocket", data: bytes, dest: Destination) -> None:
        """
        Send ICMP message.

        Args:
            data: Message, starting from the ICMP header.
            dest: Destination.
        """
        self.__sock.sendto(data, dest.sockaddr)

    def recvfrom(self: "EchoSocket") -> Optional[Tuple[bytes, bytes]]:
        """
        Receive single datagram.

        Returns:
            * `None` - when no datagram is waiting.
            * Tuple of (`message`, `source address`).
        """
        try:
            data, addr = self.__sock.recvfrom(RECV_SIZE)
        except (BlockingIOError, InterruptedError):
            return None
        if self.__is_raw and self.__afi == IPv4:
            data = strip_ipv4_header(data)
        # Drop IPv6 zone suffix
        host = addr[0].split("%", 1)[0]
        return data, socket.inet_pton(self.__family, host)

    def close(self: "EchoSocket") -> None:
        """Close socket."""
        self.__sock.close()
