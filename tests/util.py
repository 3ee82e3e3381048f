# ---------------------------------------------------------------------
# Gufo ICMP Watch: Test Utilities
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

# Python modules
import errno
import os
import socket
import struct
from functools import cached_property
from typing import Any, Callable, Dict, List, Optional, Tuple

# Gufo ICMP Watch modules
from gufo.icmpwatch.addr import IPv4, Destination
from gufo.icmpwatch.codec import (
    DEFAULT_IDENTIFIER,
    ICMP_ECHO_REPLY,
    ICMPV6_ECHO_REPLY,
)

Responder = Callable[[bytes, Destination], Optional[bytes]]


def _can_ping(family: int, proto: int, addr: str) -> bool:
    for sock_type in (socket.SOCK_DGRAM, socket.SOCK_RAW):
        try:
            s = socket.socket(family, sock_type, proto)
        except OSError:
            continue
        try:
            s.bind((addr, 0))
            return True
        except OSError:
            pass
        finally:
            s.close()
    return False


class Caps(object):
    @cached_property
    def has_ipv4(self: "Caps") -> bool:
        """
        Check system allows IPv4 ICMP sockets.

        Returns:
            * True - if either datagram or raw socket can be opened.
            * False - if ICMP sockets are denied.
        """
        return _can_ping(socket.AF_INET, socket.IPPROTO_ICMP, "127.0.0.1")

    @cached_property
    def has_ipv6(self: "Caps") -> bool:
        """
        Check system allows IPv6 ICMP sockets on loopback.

        Returns:
            * True - if either datagram or raw socket can be opened.
            * False - if ICMPv6 sockets are denied.
        """
        return _can_ping(socket.AF_INET6, socket.IPPROTO_ICMPV6, "::1")

    @cached_property
    def is_denied(self: "Caps") -> bool:
        """Check if all ICMP sockets are denied."""
        return not (self.has_ipv4 or self.has_ipv6)

    @cached_property
    def loopbacks(self: "Caps") -> List[str]:
        """
        Get list of loopback addresses.

        Returns:
            List of IPv4/IPv6 loopbback addresses for all
            allowed protocols. Empty if ICMP sockets are
            denied.
        """
        r: List[str] = []
        if self.has_ipv4:
            r.append("127.0.0.1")
        if self.has_ipv6:
            r.append("::1")
        return r


def as_str(v: Dict[str, Any]) -> str:
    """
    Format parameters for @parametrize(..., ids).

    Args:
        v: Input parameters.

    Returns:
        String to display as test id.
    """
    return str(v)


def make_reply(
    afi: int,
    seq: int,
    identifier: int = DEFAULT_IDENTIFIER,
    icmp_type: Optional[int] = None,
) -> bytes:
    """Build echo reply message."""
    if icmp_type is None:
        icmp_type = ICMP_ECHO_REPLY if afi == IPv4 else ICMPV6_ECHO_REPLY
    return struct.pack("!BBHHH", icmp_type, 0, 0, identifier, seq)


def get_seq(request: bytes) -> int:
    """Get sequence number of the encoded echo request."""
    return int(struct.unpack_from("!H", request, 6)[0])


def echo(afi: int) -> Responder:
    """Responder replying to every request."""
    reply_type = ICMP_ECHO_REPLY if afi == IPv4 else ICMPV6_ECHO_REPLY

    def inner(data: bytes, dest: Destination) -> bytes:
        return bytes([reply_type]) + data[1:]

    return inner


class FakeSocket(object):
    """
    Socketpair-backed echo transport.

    Inbound datagrams are framed as
    <address length><address><message>.

    Args:
        afi: Address family.
        is_raw: Pretend to be raw socket.
        responder: Produce reply for every sent request.
    """

    def __init__(
        self: "FakeSocket",
        afi: int,
        is_raw: bool = False,
        responder: Optional[Responder] = None,
    ) -> None:
        self.afi = afi
        self.is_raw = is_raw
        self.responder = responder
        self.sent: List[Tuple[bytes, Destination]] = []
        self.fail: Dict[bytes, int] = {}
        self._rx, self._tx = socket.socketpair(
            socket.AF_UNIX, socket.SOCK_DGRAM
        )
        self._rx.setblocking(False)

    def fileno(self: "FakeSocket") -> int:
        return self._rx.fileno()

    def sendto(self: "FakeSocket", data: bytes, dest: Destination) -> None:
        if self._rx.fileno() < 0:
            raise OSError(errno.EBADF, os.strerror(errno.EBADF))
        code = self.fail.get(dest.address)
        if code:
            raise OSError(code, os.strerror(code))
        self.sent.append((data, dest))
        if self.responder:
            reply = self.responder(data, dest)
            if reply is not None:
                self.inject(dest.address, reply)

    def inject(self: "FakeSocket", src: bytes, data: bytes) -> None:
        """Put datagram into receive queue."""
        self._tx.send(bytes([len(src)]) + src + data)

    def recvfrom(self: "FakeSocket") -> Optional[Tuple[bytes, bytes]]:
        try:
            pkt = self._rx.recv(4096)
        except BlockingIOError:
            return None
        n = pkt[0]
        return pkt[1 + n :], pkt[1 : 1 + n]

    def close(self: "FakeSocket") -> None:
        self._rx.close()
        self._tx.close()


caps = Caps()
