# ---------------------------------------------------------------------
# Gufo ICMP Watch: Echo codec
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

"""
ICMP/ICMPv6 echo request/reply codec.

Both protocols share the same 8-octet echo header:

```
 0                   1                   2                   3
 0 1 2 3 4 5 6 7 8 9 0 1 2 3 4 5 6 7 8 9 0 1 2 3 4 5 6 7 8 9 0 1
+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+
|     Type      |     Code      |          Checksum             |
+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+
|           Identifier          |        Sequence Number        |
+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+
|     Data ...
+-+-+-+-+-
```

Attributes:
    ICMP_ECHO_REQUEST: ICMPv4 Echo Request type.
    ICMP_ECHO_REPLY: ICMPv4 Echo Reply type.
    ICMPV6_ECHO_REQUEST: ICMPv6 Echo Request type.
    ICMPV6_ECHO_REPLY: ICMPv6 Echo Reply type.
    HEADER_SIZE: Echo header size, in octets.
    DEFAULT_IDENTIFIER: Identifier placed into outgoing requests.
    DEFAULT_PAYLOAD: Data appended to outgoing requests.
"""

# Python modules
import struct
from typing import NamedTuple

# Gufo ICMP Watch modules
from .addr import IPv4, IPv6
from .error import TooShortError, UnexpectedTypeError

ICMP_ECHO_REQUEST = 8
ICMP_ECHO_REPLY = 0
ICMPV6_ECHO_REQUEST = 128
ICMPV6_ECHO_REPLY = 129

HEADER_SIZE = 8
IPV4_MIN_HEADER_SIZE = 20
DEFAULT_IDENTIFIER = 0xBEEF
DEFAULT_PAYLOAD = b"icmp_watch"

_HEADER = struct.Struct("!BBHHH")
_REQUEST_TYPE = {IPv4: ICMP_ECHO_REQUEST, IPv6: ICMPV6_ECHO_REQUEST}
_REPLY_TYPE = {IPv4: ICMP_ECHO_REPLY, IPv6: ICMPV6_ECHO_REPLY}


class Reply(NamedTuple):
    """
    Decoded echo reply.

    Attributes:
        seq: Sequence number.
        identifier: Identifier as seen on the wire.
    """

    seq: int
    identifier: int


def _check_afi(afi: int) -> None:
    if afi not in _REQUEST_TYPE:
        msg = f"afi must be {IPv4} or {IPv6}"
        raise ValueError(msg)


def checksum(data: bytes) -> int:
    """
    Calculate RFC-1071 Internet checksum.

    Args:
        data: Data to sum. Odd-sized data is padded with zero.

    Returns:
        16-bit ones-complement checksum.
    """
    if len(data) % 2:
        data += b"\x00"
    total = sum(struct.unpack(f"!{len(data) // 2}H", data))
    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)
    return ~total & 0xFFFF


def encode_request(
    afi: int,
    identifier: int = DEFAULT_IDENTIFIER,
    seq: int = 0,
    payload: bytes = DEFAULT_PAYLOAD,
) -> bytes:
    """
    Build echo request message.

    ICMPv4 checksum is calculated in place. ICMPv6 checksum
    covers the IPv6 pseudo-header, so it is left zeroed
    for the kernel to fill.

    Args:
        afi: Address family, 4 or 6.
        identifier: Request identifier, truncated to 16 bits.
        seq: Sequence number, truncated to 16 bits.
        payload: Request data.

    Returns:
        Encoded message, starting from the ICMP header.
    """
    _check_afi(afi)
    icmp_type = _REQUEST_TYPE[afi]
    identifier &= 0xFFFF
    seq &= 0xFFFF
    msg = _HEADER.pack(icmp_type, 0, 0, identifier, seq) + payload
    if afi == IPv6:
        return msg
    return _HEADER.pack(icmp_type, 0, checksum(msg), identifier, seq) + payload


def decode_reply(afi: int, data: bytes) -> Reply:
    """
    Parse echo reply message.

    Args:
        afi: Address family, 4 or 6.
        data: Message, starting from the ICMP header.

    Returns:
        Decoded reply.

    Raises:
        TooShortError: When data is shorter than the echo header.
        UnexpectedTypeError: When message is not an echo reply.
    """
    _check_afi(afi)
    if len(data) < HEADER_SIZE:
        msg = f"{len(data)} octets received, {HEADER_SIZE} required"
        raise TooShortError(msg)
    icmp_type, _, _, identifier, seq = _HEADER.unpack_from(data)
    if icmp_type != _REPLY_TYPE[afi]:
        raise UnexpectedTypeError(afi, icmp_type)
    return Reply(seq=seq, identifier=identifier)


def strip_ipv4_header(data: bytes) -> bytes:
    """
    Remove IPv4 header from the datagram.

    Raw IPv4 sockets pass the IP header along with the payload.

    Args:
        data: Raw datagram.

    Returns:
        Datagram payload.

    Raises:
        TooShortError: When datagram is truncated.
    """
    if len(data) < IPV4_MIN_HEADER_SIZE:
        msg = f"{len(data)} octets received, IPv4 header is incomplete"
        raise TooShortError(msg)
    ihl = (data[0] & 0x0F) * 4
    if ihl < IPV4_MIN_HEADER_SIZE or len(data) < ihl:
        msg = f"invalid IPv4 header length {ihl}"
        raise TooShortError(msg)
    return data[ihl:]
