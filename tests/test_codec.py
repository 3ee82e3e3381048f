# ---------------------------------------------------------------------
# Gufo ICMP Watch: Test EchoCodec
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

# Python modules
import struct

# Third-party modules
import pytest

# Gufo ICMP Watch modules
from gufo.icmpwatch.codec import (
    DEFAULT_IDENTIFIER,
    DEFAULT_PAYLOAD,
    HEADER_SIZE,
    ICMP_ECHO_REQUEST,
    ICMPV6_ECHO_REQUEST,
    Reply,
    checksum,
    decode_reply,
    encode_request,
    strip_ipv4_header,
)
from gufo.icmpwatch.error import (
    DecodeError,
    TooShortError,
    UnexpectedTypeError,
)

from .util import make_reply


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        # RFC-1071 example
        (b"\x00\x01\xf2\x03\xf4\xf5\xf6\xf7", 0x220D),
        (b"\x01", 0xFEFF),
        (b"", 0xFFFF),
        (b"\xff\xff", 0x0000),
    ],
)
def test_checksum(data: bytes, expected: int) -> None:
    assert checksum(data) == expected


def test_encode_ipv4() -> None:
    msg = encode_request(4, seq=17)
    icmp_type, code, _, identifier, seq = struct.unpack_from("!BBHHH", msg)
    assert icmp_type == ICMP_ECHO_REQUEST
    assert code == 0
    assert identifier == DEFAULT_IDENTIFIER
    assert seq == 17
    assert msg[HEADER_SIZE:] == DEFAULT_PAYLOAD
    # Valid checksum sums up to zero
    assert checksum(msg) == 0


def test_encode_ipv6() -> None:
    msg = encode_request(6, identifier=0x1234, seq=65535, payload=b"xyz")
    hdr = struct.pack("!BBHHH", ICMPV6_ECHO_REQUEST, 0, 0, 0x1234, 65535)
    assert msg == hdr + b"xyz"


@pytest.mark.parametrize(
    ("seq", "expected"), [(0, 0), (0xFFFF, 0xFFFF), (0x10001, 1)]
)
def test_encode_seq_wrap(seq: int, expected: int) -> None:
    msg = encode_request(4, seq=seq)
    assert struct.unpack_from("!H", msg, 6)[0] == expected


def test_encode_invalid_afi() -> None:
    with pytest.raises(ValueError):
        encode_request(5, seq=1)


@pytest.mark.parametrize("afi", [4, 6])
def test_decode_reply(afi: int) -> None:
    r = decode_reply(afi, make_reply(afi, seq=42) + b"payload")
    assert r == Reply(seq=42, identifier=DEFAULT_IDENTIFIER)


@pytest.mark.parametrize("afi", [4, 6])
@pytest.mark.parametrize("size", [0, 1, HEADER_SIZE - 1])
def test_decode_too_short(afi: int, size: int) -> None:
    with pytest.raises(TooShortError):
        decode_reply(afi, make_reply(afi, seq=1)[:size])


@pytest.mark.parametrize(
    ("afi", "icmp_type"),
    [
        (4, 8),  # Echo request
        (4, 3),  # Destination unreachable
        (4, 129),  # ICMPv6 echo reply
        (6, 128),  # Echo request
        (6, 0),  # ICMPv4 echo reply
    ],
)
def test_decode_unexpected_type(afi: int, icmp_type: int) -> None:
    with pytest.raises(UnexpectedTypeError) as exc:
        decode_reply(afi, make_reply(afi, seq=1, icmp_type=icmp_type))
    assert exc.value.icmp_type == icmp_type
    assert isinstance(exc.value, DecodeError)


def test_strip_ipv4_header() -> None:
    hdr = bytes([0x45]) + bytes(19)
    assert strip_ipv4_header(hdr + b"icmp") == b"icmp"


def test_strip_ipv4_header_options() -> None:
    hdr = bytes([0x46]) + bytes(23)
    assert strip_ipv4_header(hdr + b"icmp") == b"icmp"


@pytest.mark.parametrize(
    "data",
    [
        b"",
        bytes([0x45]) + bytes(10),
        bytes([0x4F]) + bytes(30),  # IHL=60
        bytes([0x42]) + bytes(30),  # IHL=8
    ],
)
def test_strip_ipv4_header_truncated(data: bytes) -> None:
    with pytest.raises(TooShortError):
        strip_ipv4_header(data)
