# ---------------------------------------------------------------------
# Gufo ICMP Watch: Test resolver
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

# Python modules
import socket
from typing import Any, List

# Third-party modules
import pytest

# Gufo ICMP Watch modules
from gufo.icmpwatch.addr import IPv4, IPv6, Destination
from gufo.icmpwatch.error import ResolveError
from gufo.icmpwatch.resolver import resolve, resolve_one


def test_resolve_numeric() -> None:
    r = resolve(["127.0.0.1", "::1"])
    assert r == [
        Destination.from_ip("127.0.0.1"),
        Destination.from_ip("::1"),
    ]


def test_resolve_keeps_label(monkeypatch: pytest.MonkeyPatch) -> None:
    def getaddrinfo(host: str, *args: Any, **kwargs: Any) -> List[Any]:
        return [
            (socket.AF_INET6, socket.SOCK_DGRAM, 17, "", ("::1", 0, 0, 0)),
            (socket.AF_INET, socket.SOCK_DGRAM, 17, "", ("127.0.0.1", 0)),
        ]

    monkeypatch.setattr(socket, "getaddrinfo", getaddrinfo)
    d = resolve_one("router.example.com")
    assert d.label == "router.example.com"
    assert d.afi == IPv6
    assert d.text == "::1"


def test_resolve_afi() -> None:
    assert resolve_one("127.0.0.1", afi=IPv4).afi == IPv4
    with pytest.raises(ResolveError):
        resolve_one("::1", afi=IPv4)


def test_resolve_all_or_nothing(monkeypatch: pytest.MonkeyPatch) -> None:
    real_getaddrinfo = socket.getaddrinfo

    def getaddrinfo(host: str, *args: Any, **kwargs: Any) -> List[Any]:
        if host == "broken.example.com":
            msg = "Name or service not known"
            raise socket.gaierror(socket.EAI_NONAME, msg)
        return real_getaddrinfo(host, *args, **kwargs)

    monkeypatch.setattr(socket, "getaddrinfo", getaddrinfo)
    with pytest.raises(ResolveError) as exc:
        resolve(["127.0.0.1", "broken.example.com", "::1"])
    assert exc.value.name == "broken.example.com"
    assert exc.value.reason == "Name or service not known"
    assert "broken.example.com" in str(exc.value)


def test_resolve_no_usable_address(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(socket, "getaddrinfo", lambda *a, **kw: [])
    with pytest.raises(ResolveError):
        resolve_one("empty.example.com")
