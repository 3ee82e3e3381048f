# ---------------------------------------------------------------------
# Gufo ICMP Watch: Destinations
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

"""
Destination data model.

Attributes:
    IPv4: IPv4 address family.
    IPv6: IPv6 address family.
    VALID_AFI: Supported address families.
"""

# Python modules
import socket
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

IPv4 = 4
IPv6 = 6
VALID_AFI = (IPv4, IPv6)

_ADDR_LEN: Dict[int, int] = {IPv4: 4, IPv6: 16}
_FAMILY: Dict[int, int] = {IPv4: socket.AF_INET, IPv6: socket.AF_INET6}


def get_afi(address: str) -> int:
    """
    Get address family (AFI) for a given address.

    Args:
        address: Textual IP address.

    Returns:
        * `4` for IPv4
        * `6` for IPv6
    """
    if ":" in address:
        return IPv6
    return IPv4


def get_family(afi: int) -> int:
    """Map AFI to the `socket` module's address family."""
    try:
        return _FAMILY[afi]
    except KeyError:
        msg = f"afi must be {IPv4} or {IPv6}"
        raise ValueError(msg) from None


@dataclass(frozen=True)
class Destination(object):
    """
    Resolved probe destination.

    Args:
        afi: Address family, 4 or 6.
        address: Raw address in network byte order.
        label: Display name, usually as typed by user.
        scope_id: IPv6 zone index for link-local addresses.
    """

    afi: int
    address: bytes
    label: str
    scope_id: int = 0

    def __post_init__(self: "Destination") -> None:
        if self.afi not in VALID_AFI:
            msg = f"afi must be {IPv4} or {IPv6}"
            raise ValueError(msg)
        if len(self.address) != _ADDR_LEN[self.afi]:
            msg = (
                f"IPv{self.afi} address must be "
                f"{_ADDR_LEN[self.afi]} bytes long"
            )
            raise ValueError(msg)

    @classmethod
    def from_ip(
        cls, ip: str, label: Optional[str] = None, scope_id: int = 0
    ) -> "Destination":
        """
        Build destination from textual address.

        Args:
            ip: IPv4 or IPv6 address. IPv6 zone suffix (`%eth0`)
                is dropped.
            label: Display name. Use address when empty.
            scope_id: IPv6 zone index.

        Returns:
            Destination instance.

        Raises:
            ValueError: On invalid address.
        """
        afi = get_afi(ip)
        bare = ip.split("%", 1)[0]
        try:
            raw = socket.inet_pton(get_family(afi), bare)
        except OSError:
            msg = f"invalid IPv{afi} address: {ip}"
            raise ValueError(msg) from None
        return cls(afi=afi, address=raw, label=label or ip, scope_id=scope_id)

    @property
    def text(self: "Destination") -> str:
        """Printable address."""
        return socket.inet_ntop(get_family(self.afi), self.address)

    @property
    def sockaddr(
        self: "Destination",
    ) -> Union[Tuple[str, int], Tuple[str, int, int, int]]:
        """Address tuple suitable for `socket.sendto()`."""
        if self.afi == IPv4:
            return (self.text, 0)
        return (self.text, 0, 0, self.scope_id)
