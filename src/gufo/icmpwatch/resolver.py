# ---------------------------------------------------------------------
# Gufo ICMP Watch: Address resolver
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

"""Destination name resolution."""

# Python modules
import logging
import socket
from typing import Iterable, List, Optional

# Gufo ICMP Watch modules
from .addr import IPv4, IPv6, Destination, get_family
from .error import ResolveError

logger = logging.getLogger(__name__)

_AFI = {socket.AF_INET: IPv4, socket.AF_INET6: IPv6}


def resolve_one(name: str, afi: Optional[int] = None) -> Destination:
    """
    Resolve single name.

    Args:
        name: Host name or textual IP address.
        afi: Restrict to address family, when set.

    Returns:
        Destination for the first resolved address.

    Raises:
        ResolveError: When name cannot be resolved.
    """
    family = get_family(afi) if afi else socket.AF_UNSPEC
    try:
        infos = socket.getaddrinfo(
            name, None, family=family, type=socket.SOCK_DGRAM
        )
    except (socket.gaierror, UnicodeError) as e:
        reason = e.strerror if isinstance(e, socket.gaierror) else str(e)
        raise ResolveError(name, reason or str(e)) from e
    for fam, _, _, _, sockaddr in infos:
        if fam not in _AFI:
            continue
        scope_id = sockaddr[3] if fam == socket.AF_INET6 else 0
        dest = Destination.from_ip(
            str(sockaddr[0]), label=name, scope_id=scope_id
        )
        logger.debug("%s resolved to %s", name, dest.text)
        return dest
    raise ResolveError(name, "no usable address")


def resolve(
    names: Iterable[str], afi: Optional[int] = None
) -> List[Destination]:
    """
    Resolve all names.

    No partial result is ever returned: the first failure
    aborts the resolution.

    Args:
        names: Host names or textual IP addresses.
        afi: Restrict to address family, when set.

    Returns:
        List of destinations in the order of names.

    Raises:
        ResolveError: When any name cannot be resolved.
    """
    return [resolve_one(name, afi=afi) for name in names]
