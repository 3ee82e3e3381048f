# ---------------------------------------------------------------------
# Gufo ICMP Watch: ProbeEngine implementation
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

"""ProbeEngine implementation."""

# Python modules
import asyncio
import errno
import logging
from collections import deque
from time import perf_counter
from types import TracebackType
from typing import (
    Deque,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    Type,
)

# Gufo ICMP Watch modules
from .addr import IPv4, IPv6, Destination
from .codec import (
    DEFAULT_IDENTIFIER,
    DEFAULT_PAYLOAD,
    decode_reply,
    encode_request,
)
from .error import DecodeError, ProtocolError
from .proto import EchoSocketProto
from .result import ProbeResult, Replied, SendFailed, TimedOut
from .socket import EchoSocket, SelectionPolicy

SEQ_MASK = 0xFFFF

logger = logging.getLogger(__name__)


class SequenceCounter(object):
    """
    Round sequence number allocator.

    Wraps at 16 bits, the width of the echo sequence field.

    Args:
        start: Initial value.
    """

    def __init__(self: "SequenceCounter", start: int = 0) -> None:
        self.__value = start & SEQ_MASK

    @property
    def value(self: "SequenceCounter") -> int:
        """Value to be returned by the next `next()` call."""
        return self.__value

    def next(self: "SequenceCounter") -> int:
        """
        Allocate sequence number.

        Returns:
            Current value. Counter is advanced.
        """
        v = self.__value
        self.__value = (v + 1) & SEQ_MASK
        return v


class _Round(object):
    """
    State of the running probe round.

    Args:
        size: Number of destinations.
        seq: Round's sequence number.
        deadline: Absolute deadline, `perf_counter()` based.
    """

    def __init__(self: "_Round", size: int, seq: int, deadline: float) -> None:
        self.seq = seq
        self.deadline = deadline
        self.results: List[ProbeResult] = [TimedOut()] * size
        self.sent_at: List[float] = [0.0] * size
        # (afi, address) -> indexes of destinations awaiting reply
        self.pending: Dict[Tuple[int, bytes], Deque[int]] = {}
        self.n_pending = 0
        self.wakeup = asyncio.Event()
        self.error: Optional[ProtocolError] = None

    def add(self: "_Round", idx: int, dest: Destination, ts: float) -> None:
        """Put sent request into pending set."""
        self.sent_at[idx] = ts
        key = (dest.afi, dest.address)
        if key in self.pending:
            self.pending[key].append(idx)
        else:
            self.pending[key] = deque([idx])
        self.n_pending += 1

    def match(self: "_Round", afi: int, address: bytes) -> Optional[int]:
        """
        Find and pop pending destination.

        Returns:
            Destination index or None, if not pending.
        """
        key = (afi, address)
        waiting = self.pending.get(key)
        if not waiting:
            return None
        idx = waiting.popleft()
        if not waiting:
            del self.pending[key]
        self.n_pending -= 1
        return idx


class ProbeEngine(object):
    """
    Run bounded ICMPv4/ICMPv6 probe rounds.

    Owns one socket per address family for the whole lifetime.
    Every round sends single echo request to each destination and
    awaits for replies until all arrived or the timeout expired.

    Args:
        afis: Address families to open sockets for.
        policy: Socket type selection policy.
        identifier: ICMP identifier of outgoing requests.
        payload: Data appended to outgoing requests.
        strict: Abort the round with `ProtocolError` on malformed
            inbound datagrams. Discard and log them otherwise.
        ttl: Set outgoing packet's TTL/hop limit.
            Use OS defaults when empty.
        tos: Set DSCP/TOS/TCLASS field to outgoing packets.
            Use OS defaults when empty.
        send_buffer_size: Send buffer size.
            Use OS defaults when empty.
        recv_buffer_size: Receive buffer size.
            Use OS defaults when empty.
        sockets: Prebuilt transports to use instead of opening
            sockets. `afis` is ignored when set.
        seq: Initial sequence number.

    Raises:
        SocketSetupError: When socket cannot be opened.

    Example:
        ``` py
        from gufo.icmpwatch import Destination, ProbeEngine

        async def probe():
            with ProbeEngine() as engine:
                results = await engine.run_round(
                    [Destination.from_ip("127.0.0.1")], timeout=1.0
                )
            print(results)
        ```
    """

    def __init__(
        self: "ProbeEngine",
        afis: Iterable[int] = (IPv4, IPv6),
        *,
        policy: SelectionPolicy = SelectionPolicy.DGRAM_RAW,
        identifier: int = DEFAULT_IDENTIFIER,
        payload: bytes = DEFAULT_PAYLOAD,
        strict: bool = False,
        ttl: Optional[int] = None,
        tos: Optional[int] = None,
        send_buffer_size: Optional[int] = None,
        recv_buffer_size: Optional[int] = None,
        sockets: Optional[Iterable[EchoSocketProto]] = None,
        seq: int = 0,
    ) -> None:
        self.__identifier = identifier & 0xFFFF
        self.__payload = payload
        self.__strict = strict
        self.__seq = SequenceCounter(seq)
        self.__round: Optional[_Round] = None
        self.__sockets: Dict[int, EchoSocketProto] = {}
        if sockets is not None:
            for sock in sockets:
                self.__sockets[sock.afi] = sock
            return
        try:
            for afi in afis:
                if afi in self.__sockets:
                    continue
                self.__sockets[afi] = EchoSocket(
                    afi=afi,
                    policy=policy,
                    ttl=ttl,
                    tos=tos,
                    send_buffer_size=send_buffer_size,
                    recv_buffer_size=recv_buffer_size,
                )
        except Exception:
            self.close()
            raise

    def __enter__(self: "ProbeEngine") -> "ProbeEngine":
        return self

    def __exit__(
        self: "ProbeEngine",
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def close(self: "ProbeEngine") -> None:
        """Close all sockets."""
        for sock in self.__sockets.values():
            sock.close()

    def get_socket(self: "ProbeEngine", afi: int) -> Optional[EchoSocketProto]:
        """
        Get socket for address family.

        Args:
            afi: Address family.

        Returns:
            Socket or None, if the family is not enabled.
        """
        return self.__sockets.get(afi)

    def next_seq(self: "ProbeEngine") -> int:
        """Allocate sequence number for the next round."""
        return self.__seq.next()

    async def run_round(
        self: "ProbeEngine",
        destinations: Sequence[Destination],
        seq: Optional[int] = None,
        timeout: float = 1.0,
    ) -> List[ProbeResult]:
        """
        Run single probe round.

        Args:
            destinations: Destinations to probe.
            seq: Sequence number. Allocate next one when empty.
            timeout: Time to wait for replies, in seconds.

        Returns:
            List of results, one per destination, in the same order:

            * `Replied` - reply received.
            * `TimedOut` - no reply before timeout.
            * `SendFailed` - request cannot be sent.

        Raises:
            ValueError: On non-positive timeout.
            RuntimeError: When another round is running.
            ProtocolError: On malformed reply in strict mode.
        """
        if timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)
        if self.__round is not None:
            msg = "probe round is already running"
            raise RuntimeError(msg)
        if seq is None:
            seq = self.next_seq()
        loop = asyncio.get_running_loop()
        deadline = perf_counter() + timeout
        rnd = _Round(len(destinations), seq & SEQ_MASK, deadline)
        self.__round = rnd
        readers: List[int] = []
        try:
            for sock in self.__sockets.values():
                fd = sock.fileno()
                if fd < 0:
                    continue  # Closed
                loop.add_reader(fd, self._on_read, sock, rnd)
                readers.append(fd)
            self._send_all(destinations, rnd)
            await self._wait(rnd)
        finally:
            for fd in readers:
                loop.remove_reader(fd)
            self.__round = None
        return rnd.results

    def _send_all(
        self: "ProbeEngine", destinations: Sequence[Destination], rnd: _Round
    ) -> None:
        """Send echo request to every destination."""
        requests: Dict[int, bytes] = {}
        for idx, dest in enumerate(destinations):
            sock = self.__sockets.get(dest.afi)
            if sock is None:
                rnd.results[idx] = SendFailed(errno.EAFNOSUPPORT)
                continue
            req = requests.get(dest.afi)
            if req is None:
                req = encode_request(
                    dest.afi, self.__identifier, rnd.seq, self.__payload
                )
                requests[dest.afi] = req
            ts = perf_counter()
            try:
                sock.sendto(req, dest)
            except OSError as e:
                logger.debug("Cannot send to %s: %s", dest.label, e)
                rnd.results[idx] = SendFailed(e.errno or errno.EIO)
                continue
            rnd.add(idx, dest, ts)

    async def _wait(self: "ProbeEngine", rnd: _Round) -> None:
        """Await for replies until all received or deadline."""
        while rnd.n_pending:
            remaining = rnd.deadline - perf_counter()
            if remaining <= 0:
                break
            rnd.wakeup.clear()
            try:
                await asyncio.wait_for(rnd.wakeup.wait(), remaining)
            except asyncio.TimeoutError:
                continue  # Recheck against our clock
            if rnd.error:
                raise rnd.error

    def _on_read(
        self: "ProbeEngine", sock: EchoSocketProto, rnd: _Round
    ) -> None:
        """Handle socket read event."""
        try:
            r = sock.recvfrom()
        except DecodeError as e:
            self._on_malformed(sock, rnd, e)
            return
        except OSError as e:
            logger.warning("IPv%d: receive error: %s", sock.afi, e)
            return
        if r is None:
            return
        ts = perf_counter()
        data, src = r
        try:
            reply = decode_reply(sock.afi, data)
        except DecodeError as e:
            self._on_malformed(sock, rnd, e)
            return
        if sock.is_raw and reply.identifier != self.__identifier:
            return  # Foreign request
        if reply.seq != rnd.seq:
            logger.debug(
                "IPv%d: discarding stale reply seq=%d (round seq=%d)",
                sock.afi,
                reply.seq,
                rnd.seq,
            )
            return
        if ts >= rnd.deadline:
            return  # Too late
        idx = rnd.match(sock.afi, src)
        if idx is None:
            logger.debug(
                "IPv%d: discarding reply from unknown source", sock.afi
            )
            return
        rnd.results[idx] = Replied(ts - rnd.sent_at[idx])
        rnd.wakeup.set()

    def _on_malformed(
        self: "ProbeEngine", sock: EchoSocketProto, rnd: _Round, e: DecodeError
    ) -> None:
        """Handle undecodable datagram."""
        if not self.__strict:
            logger.debug(
                "IPv%d: discarding malformed datagram: %s", sock.afi, e
            )
            return
        if rnd.error is None:
            rnd.error = ProtocolError(sock.afi, e)
            rnd.wakeup.set()
