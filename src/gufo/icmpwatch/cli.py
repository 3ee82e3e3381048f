# ---------------------------------------------------------------------
# Gufo ICMP Watch: Command-line utility
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# See LICENSE.md for details
# ---------------------------------------------------------------------
"""
`gufo-icmpwatch` command line utility.

Attributes:
    NAME: Utility's name.
"""

# Python modules
import argparse
import asyncio
import logging
import signal
import sys
from enum import IntEnum
from time import perf_counter
from typing import List, NoReturn, Optional, Sequence

# Gufo ICMP Watch modules
from .addr import IPv4, IPv6, Destination
from .engine import ProbeEngine
from .error import ProtocolError, ResolveError, SocketSetupError
from .presenter import Presenter
from .resolver import resolve
from .socket import SelectionPolicy
from .watcher import InputWatcher

NAME = "gufo-icmpwatch"
DEFAULT_INTERVAL = 1.0

POLICIES = {
    "raw": SelectionPolicy.RAW,
    "dgram": SelectionPolicy.DGRAM,
    "raw-dgram": SelectionPolicy.RAW_DGRAM,
    "dgram-raw": SelectionPolicy.DGRAM_RAW,
}

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """
    Cli exit codes.

    Attributes:
        OK: Successful exit
        ERR: Invalid arguments
        RESOLVE: Cannot resolve destination
        SOCKET: Cannot open ICMP socket
        PROTOCOL: Malformed ICMP message in strict mode
    """

    OK = 0
    ERR = 1
    RESOLVE = 2
    SOCKET = 4
    PROTOCOL = 6


class Cli(object):
    """`gufo-icmpwatch` utility class."""

    def die(
        self, msg: Optional[str] = None, code: int = ExitCode.ERR
    ) -> NoReturn:
        """Die with message."""
        if msg:
            print(msg, file=sys.stderr)
        sys.exit(code)

    def run(self: "Cli", args: List[str]) -> ExitCode:
        """
        Parse command-line arguments and run appropriate command.

        Args:
            args: List of command-line arguments
        Returns:
            ExitCode
        """
        # Prepare command-line parser
        parser = argparse.ArgumentParser(
            prog=NAME,
            description="Send batch ICMP echo requests and show the results. "
            "Press q or Esc to exit.",
        )
        parser.add_argument("hosts", nargs="+", help="Destination hosts")
        parser.add_argument(
            "-i",
            "--interval",
            type=float,
            default=DEFAULT_INTERVAL,
            help="How long to wait for replies, in seconds "
            "(real numbers, e.g. 1.5 are allowed)",
        )
        parser.add_argument(
            "-c",
            "--count",
            type=int,
            help="Stop after `count` rounds",
        )
        parser.add_argument(
            "-p",
            "--policy",
            choices=list(POLICIES),
            default="dgram-raw",
            help="Socket type selection policy",
        )
        afi_group = parser.add_mutually_exclusive_group()
        afi_group.add_argument(
            "-4",
            dest="afi",
            action="store_const",
            const=IPv4,
            help="IPv4 only",
        )
        afi_group.add_argument(
            "-6",
            dest="afi",
            action="store_const",
            const=IPv6,
            help="IPv6 only",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Abort on malformed ICMP messages",
        )
        parser.add_argument(
            "-v", "--verbose", action="store_true", help="Debug logging"
        )
        # Parse arguments
        ns = parser.parse_args(args)
        if ns.interval <= 0:
            self.die("interval must be positive")
        if ns.count is not None and ns.count < 1:
            self.die("count must be positive")
        logging.basicConfig(
            level=logging.DEBUG if ns.verbose else logging.WARNING,
            format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
            stream=sys.stderr,
        )
        # Resolve all or nothing
        print(
            f"Looking up {len(ns.hosts)} ip numbers...",
            end="",
            file=sys.stderr,
            flush=True,
        )
        try:
            destinations = resolve(ns.hosts, afi=ns.afi)
        except ResolveError as e:
            print(file=sys.stderr)
            self.die(
                f"{e}\nCould not resolve all hostnames. Aborting.",
                ExitCode.RESOLVE,
            )
        print("DONE", file=sys.stderr)
        # Open sockets only for families in use
        try:
            engine = ProbeEngine(
                afis=sorted({d.afi for d in destinations}),
                policy=POLICIES[ns.policy],
                strict=ns.strict,
            )
        except SocketSetupError as e:
            self.die(f"{e}\n{e.hint}", ExitCode.SOCKET)
        # Setup loop
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        main_task = loop.create_task(
            self._run(
                engine, destinations, interval=ns.interval, count=ns.count
            )
        )
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, main_task.cancel)
        # Run
        try:
            return loop.run_until_complete(main_task)
        finally:
            loop.close()
            engine.close()

    async def _run(
        self,
        /,
        engine: ProbeEngine,
        destinations: Sequence[Destination],
        interval: float = DEFAULT_INTERVAL,
        count: Optional[int] = None,
    ) -> ExitCode:
        presenter = Presenter()
        n = 0
        with InputWatcher() as watcher:
            try:
                while not watcher.stop_requested():
                    t0 = perf_counter()
                    results = await engine.run_round(
                        destinations, timeout=interval
                    )
                    presenter.render(destinations, results)
                    n += 1
                    if count is not None and n >= count:
                        return ExitCode.OK
                    # Pace ourselves
                    dt = perf_counter() - t0
                    if dt < interval:
                        await asyncio.sleep(interval - dt)
            except asyncio.CancelledError:
                pass
            except ProtocolError as e:
                presenter.clear()
                logger.error("%s", e)
                return ExitCode.PROTOCOL
        presenter.clear()
        return ExitCode.OK


def main(args: Optional[List[str]] = None) -> int:
    """Run `gufo-icmpwatch` with command-line arguments."""
    return Cli().run(sys.argv[1:] if args is None else args).value
