import asyncio
import sys

from gufo.icmpwatch import Destination, ProbeEngine


async def main(addrs: list) -> None:
    dests = [Destination.from_ip(a) for a in addrs]
    with ProbeEngine(afis={d.afi for d in dests}) as engine:
        results = await engine.run_round(dests, timeout=1.0)
    for dest, r in zip(dests, results):
        print(dest.label, r)


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:]))
