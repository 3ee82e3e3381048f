import asyncio
import sys

from gufo.icmpwatch import Destination, ProbeEngine, SelectionPolicy


async def main(addr: str) -> None:
    dest = Destination.from_ip(addr)
    with ProbeEngine(afis=[dest.afi], policy=SelectionPolicy.DGRAM) as e:
        print(await e.run_round([dest]))


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1]))
