import asyncio
import sys

from gufo.icmpwatch import Destination, ProbeEngine, Replied


async def main(addr: str, count: int = 5) -> None:
    dest = Destination.from_ip(addr)
    received = 0
    with ProbeEngine(afis=[dest.afi]) as engine:
        for n in range(count):
            (r,) = await engine.run_round([dest], timeout=1.0)
            if isinstance(r, Replied):
                print(f"{addr}: round={n} time={r.ms:.3f}ms")
                received += 1
            else:
                print(f"{addr}: round={n} {r}")
            await asyncio.sleep(1.0)
    print(f"--- {count} rounds, {received} replies")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1]))
