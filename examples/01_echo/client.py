#!/usr/bin/env python3
"""
Minimal peer for the echo example.

Connects to a running bridge, sends a few JSON-RPC requests and prints the
frames that come back.

Usage:
    wsbridge -- python examples/01_echo/echo_child.py &
    python examples/01_echo/client.py --url ws://localhost:8765
"""

import argparse
import asyncio
import json

from websockets.asyncio.client import connect


async def run(url: str, count: int) -> None:
    async with connect(url) as ws:
        for i in range(1, count + 1):
            request = {"jsonrpc": "2.0", "id": i, "method": "echo", "params": [i]}
            await ws.send(json.dumps(request) + "\n")
            reply = await ws.recv()
            print(reply.decode() if isinstance(reply, bytes) else reply, end="")


def main() -> None:
    parser = argparse.ArgumentParser(description="wsbridge echo client")
    parser.add_argument("--url", default="ws://localhost:8765", help="bridge URL")
    parser.add_argument("-n", "--count", type=int, default=3, help="requests to send")
    args = parser.parse_args()
    asyncio.run(run(args.url, args.count))


if __name__ == "__main__":
    main()
