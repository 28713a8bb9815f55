#!/usr/bin/env python3
"""
Line-echoing child process for trying out the bridge.

Reads newline-delimited JSON-RPC requests on stdin and answers each one on
stdout with a result echoing its params. Diagnostics go to stderr, which the
bridge passes through. Set ACP_DEBUG=true (or run the bridge with --debug)
to see them.

Usage:
    wsbridge -- python examples/01_echo/echo_child.py
"""

import json
import os
import sys


def main() -> int:
    debug = os.environ.get("ACP_DEBUG") == "true"

    for line in iter(sys.stdin.buffer.readline, b""):
        try:
            request = json.loads(line)
        except ValueError:
            if debug:
                print(f"echo: ignoring non-JSON line {line!r}", file=sys.stderr)
            continue

        response = {
            "jsonrpc": "2.0",
            "id": request.get("id"),
            "result": {"echo": request.get("params")},
        }
        sys.stdout.write(json.dumps(response) + "\n")
        sys.stdout.flush()

    return 0


if __name__ == "__main__":
    sys.exit(main())
