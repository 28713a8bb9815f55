#!/usr/bin/env python3
"""
wsbridge - expose a stdio child process over a WebSocket.

Usage:
    wsbridge                                   # node index.js on ws://localhost:8765
    wsbridge --port 9000 -- python agent.py    # custom child and port
    wsbridge --config etc/wsbridge.yaml --debug
"""

import argparse
import asyncio
import sys
from typing import Any

import wsbridge
from wsbridge.app import Bridge
from wsbridge.config import load_config
from wsbridge.exceptions import BridgeError
from wsbridge.log import LogConfig, LoggerFactory


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wsbridge",
        description="Bridge a stdio child process to one WebSocket peer at a time",
    )
    parser.add_argument("-c", "--config", metavar="FILE", help="YAML configuration file")
    parser.add_argument("--host", help="interface to listen on")
    parser.add_argument("-p", "--port", type=int, help="port to listen on")
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="debug logging in the bridge and the child",
    )
    parser.add_argument(
        "--ping-interval",
        type=float,
        metavar="SECS",
        help="seconds between liveness pings",
    )
    parser.add_argument(
        "--log-level", help="log level (trace, debug, info, warning, error)"
    )
    parser.add_argument(
        "--no-colors", action="store_true", help="disable colored log output"
    )
    parser.add_argument(
        "-v", "--version", action="version", version=f"wsbridge {wsbridge.__version__}"
    )
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="child command and arguments (default: node index.js)",
    )
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Translate given flags into a nested config override mapping."""
    overrides: dict[str, Any] = {}
    if args.debug:
        overrides["debug"] = True
    if args.host is not None:
        overrides.setdefault("server", {})["host"] = args.host
    if args.port is not None:
        overrides.setdefault("server", {})["port"] = args.port
    if args.ping_interval is not None:
        overrides.setdefault("liveness", {})["interval"] = args.ping_interval
    if args.log_level is not None:
        overrides.setdefault("logging", {})["level"] = args.log_level
    if args.no_colors:
        overrides.setdefault("logging", {})["colors"] = False

    command = list(args.command)
    if command and command[0] == "--":
        command = command[1:]
    if command:
        overrides.setdefault("child", {})["command"] = command
    return overrides


def main(argv: list[str] | None = None) -> int:
    """Main entry point; returns the host exit code."""
    args = _build_parser().parse_args(argv)

    try:
        config = load_config(args.config, overrides=_overrides(args))
    except BridgeError as e:
        print(f"wsbridge: {e}", file=sys.stderr)
        return 2

    lg = LoggerFactory.create_root(
        LogConfig.from_settings(config.logging, debug=config.debug)
    )
    return asyncio.run(Bridge(config, lg).run())


if __name__ == "__main__":
    sys.exit(main())
