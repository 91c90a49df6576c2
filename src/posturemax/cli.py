"""Command-line interface for posturemax.

``run`` starts the session shell in this process. ``send``, ``hotkey``
and ``status`` talk to an already running instance over its local
control endpoint.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="posturemax",
        description="Multi-surface posture monitoring session shell",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/posturemax.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run the session shell")
    run_parser.add_argument(
        "--no-endpoint", action="store_true",
        help="Do not serve the local control endpoint",
    )
    run_parser.add_argument(
        "--start", action="store_true",
        help="Start a monitoring session immediately",
    )

    send_parser = subparsers.add_parser("send", help="Send a command to a running instance")
    send_parser.add_argument("name", help="Command wire name, e.g. toggle-overlay")
    send_parser.add_argument(
        "--level", choices=["transparent", "visible"], default=None,
        help="Opacity level for set-transparency",
    )

    hotkey_parser = subparsers.add_parser("hotkey", help="Forward a key chord to a running instance")
    hotkey_parser.add_argument("chord", help="Chord, e.g. CommandOrControl+Shift+M")

    subparsers.add_parser("status", help="Show the state of a running instance")

    return parser.parse_args(argv)


async def _run(settings, args) -> None:
    from posturemax.app import PostureApp
    from posturemax.bus.messages import StartMonitoring

    app = PostureApp(settings)
    if args.start:
        app.bus.send(StartMonitoring())
    await app.run(serve_endpoint=not args.no_endpoint)


async def _send(settings, args) -> int:
    from posturemax.endpoint.client import CommandClient

    payload = {"level": args.level} if args.level else {}
    ep = settings.endpoint
    async with CommandClient(base_url=ep.base_url, timeout=ep.timeout) as client:
        ack = await client.send(args.name, **payload)
    print("ok" if ack.success else f"failed: {ack.error}")
    return 0 if ack.success else 1


async def _hotkey(settings, args) -> int:
    from posturemax.endpoint.client import CommandClient

    ep = settings.endpoint
    async with CommandClient(base_url=ep.base_url, timeout=ep.timeout) as client:
        await client.press_hotkey(args.chord)
    print(f"sent {args.chord}")
    return 0


async def _status(settings) -> int:
    from posturemax.endpoint.client import CommandClient

    ep = settings.endpoint
    async with CommandClient(base_url=ep.base_url, timeout=ep.timeout) as client:
        state = await client.get_state()
        report = await client.get_report()

    print(f"Session:  {state['state']}")
    if state.get("started_at"):
        print(f"Started:  {state['started_at']}")
    print(f"Samples:  {len(state.get('samples', []))}")
    for name, surface in state.get("surfaces", {}).items():
        print(f"{name.capitalize():9} {surface['lifecycle']} ({surface['opacity']})")
    if report:
        print(f"\nLast session: {report['good_percentage']}% good, "
              f"{report['corrections']} corrections, {report['total_samples']} samples")
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the posturemax CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from posturemax.config.settings import load_settings
    from posturemax.endpoint.client import CommandClientError
    from posturemax.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "run":
        logger.info("Starting posturemax")
        try:
            asyncio.run(_run(settings, args))
        except KeyboardInterrupt:
            logger.info("Interrupted")
        return

    try:
        if args.command == "send":
            code = asyncio.run(_send(settings, args))
        elif args.command == "hotkey":
            code = asyncio.run(_hotkey(settings, args))
        else:
            code = asyncio.run(_status(settings))
    except CommandClientError as e:
        logger.error("%s", e)
        code = 2
    sys.exit(code)


if __name__ == "__main__":
    main()
