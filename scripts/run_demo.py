#!/usr/bin/env python3
"""
Demo Console

Feeds chat lines through a MessageProcessor, standing in for the chat
transport. Every line goes through the real gateway (cache, rate limits,
retries) against the real upstream services.

This script:
1. Builds a RequestExecutor, the domain services and a MessageProcessor
2. Reads messages from --message arguments or interactively from stdin
3. Prints each reply (text, or the media URL and caption)
4. Optionally prints gateway statistics at the end

Usage:
    python scripts/run_demo.py                               # Interactive
    python scripts/run_demo.py -m "/help"                    # One message
    python scripts/run_demo.py -m "/model claude" -m "hello" # Several
    python scripts/run_demo.py --stats                       # Show gateway stats
"""

import argparse
import asyncio
import json
import sys
import time
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from relaybot.config import configure_logging, get_settings
from relaybot.dispatcher import InMemoryPreferenceStore, MediaReply, MessageProcessor
from relaybot.gateway import RequestExecutor
from relaybot.services import build_services


def print_reply(reply, latency_ms: float) -> None:
    if isinstance(reply, MediaReply):
        print(f"[{reply.media_type}] {reply.url}")
        if reply.caption:
            print(f"  {reply.caption}")
    else:
        print(reply.value)
    print(f"  ({latency_ms:.0f}ms)")


async def run_console(
    messages: list[str], user_id: str, username: str | None, show_stats: bool
) -> None:
    settings = get_settings()
    executor = RequestExecutor(settings=settings)
    processor = MessageProcessor(
        build_services(executor),
        InMemoryPreferenceStore(default_language=settings.default_language),
        settings,
    )

    async def handle(text: str) -> None:
        start_time = time.perf_counter()
        reply = await processor.process(user_id, text, username)
        print_reply(reply, (time.perf_counter() - start_time) * 1000)

    try:
        if messages:
            for text in messages:
                print(f"> {text}")
                await handle(text)
                print()
        else:
            print("Type a message (or /help). Ctrl-D to quit.")
            loop = asyncio.get_running_loop()
            while True:
                line = await loop.run_in_executor(None, sys.stdin.readline)
                if not line:
                    break
                if line.strip():
                    await handle(line.rstrip("\n"))
                    print()

        if show_stats:
            print("Gateway statistics:")
            print(json.dumps(executor.stats(), indent=2))
    finally:
        await executor.aclose()


def main():
    """Main entry point for the demo console."""

    parser = argparse.ArgumentParser(
        description="Send chat messages through the RelayBot processor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_demo.py                          Interactive console
  python scripts/run_demo.py -m "/help"               Single message
  python scripts/run_demo.py -m "/translate es Hi"    Translation chain
  python scripts/run_demo.py --stats -m "/weather Oslo"
        """
    )

    parser.add_argument(
        "--message", "-m",
        action="append",
        default=[],
        help="Message to process (repeatable); omit for interactive mode"
    )
    parser.add_argument(
        "--user",
        default="demo-user",
        help="User id for the session (default: demo-user)"
    )
    parser.add_argument(
        "--username",
        help="Display name for the session"
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print cache and rate-limit statistics at the end"
    )

    args = parser.parse_args()

    configure_logging(get_settings())

    print("=" * 60)
    print("RelayBot Demo Console")
    print("=" * 60)

    try:
        asyncio.run(run_console(args.message, args.user, args.username, args.stats))
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(130)

    sys.exit(0)


if __name__ == "__main__":
    main()
