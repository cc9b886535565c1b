#!/usr/bin/env python3
"""Passive WebSocket probe for Dreo report frames.

Connects to the Dreo cloud socket with ``DREO_ACCESS_TOKEN`` (or
``--token``) and prints every inbound frame, optionally filtered to one
device serial.  Use this to see which keys a fan reports and with which
method (``report`` vs ``control-report``/``control-reply``).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

import aiohttp  # noqa: E402

from pydreo import DreoConfig, DreoError, WebSocketChannel  # noqa: E402
from pydreo.ingestion.reports import decode_frame  # noqa: E402

_LOG = logging.getLogger("ws_probe")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Passive probe for the Dreo cloud WebSocket.")
    parser.add_argument("--token", default=None, help="Access token (defaults to DREO_ACCESS_TOKEN).")
    parser.add_argument("--serial", default=None, help="Only print frames for this device serial.")
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging.")
    return parser.parse_args()


def _printer(serial: str | None):
    def _on_frame(text: str) -> None:
        try:
            payload = decode_frame(text)
        except DreoError:
            print(f"<undecodable> {text[:200]}")
            return
        if serial and payload.get("devicesn") != serial:
            return
        print(json.dumps(payload, ensure_ascii=False, sort_keys=True))

    return _on_frame


async def _run(args: argparse.Namespace) -> int:
    overrides = {"access_token": args.token} if args.token else {}
    config = DreoConfig.from_env(**overrides)
    async with aiohttp.ClientSession() as session:
        try:
            channel = await WebSocketChannel.connect(session, config)
        except DreoError as exc:
            _LOG.error("%s", exc)
            return 1
        channel.on_message(_printer(args.serial))
        try:
            if args.duration > 0:
                try:
                    await asyncio.wait_for(channel.run(), args.duration)
                except TimeoutError:
                    _LOG.info("Duration reached")
            else:
                await channel.run()
        finally:
            await channel.close()
    return 0


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
