#!/usr/bin/env python3
"""Passive push stream probe for the geo backend.

This script reuses the pygeoengine console to:
1) load the nearby driver snapshot and the stored zones,
2) open the websocket push stream,
3) print every inbound frame as it is decoded,
4) print the resulting console snapshot on exit.

Use this to check what the backend actually pushes and how often.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
import time
from dataclasses import dataclass
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pygeoengine import GeoConfig, GeoConsole, Notification  # noqa: E402
from pygeoengine.models.messages import GeofenceEvent, LocationUpdate, StreamMessage  # noqa: E402


@dataclass
class ProbeStats:
    started_at: float
    total_frames: int = 0
    locations: int = 0
    events: int = 0
    dropped: int = 0
    last_frame_at: float | None = None

    def on_frame(self, now: float) -> float | None:
        previous = self.last_frame_at
        self.total_frames += 1
        self.last_frame_at = now
        return None if previous is None else now - previous


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Passive probe for the geo backend push stream.",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Print raw frames before decoding.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _print_summary(stats: ProbeStats, console: GeoConsole) -> None:
    runtime = time.time() - stats.started_at
    snapshot = console.snapshot()
    print("[probe] Summary")
    print(f"[probe]   runtime_s    : {runtime:.1f}")
    print(f"[probe]   total_frames : {stats.total_frames}")
    print(f"[probe]   locations    : {stats.locations}")
    print(f"[probe]   events       : {stats.events}")
    print(f"[probe]   dropped      : {stats.dropped}")
    print(f"[probe]   drivers      : {len(snapshot.drivers)}")
    print(f"[probe]   zones        : {len(snapshot.geofences)}")
    for alert in snapshot.alerts:
        print(f"[probe]   alert        : {alert.timestamp:%H:%M:%S} {alert.title} {alert.body}")


async def _run(args: argparse.Namespace) -> int:
    config = GeoConfig.from_env()
    stats = ProbeStats(started_at=time.time())
    stop = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    def _on_notification(note: Notification) -> None:
        print(f"[probe] {note.level}: {note.message}")

    async with GeoConsole(config, on_notification=_on_notification) as console:
        dispatch = console.dispatcher.dispatch

        def _probe_dispatch(frame: str) -> StreamMessage | None:
            delta = stats.on_frame(time.time())
            gap_text = "first" if delta is None else f"{delta:.1f}s"
            if args.raw:
                print(f"[probe] raw={frame}")
            message = dispatch(frame)
            if message is None:
                stats.dropped += 1
            elif isinstance(message, LocationUpdate):
                stats.locations += 1
            elif isinstance(message, GeofenceEvent):
                stats.events += 1
            if message is not None:
                print(f"[probe] frame#{stats.total_frames} gap={gap_text} {json.dumps(message.model_dump(mode='json'))}")
            return message

        console.dispatcher.dispatch = _probe_dispatch  # type: ignore[method-assign]
        await console.start()
        print(f"[probe] Loaded drivers={len(console.registry)} zones={len(console.geofences)}")
        if not console.is_streaming:
            print("[probe] Push stream not connected.", file=sys.stderr)
            return 2

        try:
            timeout = args.duration if args.duration > 0 else None
            await asyncio.wait_for(stop.wait(), timeout)
        except asyncio.TimeoutError:
            print(f"[probe] Reached --duration={args.duration}s, stopping.")

        _print_summary(stats, console)
    return 0


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(_main())
