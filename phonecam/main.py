"""
PhoneCam console client.

Runs the scanner or the webcam stream against the simulated camera so
the pipeline can be watched end to end:

    python -m phonecam scan --seconds 30
    python -m phonecam stream --transport usb
"""
import argparse
import asyncio
import logging
from dataclasses import replace
from typing import List, Optional

from .app import PhoneCamApp
from .core.config import load_settings
from .core.errors import PhoneCamError
from .core.settings import SettingsStore
from .scanner import ScanSnapshot
from .vision import SimulatedScreen
from .webcam import StreamSession

logger = logging.getLogger(__name__)


def _print_scan(snapshot: ScanSnapshot):
    if snapshot.answer is not None:
        print(f"\nQ: {snapshot.answer.question.text}")
        print(f"A: {snapshot.answer.answer_text}\n")
    elif snapshot.last_error:
        print(f"[error] {snapshot.last_error}")
    elif snapshot.processing and snapshot.question is not None:
        print(f"[thinking] {snapshot.question.text}")


def _print_stream(session: StreamSession):
    peers = ", ".join(session.connected_peers) or "-"
    print(f"[stream] {session.state.value} via {session.transport.value.upper()} "
          f"peers={peers} quality={session.quality.value} latency={session.latency_ms:.0f}ms")


async def run_scan(app: PhoneCamApp, seconds: float):
    if not app.store.settings.provider.has_credential:
        print("No API key configured (set PHONECAM_API_KEY); answers will fail.")

    last = {}

    def on_change(snapshot: ScanSnapshot):
        key = (snapshot.question, snapshot.answer, snapshot.last_error, snapshot.processing)
        if last.get("key") != key:
            last["key"] = key
            _print_scan(snapshot)

    app.scanner.subscribe(on_change)
    await app.scanner.start()
    print(f"Scanning for {seconds:.0f}s (Ctrl+C to stop)...")
    try:
        await asyncio.sleep(seconds)
    finally:
        await app.shutdown()

    print(f"{len(app.history)} answer(s) this session")


async def run_stream(app: PhoneCamApp, seconds: float, transport: Optional[str]):
    app.stream.subscribe(_print_stream)
    devices = await app.stream.get_available_devices()
    print(f"Available devices: {', '.join(devices)}")
    try:
        await app.stream.start(transport)
        await asyncio.sleep(seconds)
    except PhoneCamError as e:
        print(f"Stream failed: {e}")
    finally:
        await app.shutdown()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="phonecam", description="Phone webcam and screen question scanner")
    parser.add_argument("--config", default="config.yaml", help="YAML config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Scan the (simulated) screen for questions")
    scan.add_argument("--seconds", type=float, default=30.0)
    scan.add_argument("--interval", type=float, default=None, help="Override scan interval")

    stream = sub.add_parser("stream", help="Stream the camera to a paired computer")
    stream.add_argument("--seconds", type=float, default=10.0)
    stream.add_argument("--transport", choices=["wifi", "usb"], default=None)

    return parser


async def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    settings = load_settings(args.config)
    if args.command == "scan" and args.interval:
        settings = replace(settings, scan=replace(settings.scan, scan_interval_seconds=args.interval))

    screen = SimulatedScreen()
    app = PhoneCamApp(SettingsStore(settings), capture_frame=screen.capture)

    if args.command == "scan":
        await run_scan(app, args.seconds)
    else:
        await run_stream(app, args.seconds, args.transport)


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nInterrupted")


if __name__ == "__main__":
    run()
