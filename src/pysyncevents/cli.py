"""Command line host: wires the client, offset file and logging sinks.

The host owns the lifecycle signals. It pings the REST API until it answers,
reports it available to the poller, and shuts the poller down on SIGINT or
SIGTERM.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import signal
import sys
from pathlib import Path

from pysyncevents import __version__
from pysyncevents.client import SyncthingEventsClient
from pysyncevents.config import SyncEventsConfig
from pysyncevents.directory import StaticDirectory
from pysyncevents.exceptions import SyncEventsAuthError, SyncEventsConfigError, SyncEventsError
from pysyncevents.offsets import FileOffsetStore
from pysyncevents.poller import EventPoller
from pysyncevents.router import EventRouter
from pysyncevents.sinks import LoggingNotifier, LoggingRescanSink

_logger = logging.getLogger("pysyncevents.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pysyncevents",
        description="Follow the daemon event log and report rejected devices, folders and finished items.",
    )
    parser.add_argument("--base-url", help="REST API base URL (env SYNCEVENTS_BASE_URL)")
    parser.add_argument("--api-key", help="REST API key (env SYNCEVENTS_API_KEY)")
    parser.add_argument("--offset-path", type=Path, help="JSON file holding the last processed event id")
    parser.add_argument(
        "--directory",
        type=Path,
        help="Daemon configuration JSON used to resolve device names and folder paths",
    )
    parser.add_argument(
        "--ping-interval",
        type=float,
        default=5.0,
        help="Seconds between availability checks while the API is unreachable (default: 5)",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for INFO, -vv for DEBUG")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_directory(path: Path | None) -> StaticDirectory:
    """Load a directory snapshot from a configuration export, or an empty one."""
    if path is None:
        return StaticDirectory()
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SyncEventsConfigError(f"cannot read directory file {path}: {exc}") from exc
    if not isinstance(document, dict):
        raise SyncEventsConfigError(f"directory file must hold a JSON object: {path}")
    return StaticDirectory.from_config(document)


async def wait_for_api(client: SyncthingEventsClient, interval: float, stop: asyncio.Event) -> bool:
    """Ping until the API answers. Returns ``False`` if ``stop`` fires first."""
    while not stop.is_set():
        try:
            if await client.ping():
                return True
            _logger.info("API answered ping without pong; retrying in %.0fs", interval)
        except SyncEventsAuthError:
            raise
        except SyncEventsError as exc:
            _logger.info("Waiting for API: %s", exc)
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(stop.wait(), interval)
    return False


async def run(config: SyncEventsConfig, directory: StaticDirectory, *, ping_interval: float = 5.0) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    router = EventRouter(directory, LoggingNotifier(), LoggingRescanSink())
    store = FileOffsetStore(config.offset_path)

    async with SyncthingEventsClient(config) as client, EventPoller(client, store, router) as poller:
        if not await wait_for_api(client, ping_interval, stop):
            return
        _logger.info("API available at %s; offsets in %s", config.base_url, store.path)
        poller.on_api_available()
        await stop.wait()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = SyncEventsConfig.from_env(
            base_url=args.base_url,
            api_key=args.api_key,
            offset_path=args.offset_path,
        )
        directory = load_directory(args.directory)
        asyncio.run(run(config, directory, ping_interval=args.ping_interval))
    except (SyncEventsConfigError, SyncEventsAuthError) as exc:
        _logger.error("%s", exc)
        return 2
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
