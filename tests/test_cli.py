from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import pytest

from pysyncevents import cli
from pysyncevents.exceptions import SyncEventsConfigError, SyncEventsTransportError


def test_parser_options(tmp_path: Path) -> None:
    args = cli.build_parser().parse_args(
        ["--base-url", "http://h:8384", "--offset-path", str(tmp_path / "o.json"), "-vv"]
    )

    assert args.base_url == "http://h:8384"
    assert args.offset_path == tmp_path / "o.json"
    assert args.verbose == 2
    assert args.ping_interval == 5.0
    assert args.directory is None


def test_load_directory(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "devices": [{"deviceID": "AAAAAAA-BBBBBBB", "name": "Desktop"}],
                "folders": [{"id": "f1", "path": "/sync/f1", "label": "Photos"}],
            }
        ),
        encoding="utf-8",
    )

    directory = cli.load_directory(path)

    device = directory.find_device("AAAAAAA-BBBBBBB")
    assert device is not None and device.display_name == "Desktop"
    folder = directory.find_folder("f1")
    assert folder is not None and folder.path == "/sync/f1"


def test_load_directory_without_file_is_empty() -> None:
    assert len(cli.load_directory(None)) == 0


def test_load_directory_rejects_bad_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(SyncEventsConfigError):
        cli.load_directory(path)
    with pytest.raises(SyncEventsConfigError):
        cli.load_directory(tmp_path / "missing.json")


class _FlakyPinger:
    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def ping(self) -> bool:
        self.calls += 1
        if self.calls <= self.failures:
            raise SyncEventsTransportError("connection refused", endpoint="/rest/system/ping")
        return True


@pytest.mark.asyncio
async def test_wait_for_api_retries_until_pong(caplog: pytest.LogCaptureFixture) -> None:
    pinger = _FlakyPinger(failures=2)

    with caplog.at_level(logging.INFO, logger="pysyncevents.cli"):
        available = await cli.wait_for_api(pinger, 0.01, asyncio.Event())  # type: ignore[arg-type]

    assert available is True
    assert pinger.calls == 3
    assert "Waiting for API" in caplog.text


@pytest.mark.asyncio
async def test_wait_for_api_stops_when_requested() -> None:
    stop = asyncio.Event()
    stop.set()

    assert await cli.wait_for_api(_FlakyPinger(failures=100), 0.01, stop) is False  # type: ignore[arg-type]


def test_main_reports_bad_config(tmp_path: Path) -> None:
    assert cli.main(["--base-url", "not-a-url", "--offset-path", str(tmp_path / "o.json")]) == 2
