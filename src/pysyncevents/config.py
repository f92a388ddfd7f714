"""Client configuration for pysyncevents."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pysyncevents._constants import BASE_URL, DEFAULT_REQUEST_TIMEOUT
from pysyncevents.exceptions import SyncEventsConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise SyncEventsConfigError(f"{key} must be a number, got {raw!r}") from exc


def default_offset_path() -> Path:
    """Default location of the offset file (``$XDG_STATE_HOME/pysyncevents``)."""
    state_home = os.environ.get("XDG_STATE_HOME") or str(Path.home() / ".local" / "state")
    return Path(state_home) / "pysyncevents" / "offsets.json"


@dataclasses.dataclass(frozen=True)
class SyncEventsConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Daemon REST API base URL, e.g. ``"http://127.0.0.1:8384"``.
    api_key : str or None
        Value sent in the ``X-API-Key`` header. ``None`` sends no header.
    offset_path : Path
        JSON file the last processed event id is persisted to.
    request_timeout : float
        Total timeout in seconds for one HTTP request. Must exceed the
        daemon's event long-poll window.
    verify_ssl : bool
        Verify TLS certificates for ``https`` base URLs.
    api_trace_enabled : bool
        Log every request and its (redacted) parameters at DEBUG level.
    """

    base_url: str = BASE_URL
    api_key: str | None = None
    offset_path: Path = dataclasses.field(default_factory=default_offset_path)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    verify_ssl: bool = True
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            raise SyncEventsConfigError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if self.request_timeout <= 0:
            raise SyncEventsConfigError("request_timeout must be positive")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        object.__setattr__(self, "offset_path", Path(self.offset_path).expanduser())

    @classmethod
    def from_env(cls, **overrides: Any) -> SyncEventsConfig:
        """Create configuration from ``SYNCEVENTS_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "SYNCEVENTS_BASE_URL": "base_url",
            "SYNCEVENTS_API_KEY": "api_key",
            "SYNCEVENTS_OFFSET_PATH": "offset_path",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val:
                config_kwargs[field_name] = val

        timeout = _env_float(env, "SYNCEVENTS_REQUEST_TIMEOUT")
        if timeout is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = timeout

        if "verify_ssl" not in overrides:
            config_kwargs["verify_ssl"] = _env_bool(env.get("SYNCEVENTS_VERIFY_SSL"), True)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("SYNCEVENTS_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update({k: v for k, v in overrides.items() if v is not None})

        return cls(**config_kwargs)
