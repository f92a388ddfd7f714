"""HTTP transport for the daemon REST API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pysyncevents._constants import API_KEY_HEADER, USER_AGENT
from pysyncevents._redact import redact_for_log
from pysyncevents.config import SyncEventsConfig
from pysyncevents.exceptions import SyncEventsAuthError, SyncEventsTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`RestTransport`) concrete.
    """

    async def get_json(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        ...


class RestTransport:
    """GET-only JSON transport authenticating with the daemon API key."""

    def __init__(
        self,
        config: SyncEventsConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if self._config.api_key:
            headers[API_KEY_HEADER] = self._config.api_key
        return headers

    async def get_json(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        """GET ``endpoint`` and return the decoded JSON body."""
        url = f"{self._config.base_url}{endpoint}"
        query = {key: str(value) for key, value in (params or {}).items()}

        if self._config.api_trace_enabled:
            _logger.debug("GET %s params=%s", url, redact_for_log(query))

        try:
            async with self._http.get(
                url,
                params=query,
                headers=self._headers(),
                timeout=self._timeout,
                ssl=self._config.verify_ssl,
            ) as resp:
                text = await resp.text()
                if resp.status in (401, 403):
                    raise SyncEventsAuthError(
                        f"HTTP {resp.status} from {endpoint}: API key missing or rejected",
                        endpoint=endpoint,
                    )
                if resp.status != 200:
                    raise SyncEventsTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except (SyncEventsTransportError, SyncEventsAuthError):
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise SyncEventsTransportError(
                f"Request to {endpoint} failed: {exc!r}",
                endpoint=endpoint,
            ) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SyncEventsTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("Response %s: %s", endpoint, redact_for_log(body))
        return body
