"""Alignment of local time with the remote time oracle.

Codes and signatures are only accepted if they were derived from the
remote service's notion of "now", so every time-dependent call reads
:meth:`ClockSync.current_time` instead of the local clock.

The offset is measured once per instance with a single unauthenticated
POST to ``ITwoFactorService/QueryTime``.  A failed measurement is logged
and otherwise ignored: the offset stays where it was (zero on a fresh
instance) and the next :meth:`synchronize` call tries again.
"""

from __future__ import annotations

import time
from typing import Callable

import httpx
import structlog

from steamguard.utils.logging import get_logger

_DEFAULT_TIME_SYNC_URL = (
    "https://api.steampowered.com/ITwoFactorService/QueryTime/v0001"
)
_DEFAULT_TIMEOUT = 5.0


class ClockSync:
    """Holds the signed offset ``remote - local`` in whole seconds.

    Parameters
    ----------
    http_client:
        Shared async HTTP client.
    time_sync_url:
        Full URL of the time oracle endpoint.
    timeout:
        Request timeout in seconds.
    local_time:
        Source of local epoch seconds; replaced in tests.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        time_sync_url: str = _DEFAULT_TIME_SYNC_URL,
        timeout: float = _DEFAULT_TIMEOUT,
        local_time: Callable[[], float] = time.time,
    ) -> None:
        self._http = http_client
        self._url = time_sync_url
        self._timeout = timeout
        self._local_time = local_time
        self._offset = 0
        self._synchronized = False
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def is_synchronized(self) -> bool:
        return self._synchronized

    async def synchronize(self, force: bool = False) -> bool:
        """Measure the offset against the time oracle.

        Returns ``True`` when the instance is synchronized after the call.
        Once synchronized, further calls return immediately unless
        *force* is set.  Never raises for transport or payload problems.
        """
        if self._synchronized and not force:
            return True

        try:
            response = await self._http.post(self._url, timeout=self._timeout)
            response.raise_for_status()
            server_time = int(response.json()["response"]["server_time"])
        except httpx.HTTPError as exc:
            self._logger.warning(
                "time_sync_failed",
                url=self._url,
                error=str(exc)[:200],
            )
            return self._synchronized
        except (ValueError, KeyError, TypeError) as exc:
            self._logger.warning(
                "time_sync_bad_payload",
                url=self._url,
                error=str(exc)[:200],
            )
            return self._synchronized

        self._offset = server_time - int(self._local_time())
        self._synchronized = True
        self._logger.info("time_aligned", offset=self._offset)
        return True

    def current_time(self) -> int:
        """Local epoch seconds corrected by the measured offset."""
        return int(self._local_time()) + self._offset
