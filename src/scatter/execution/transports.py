"""Transports - perform one network fetch for a unit.

The core treats the transport as opaque: ``fetch(unit)`` either returns a
status/result string or raises. Deadline enforcement belongs to the
:class:`~scatter.execution.executor.UnitExecutor`, not to the transport.

ARCHITECTURE
────────────
::

    Transport (Protocol)
      └── async fetch(target) -> str

    Implementations:
      HttpTransport  ─ httpx GET, returns the HTTP reason phrase
      StubTransport  ─ in-memory delays / failures / hangs (tests, demos)
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

import httpx

from scatter.core.errors import TransportError
from scatter.core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Fetch capability consumed by the Unit Executor."""

    async def fetch(self, target: str) -> str:
        """Fetch *target* and return a descriptive status string.

        Raises:
            TransportError: If the operation could not complete.
        """
        ...


class HttpTransport:
    """httpx-backed transport issuing one ``GET`` per unit.

    A fresh ``httpx.AsyncClient`` is opened per fetch unless a client is
    injected. Per-fetch clients are bound to whichever event loop runs the
    fetch, which the thread-per-unit dispatch realization relies on.

    Any completed response is a successful fetch regardless of status code:
    ``"OK"``, ``"Not Found"`` and ``"Service Unavailable"`` are all status
    strings for the listener.
    """

    name = "http"

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        user_agent: str = "scatter/0.1",
        follow_redirects: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = client
        self._headers = {"User-Agent": user_agent}
        self._follow_redirects = follow_redirects
        self._transport = transport

    async def fetch(self, target: str) -> str:
        try:
            if self._client is not None:
                response = await self._client.get(target)
            else:
                async with httpx.AsyncClient(
                    headers=self._headers,
                    follow_redirects=self._follow_redirects,
                    transport=self._transport,
                    timeout=None,
                ) as client:
                    response = await client.get(target)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"GET {target} failed", cause=e).with_context(
                unit=target, url=target
            ) from e
        status = describe_status(response)
        logger.debug("http.fetched", url=target, status_code=response.status_code)
        return status


def describe_status(response: httpx.Response) -> str:
    """Status text for a response: the reason phrase, else the numeric code."""
    return response.reason_phrase or str(response.status_code)


class StubTransport:
    """Deterministic in-memory transport.

    Args:
        delays: Seconds to sleep per target before answering.
        responses: Status string per target (default ``default_response``).
        failures: Targets that raise ``TransportError`` with the given reason.
        hang: Targets that never answer.
        default_delay: Delay for targets without an entry in ``delays``.
        default_response: Status string for targets without an entry.

    Example:
        >>> stub = StubTransport(delays={"A": 0.03, "B": 0.01})
        >>> await stub.fetch("B")
        'OK'
    """

    name = "stub"

    def __init__(
        self,
        *,
        delays: Mapping[str, float] | None = None,
        responses: Mapping[str, str] | None = None,
        failures: Mapping[str, str] | None = None,
        hang: set[str] | frozenset[str] | None = None,
        default_delay: float = 0.0,
        default_response: str = "OK",
    ) -> None:
        self.delays = dict(delays or {})
        self.responses = dict(responses or {})
        self.failures = dict(failures or {})
        self.hang = frozenset(hang or ())
        self.default_delay = default_delay
        self.default_response = default_response
        self.calls: list[str] = []
        self._lock = threading.Lock()

    async def fetch(self, target: str) -> str:
        with self._lock:
            self.calls.append(target)
        if target in self.hang:
            await asyncio.Event().wait()
        await asyncio.sleep(self.delays.get(target, self.default_delay))
        if target in self.failures:
            cause = ConnectionError(self.failures[target])
            raise TransportError(f"GET {target} failed", cause=cause).with_context(
                unit=target
            ) from cause
        return self.responses.get(target, self.default_response)


__all__ = ["Transport", "HttpTransport", "StubTransport", "describe_status"]
