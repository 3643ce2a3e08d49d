"""HTTP transport adapters and capability resolution.

The dispatcher never talks to :mod:`httpx` directly. It talks to a
:class:`Transport` exposing ``send`` (blocking) and ``send_async``
(coroutine) plus two capability flags, resolved once when the client is
installed via :func:`resolve_transport`:

* :class:`httpx.Client` -- sync only.
* :class:`httpx.AsyncClient` -- async only.
* :class:`HttpxTransport` -- whichever of its two clients are present.
* any object with a ``send(request)`` method -- async when ``send`` is a
  coroutine function, sync otherwise.

Connection pooling, TLS, redirects and timeouts stay with the wrapped
client.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Optional, Protocol, runtime_checkable

import httpx


@runtime_checkable
class Transport(Protocol):
    """Capability interface consumed by :class:`~sparkmail.client.SparkPost`."""

    supports_sync: bool
    supports_async: bool

    def send(self, request: httpx.Request) -> httpx.Response: ...

    async def send_async(self, request: httpx.Request) -> httpx.Response: ...


class HttpxTransport:
    """Transport backed by an optional :class:`httpx.Client` and an optional :class:`httpx.AsyncClient`.

    Args:
        client: Blocking client used by synchronous dispatch.
        async_client: Non-blocking client used by asynchronous dispatch.
        owns_clients: When ``True``, :meth:`close` / :meth:`aclose` also
            close the wrapped clients.
        async_client_factory: Builds the async client on the first
            :meth:`send_async` when *async_client* is not given. A client
            built this way is always owned.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        async_client: Optional[httpx.AsyncClient] = None,
        owns_clients: bool = False,
        async_client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
    ) -> None:
        self._client = client
        self._async_client = async_client
        self._async_client_factory = async_client_factory
        self._owns_clients = owns_clients
        self._owns_async_client = owns_clients

    @classmethod
    def default(cls) -> HttpxTransport:
        """Create a transport owning a sync client and a lazily built async client.

        Sync-only use never opens the async client, so :meth:`close` is
        enough to release everything.
        """
        return cls(httpx.Client(), owns_clients=True, async_client_factory=httpx.AsyncClient)

    @property
    def supports_sync(self) -> bool:
        return self._client is not None

    @property
    def supports_async(self) -> bool:
        return self._async_client is not None or self._async_client_factory is not None

    def send(self, request: httpx.Request) -> httpx.Response:
        assert self._client is not None, "No blocking client configured"
        return self._client.send(request)

    async def send_async(self, request: httpx.Request) -> httpx.Response:
        if self._async_client is None and self._async_client_factory is not None:
            self._async_client = self._async_client_factory()
            self._owns_async_client = True
        assert self._async_client is not None, "No async client configured"
        return await self._async_client.send(request)

    def close(self) -> None:
        if self._owns_clients and self._client is not None:
            self._client.close()

    async def aclose(self) -> None:
        if self._owns_async_client and self._async_client is not None:
            await self._async_client.aclose()
        self.close()


class _SendAdapter:
    """Wrap an arbitrary object exposing ``send(request)``."""

    def __init__(self, client: Any) -> None:
        self._client = client
        is_async = inspect.iscoroutinefunction(client.send)
        self.supports_sync = not is_async
        self.supports_async = is_async

    def send(self, request: httpx.Request) -> httpx.Response:
        return self._client.send(request)

    async def send_async(self, request: httpx.Request) -> httpx.Response:
        return await self._client.send(request)


def resolve_transport(client: Any) -> Transport:
    """Adapt *client* to the :class:`Transport` interface.

    Args:
        client: An ``httpx.Client``, an ``httpx.AsyncClient``, an existing
            :class:`Transport`, or any object with a ``send(request)`` method.

    Returns:
        A transport whose capability flags are fixed for its lifetime.

    Raises:
        TypeError: If *client* has no ``send`` method.
    """
    if isinstance(client, HttpxTransport):
        return client
    if isinstance(client, httpx.AsyncClient):
        return HttpxTransport(async_client=client)
    if isinstance(client, httpx.Client):
        return HttpxTransport(client=client)
    if isinstance(client, Transport):
        return client
    if callable(getattr(client, "send", None)):
        return _SendAdapter(client)
    raise TypeError(
        f"HTTP client must provide a send(request) method, got {type(client).__name__}"
    )
