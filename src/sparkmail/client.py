"""SparkPost API client: request building, dispatch and retry.

:class:`SparkPost` turns ``(method, uri, payload, headers)`` into an
:class:`httpx.Request`, sends it through the installed
:class:`~sparkmail.transport.Transport`, and hands back a normalised outcome:

- **Request building** -- ``GET`` payloads become query parameters, every
  other method JSON-encodes the payload as the body. The URL is rooted at
  ``/api/<version>/`` and the ``Authorization``, ``Content-Type`` and
  ``User-Agent`` headers always win over caller-supplied ones.
- **Dispatch** -- ``options.async_`` picks :meth:`SparkPost.async_request`
  (returns a :class:`~sparkmail.response.SparkPostPromise` at once) or
  :meth:`SparkPost.sync_request` (blocks).
- **Retry** -- an HTTP 5xx is resent immediately, with the same request
  object, until ``options.retries`` extra attempts are spent. Transport
  exceptions are never retried.

Example::

    from sparkmail import SparkPost

    with SparkPost({"key": "abc123", "async": False, "retries": 2}) as sp:
        outcome = sp.request("GET", "templates", {"draft": False})
        if outcome.ok:
            print(outcome.status_code)
"""

from __future__ import annotations

import asyncio
import copy
import json
from collections.abc import Mapping
from typing import Any, Optional, Union

import httpx

from sparkmail import __version__
from sparkmail.exceptions import UnsupportedOperation
from sparkmail.models import DebugContext, SparkPostOptions
from sparkmail.output import get_output
from sparkmail.resources import Transmission
from sparkmail.response import Outcome, SparkPostFailure, SparkPostPromise, SparkPostResponse
from sparkmail.transport import HttpxTransport, Transport, resolve_transport

USER_AGENT = f"python-sparkmail/{__version__}"


def is_retryable(status_code: int) -> bool:
    """Return True for statuses in the inclusive 500-599 band."""
    return 500 <= status_code <= 599


class SparkPost:
    """Client for the SparkPost HTTP API.

    Args:
        options: A bare API key, an option mapping (see
            :class:`~sparkmail.models.SparkPostOptions`), or a ready-made
            options instance.
        http_client: Transport to send requests through. Accepts an
            :class:`httpx.Client`, an :class:`httpx.AsyncClient`, an
            :class:`~sparkmail.transport.HttpxTransport`, or any object with
            a ``send(request)`` method. When omitted, a transport owning
            both a sync and an async ``httpx`` client is created on first
            use and closed by :meth:`close` / :meth:`aclose`.

    Raises:
        ConfigurationError: If no usable API key is supplied.
    """

    def __init__(
        self,
        options: Union[str, Mapping[str, Any], SparkPostOptions],
        http_client: Any = None,
    ) -> None:
        self._options = _coerce_options(options)
        self._transport: Optional[Transport] = None
        self._owns_transport = False
        if http_client is not None:
            self.set_http_client(http_client)
        self.transmissions = Transmission(self)

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    @property
    def options(self) -> SparkPostOptions:
        return self._options

    def set_options(
        self, options: Union[str, Mapping[str, Any], SparkPostOptions]
    ) -> SparkPost:
        """Replace or merge options.

        A string is shorthand for ``{"key": options}``. The supplied keys
        replace the current values and every other key is kept. An options
        instance replaces everything.

        Raises:
            ConfigurationError: If the result has no usable key or any
                value is invalid.
        """
        if isinstance(options, SparkPostOptions):
            self._options = options
        else:
            overrides = {"key": options} if isinstance(options, str) else options
            self._options = self._options.merge(overrides)
        return self

    def set_http_client(self, http_client: Any) -> SparkPost:
        """Install the transport used for every following request.

        Sync and async capabilities are resolved here, once.
        """
        self._transport = resolve_transport(http_client)
        self._owns_transport = False
        return self

    def _get_transport(self) -> Transport:
        if self._transport is None:
            self._transport = HttpxTransport.default()
            self._owns_transport = True
        return self._transport

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str = "GET",
        uri: str = "",
        payload: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Union[Outcome, SparkPostPromise]:
        """Send a request in the mode selected by ``options.async_``.

        Returns:
            A :class:`~sparkmail.response.SparkPostPromise` in async mode,
            otherwise the settled outcome.
        """
        if self.options.async_:
            return self.async_request(method, uri, payload, headers)
        return self.sync_request(method, uri, payload, headers)

    def sync_request(
        self,
        method: str = "GET",
        uri: str = "",
        payload: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Outcome:
        """Send a request and block until it settles.

        Returns:
            :class:`~sparkmail.response.SparkPostResponse` for any HTTP
            answer (including a 5xx left after retries), or
            :class:`~sparkmail.response.SparkPostFailure` when the transport
            raised.

        Raises:
            UnsupportedOperation: If the transport cannot send blocking
                requests.
        """
        options = self.options
        transport = self._get_transport()
        if not transport.supports_sync:
            raise UnsupportedOperation("Your http client does not support synchronous requests.")

        request = self.build_request(method, uri, payload, headers)
        debug = self._debug_context(options, method, uri, payload, headers)
        try:
            response = transport.send(request)
            remaining = options.retries
            while remaining > 0 and is_retryable(response.status_code):
                remaining -= 1
                _log_retry(request, response.status_code, remaining)
                response = transport.send(request)
        except Exception as exc:
            get_output().debug(f"{request.method} {request.url} failed: {exc!r}")
            return SparkPostFailure(cause=exc, debug=debug)
        return SparkPostResponse.from_httpx(response, debug)

    def async_request(
        self,
        method: str = "GET",
        uri: str = "",
        payload: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> SparkPostPromise:
        """Schedule a request on the running event loop and return at once.

        The request is built once and reused by every retry. Attempts run
        strictly one after another inside a single task.

        Raises:
            UnsupportedOperation: If the transport cannot send non-blocking
                requests, or no event loop is running.
        """
        options = self.options
        transport = self._get_transport()
        if not transport.supports_async:
            raise UnsupportedOperation("Your http client does not support asynchronous requests.")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise UnsupportedOperation(
                "async_request() must be called from a running event loop."
            ) from exc

        request = self.build_request(method, uri, payload, headers)
        debug = self._debug_context(options, method, uri, payload, headers)
        task = loop.create_task(_send_async_with_retry(transport, request, options.retries, debug))
        return SparkPostPromise(task, debug)

    # ------------------------------------------------------------------ #
    # Request building
    # ------------------------------------------------------------------ #

    def build_request(
        self,
        method: str,
        uri: str,
        payload: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Request:
        """Build the outbound request without sending it.

        ``GET`` payloads become query parameters; any other method sends
        the JSON-encoded payload (``{}`` when omitted) as the body.
        """
        method = method.strip().upper()
        if method == "GET":
            params = payload or {}
            body = None
        else:
            params = {}
            body = payload if payload is not None else {}

        url = self.get_url(uri, params)

        # Applied one at a time so names differing only in case replace each other.
        request_headers = httpx.Headers()
        for name, value in self.get_http_headers(headers).items():
            request_headers[name] = value

        content = json.dumps(body).encode("utf-8") if body is not None else None
        return httpx.Request(method, url, headers=request_headers, content=content)

    def get_url(self, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """Return the full URL for *path* with *params* as a literal query string.

        List and tuple values are comma-joined. Nothing is percent-encoded.
        """
        options = self.options
        query = "&".join(f"{key}={_query_value(value)}" for key, value in (params or {}).items())
        port = f":{options.port}" if options.port else ""
        url = f"{options.protocol}://{options.host}{port}/api/{options.version}/{path.strip('/')}"
        if query:
            url = f"{url}?{query}"
        return url

    def get_http_headers(self, headers: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        """Merge *headers* with the defaults; the defaults win on collision."""
        return {
            **(headers or {}),
            "Authorization": self.options.key,
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

    @staticmethod
    def _debug_context(
        options: SparkPostOptions,
        method: str,
        uri: str,
        payload: Any,
        headers: Optional[Mapping[str, str]],
    ) -> Optional[DebugContext]:
        if not options.debug:
            return None
        return DebugContext(
            method=method, uri=uri, payload=copy.deepcopy(payload), headers=dict(headers or {})
        )

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def close(self) -> None:
        """Close the default transport, if this client created it."""
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            self._transport.close()

    async def aclose(self) -> None:
        """Close the default transport's sync and async clients."""
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            await self._transport.aclose()

    def __enter__(self) -> SparkPost:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    async def __aenter__(self) -> SparkPost:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


async def _send_async_with_retry(
    transport: Transport,
    request: httpx.Request,
    retries: int,
    debug: Optional[DebugContext],
) -> Outcome:
    """Await sends one at a time until a non-5xx status or the budget runs out."""
    try:
        response = await transport.send_async(request)
        remaining = retries
        while remaining > 0 and is_retryable(response.status_code):
            remaining -= 1
            _log_retry(request, response.status_code, remaining)
            response = await transport.send_async(request)
    except Exception as exc:
        get_output().debug(f"{request.method} {request.url} failed: {exc!r}")
        return SparkPostFailure(cause=exc, debug=debug)
    return SparkPostResponse.from_httpx(response, debug)


def _coerce_options(options: Union[str, Mapping[str, Any], SparkPostOptions]) -> SparkPostOptions:
    if isinstance(options, SparkPostOptions):
        return options
    if isinstance(options, str):
        return SparkPostOptions.from_api_key(options)
    return SparkPostOptions.from_options(options)


def _log_retry(request: httpx.Request, status_code: int, remaining: int) -> None:
    get_output().debug(
        f"Server error {status_code} on {request.method} {request.url}, "
        f"retrying ({remaining} retries left)"
    )


def _query_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(_query_value(item) for item in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)
