"""Normalised outcomes returned by :class:`~sparkmail.client.SparkPost`.

Every dispatch ends in exactly one of two shapes:

* :class:`SparkPostResponse` -- the API answered. This includes 4xx and
  5xx statuses; a 5xx that survives every retry is still a response, so
  callers inspect :attr:`~SparkPostResponse.status_code` (or call
  :meth:`~SparkPostResponse.raise_for_status`) themselves.
* :class:`SparkPostFailure` -- the transport raised before any response
  arrived. The original exception is kept as :attr:`~SparkPostFailure.cause`.

Both carry the optional :class:`~sparkmail.models.DebugContext` of the
original call. Asynchronous dispatch hands back a :class:`SparkPostPromise`
that resolves to one of the two.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Optional, Union

import httpx

from sparkmail.exceptions import ClientError, ServerError, TransportError
from sparkmail.models import DebugContext


@dataclass(frozen=True)
class SparkPostResponse:
    """A completed HTTP exchange.

    The body is kept as raw bytes and never interpreted here; callers that
    want structured data decode it themselves.

    Attributes:
        status_code: HTTP status of the final attempt.
        headers: Response headers (lower-cased names, repeated values
            comma-joined).
        body: Raw response body.
        debug: Snapshot of the original call when debugging is enabled.
    """

    ok: ClassVar[bool] = True

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    debug: Optional[DebugContext] = None

    @classmethod
    def from_httpx(
        cls, response: httpx.Response, debug: Optional[DebugContext] = None
    ) -> SparkPostResponse:
        """Copy status, headers and body out of an :class:`httpx.Response`."""
        return cls(
            status_code=response.status_code,
            headers=dict(response.headers.items()),
            body=response.content,
            debug=debug,
        )

    @property
    def text(self) -> str:
        """The body decoded as UTF-8, with undecodable bytes replaced."""
        return self.body.decode("utf-8", errors="replace")

    def raise_for_status(self) -> None:
        """Raise :class:`ClientError` on 4xx or :class:`ServerError` on 5xx."""
        status = self.status_code
        if status < 400 or status >= 600:
            return
        msg = f"HTTP {status}"
        detail = self.text[:200]
        if detail:
            msg = f"{msg}: {detail}"
        if status >= 500:
            raise ServerError(msg, status_code=status, debug=self.debug)
        raise ClientError(msg, status_code=status, debug=self.debug)


@dataclass(frozen=True)
class SparkPostFailure:
    """A dispatch that failed at the transport level (no HTTP response).

    Attributes:
        cause: The exception raised by the transport.
        debug: Snapshot of the original call when debugging is enabled.
    """

    ok: ClassVar[bool] = False

    cause: BaseException
    debug: Optional[DebugContext] = None

    def raise_error(self) -> None:
        """Re-raise :attr:`cause` as a :class:`TransportError` chained to it."""
        raise TransportError(str(self.cause) or type(self.cause).__name__, debug=self.debug) from self.cause


Outcome = Union[SparkPostResponse, SparkPostFailure]


class SparkPostPromise:
    """Pending handle for an asynchronous dispatch.

    Wraps the :class:`asyncio.Task` running the send/retry loop. Awaiting the
    promise yields the :data:`Outcome`. Cancelling it cancels the task, and
    with it the in-flight send; no further attempt is made.

    Example::

        promise = sparkpost.async_request("GET", "templates")
        outcome = await promise
    """

    def __init__(self, task: asyncio.Task, debug: Optional[DebugContext] = None) -> None:
        self._task = task
        self._debug = debug

    @property
    def debug(self) -> Optional[DebugContext]:
        return self._debug

    @property
    def state(self) -> str:
        """One of ``pending``, ``fulfilled``, ``rejected`` or ``cancelled``."""
        if not self._task.done():
            return "pending"
        if self._task.cancelled():
            return "cancelled"
        if self._task.exception() is not None:
            return "rejected"
        return "fulfilled" if self._task.result().ok else "rejected"

    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> bool:
        """Cancel the outstanding send. Returns ``False`` if already finished."""
        return self._task.cancel()

    def add_done_callback(self, fn: Callable[[SparkPostPromise], Any]) -> None:
        """Call ``fn(promise)`` once the dispatch settles (or is cancelled)."""
        self._task.add_done_callback(lambda _task: fn(self))

    def result(self) -> Outcome:
        """Return the outcome of a settled promise.

        Raises:
            asyncio.InvalidStateError: If the promise is still pending.
            asyncio.CancelledError: If the promise was cancelled.
        """
        return self._task.result()

    async def wait(self) -> Outcome:
        """Wait for the dispatch to settle and return its outcome."""
        return await self._task

    def then(
        self,
        on_fulfilled: Optional[Callable[[SparkPostResponse], Any]] = None,
        on_rejected: Optional[Callable[[SparkPostFailure], Any]] = None,
    ) -> asyncio.Task:
        """Chain callbacks onto the outcome.

        *on_fulfilled* receives a :class:`SparkPostResponse`, *on_rejected*
        a :class:`SparkPostFailure`. A callback may return an awaitable,
        which is awaited. When the matching callback is ``None`` the outcome
        passes through unchanged.

        Returns:
            A task resolving to the callback's return value.
        """

        async def _chain() -> Any:
            outcome = await self._task
            handler = on_fulfilled if outcome.ok else on_rejected
            if handler is None:
                return outcome
            value = handler(outcome)
            if inspect.isawaitable(value):
                value = await value
            return value

        return asyncio.get_running_loop().create_task(_chain())

    def __await__(self):
        return self._task.__await__()

    def __repr__(self) -> str:
        return f"<SparkPostPromise state={self.state}>"
