"""sparkmail -- request layer for the SparkPost transactional-email API.

Builds authenticated :mod:`httpx` requests from ``(method, path, payload,
headers)``, dispatches them synchronously or on :mod:`asyncio`, retries
HTTP 5xx answers a bounded number of times, and returns normalised
outcomes.

Typical use::

    from sparkmail import SparkPost

    sp = SparkPost({"key": "abc123", "async": False})
    outcome = sp.request("POST", "transmissions", {...})

Modules:
    client: :class:`SparkPost` -- request builder and dispatcher.
    response: Outcome types and the async promise.
    models: Option model and debug snapshot.
    transport: ``httpx`` adapters and capability resolution.
    resources: Endpoint helpers (``transmissions``).
    config: Options from ``SPARKPOST_*`` environment variables.
    app: ``sparkmail`` command-line entry point.
"""

__version__ = "2.3.0"

from sparkmail.client import SparkPost  # noqa: E402
from sparkmail.exceptions import (  # noqa: E402
    ClientError,
    ConfigurationError,
    ServerError,
    SparkmailError,
    TransportError,
    UnsupportedOperation,
)
from sparkmail.models import DebugContext, SparkPostOptions  # noqa: E402
from sparkmail.response import (  # noqa: E402
    Outcome,
    SparkPostFailure,
    SparkPostPromise,
    SparkPostResponse,
)
from sparkmail.transport import HttpxTransport  # noqa: E402

__all__ = [
    "SparkPost",
    "SparkPostOptions",
    "DebugContext",
    "SparkPostResponse",
    "SparkPostFailure",
    "SparkPostPromise",
    "Outcome",
    "HttpxTransport",
    "SparkmailError",
    "ConfigurationError",
    "UnsupportedOperation",
    "TransportError",
    "ClientError",
    "ServerError",
]
