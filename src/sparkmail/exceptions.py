"""Exception hierarchy for sparkmail.

All exceptions inherit from :class:`SparkmailError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`sparkmail.exit_codes`
and an optional ``debug`` snapshot of the call that produced it.

Only :class:`ConfigurationError` and :class:`UnsupportedOperation` escape
:class:`~sparkmail.client.SparkPost` on their own. Transport failures are
returned as :class:`~sparkmail.response.SparkPostFailure` and only become
:class:`TransportError` when the caller asks for it; HTTP statuses become
:class:`ClientError` / :class:`ServerError` only through
:meth:`~sparkmail.response.SparkPostResponse.raise_for_status`.

Subclass hierarchy::

    SparkmailError (exit 1)
    +-- ConfigurationError   (exit 3)
    +-- UnsupportedOperation (exit 7)
    +-- TransportError       (exit 6)
    +-- ClientError          (exit 4)
    +-- ServerError          (exit 5)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sparkmail.exit_codes import (
    EXIT_CLIENT_ERROR,
    EXIT_CONFIGURATION_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_SERVER_ERROR,
    EXIT_UNSUPPORTED,
)

if TYPE_CHECKING:
    from sparkmail.models import DebugContext


class SparkmailError(Exception):
    """Base exception for all sparkmail errors.

    Args:
        message: Human-readable error description.
        debug: Snapshot of the original call, when debugging is enabled.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(
        self,
        message: str,
        debug: Optional[DebugContext] = None,
        exit_code: int | None = None,
    ):
        super().__init__(message)
        self.debug = debug
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(SparkmailError):
    """Raised when options are missing or invalid (e.g. blank API key, negative retries)."""

    exit_code = EXIT_CONFIGURATION_ERROR


class UnsupportedOperation(SparkmailError):
    """Raised when the HTTP client lacks the capability a dispatch mode needs.

    Asynchronous dispatch against a blocking-only client never falls back
    to a synchronous send.
    """

    exit_code = EXIT_UNSUPPORTED


class TransportError(SparkmailError):
    """Raised for network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR


class ClientError(SparkmailError):
    """Raised on request when the API answered with an HTTP 4xx status."""

    exit_code = EXIT_CLIENT_ERROR

    def __init__(self, message: str, status_code: int, debug: Optional[DebugContext] = None):
        super().__init__(message, debug=debug)
        self.status_code = status_code


class ServerError(SparkmailError):
    """Raised on request when the API answered with an HTTP 5xx status."""

    exit_code = EXIT_SERVER_ERROR

    def __init__(self, message: str, status_code: int, debug: Optional[DebugContext] = None):
        super().__init__(message, debug=debug)
        self.status_code = status_code
