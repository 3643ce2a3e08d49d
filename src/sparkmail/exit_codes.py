"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~sparkmail.exceptions.SparkmailError` subclass.
Shell wrappers can inspect the exit code of ``sparkmail request`` to tell a
rejected request apart from a network failure without parsing stderr.

Example::

    $ sparkmail request GET templates --sync
    $ echo $?
    6   # EXIT_CONNECTION_ERROR -- the API host could not be reached
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_CONFIGURATION_ERROR = 3
"""Options were missing or invalid (for example no API key)."""

EXIT_CLIENT_ERROR = 4
"""The API rejected the request with an HTTP 4xx status."""

EXIT_SERVER_ERROR = 5
"""The API returned an HTTP 5xx status after all retries."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_UNSUPPORTED = 7
"""The configured HTTP client cannot perform the requested dispatch mode."""
