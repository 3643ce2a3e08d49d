"""Option resolution from environment variables and explicit overrides.

Precedence (high to low):
    1. Explicit overrides (CLI flags, keyword arguments)
    2. ``SPARKPOST_*`` environment variables
    3. Defaults declared on :class:`~sparkmail.models.SparkPostOptions`

Environment variables are read as strings and coerced by the option model,
so ``SPARKPOST_RETRIES=3`` and ``SPARKPOST_ASYNC=false`` behave as expected.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Optional

from sparkmail.models import SparkPostOptions

# option name -> environment variable
ENV_VARS = {
    "key": "SPARKPOST_API_KEY",
    "host": "SPARKPOST_HOST",
    "protocol": "SPARKPOST_PROTOCOL",
    "port": "SPARKPOST_PORT",
    "version": "SPARKPOST_VERSION",
    "async": "SPARKPOST_ASYNC",
    "debug": "SPARKPOST_DEBUG",
    "retries": "SPARKPOST_RETRIES",
}


def options_from_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """Collect option values from ``SPARKPOST_*`` variables.

    Empty variables are treated as unset.

    Args:
        environ: Mapping to read instead of :data:`os.environ`.

    Returns:
        Raw option values keyed by option name (not yet validated).
    """
    env = os.environ if environ is None else environ
    options: dict[str, Any] = {}
    for option, var in ENV_VARS.items():
        value = env.get(var, "")
        if value:
            options[option] = value
    return options


def resolve_options(
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SparkPostOptions:
    """Build validated options from the environment and *overrides*.

    ``None`` values in *overrides* mean "not given" and do not mask the
    environment.

    Raises:
        ConfigurationError: If no API key is found or a value is invalid.
    """
    options = options_from_env(environ)
    for option, value in (overrides or {}).items():
        if value is not None:
            options[option] = value
    return SparkPostOptions.from_options(options)
