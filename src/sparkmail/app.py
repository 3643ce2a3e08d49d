"""Typer application and console entry point for sparkmail.

``sparkmail request METHOD PATH`` sends one call through
:class:`~sparkmail.client.SparkPost` using options resolved by
:func:`~sparkmail.config.resolve_options` (flags over ``SPARKPOST_*``
variables over defaults). The response body goes to stdout; the status
line, retries and errors go to stderr. Failures exit with the code of the
matching :class:`~sparkmail.exceptions.SparkmailError`.
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, Optional

import typer

from sparkmail import __version__
from sparkmail.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE

app = typer.Typer(
    name="sparkmail",
    help="Send requests to the SparkPost API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"sparkmail {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Install the global output manager from the root flags."""
    from sparkmail.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))


@app.command("request")
def request_command(
    method: str = typer.Argument(..., help="HTTP method, e.g. GET or POST."),
    path: str = typer.Argument(..., help="Path under /api/<version>/, e.g. templates."),
    param: list[str] = typer.Option(
        [], "--param", "-P", help="Payload field KEY=VALUE (query string for GET). Repeatable."
    ),
    header: list[str] = typer.Option([], "--header", "-H", help="Extra header 'Name: value'. Repeatable."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON object used as the payload."),
    key: Optional[str] = typer.Option(None, "--key", "-k", help="API key [default: $SPARKPOST_API_KEY]."),
    host: Optional[str] = typer.Option(None, "--host", help="API host [default: api.sparkpost.com]."),
    port: Optional[int] = typer.Option(None, "--port", help="API port [default: 443]."),
    retries: Optional[int] = typer.Option(None, "--retries", "-r", help="Extra attempts on HTTP 5xx."),
    use_async: Optional[bool] = typer.Option(None, "--async/--sync", help="Dispatch mode [default: async]."),
    debug: bool = typer.Option(False, "--debug", help="Print the original call alongside the result."),
) -> None:
    """Send one request and print the response body."""
    from sparkmail.config import resolve_options
    from sparkmail.exceptions import SparkmailError
    from sparkmail.output import error

    try:
        payload = _build_payload(data, param)
        headers = _parse_headers(header)
        options = resolve_options(
            {
                "key": key,
                "host": host,
                "port": port,
                "retries": retries,
                "async": use_async,
                "debug": debug or None,
            }
        )
        outcome = _dispatch(options, method, path, payload, headers)
        _render(outcome)
    except SparkmailError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code)
    except ValueError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_INVALID_USAGE)


def _dispatch(options: Any, method: str, path: str, payload: Any, headers: dict[str, str]) -> Any:
    """Run the call in the configured mode and return its outcome."""
    from sparkmail.client import SparkPost

    sparkpost = SparkPost(options)
    if options.async_:

        async def _run() -> Any:
            async with sparkpost:
                return await sparkpost.async_request(method, path, payload, headers)

        return asyncio.run(_run())

    with sparkpost:
        return sparkpost.sync_request(method, path, payload, headers)


def _render(outcome: Any) -> None:
    """Print an outcome; raise the matching error for failures and 4xx/5xx."""
    from sparkmail.output import get_output

    output = get_output()
    if outcome.debug is not None:
        output.info(f"Request: {json.dumps(outcome.debug.as_dict(), default=str)}")
    if not outcome.ok:
        outcome.raise_error()

    output.info(f"HTTP {outcome.status_code}")
    if outcome.body:
        try:
            output.format_response(json.loads(outcome.body))
        except ValueError:
            output.format_response(outcome.text)
    outcome.raise_for_status()


def _build_payload(data: Optional[str], params: list[str]) -> Optional[dict[str, Any]]:
    """Combine ``--data`` JSON and ``--param`` pairs; params win on collision."""
    payload: dict[str, Any] = {}
    if data is not None:
        try:
            parsed = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ValueError(f"--data is not valid JSON: {exc}") from exc
        if not isinstance(parsed, dict):
            raise ValueError("--data must be a JSON object")
        payload.update(parsed)
    for item in params:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise ValueError(f"Invalid --param {item!r}, expected KEY=VALUE")
        payload[name] = value
    return payload or None


def _parse_headers(headers: list[str]) -> dict[str, str]:
    result: dict[str, str] = {}
    for item in headers:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"Invalid --header {item!r}, expected 'Name: value'")
        result[name.strip()] = value.strip()
    return result


def main() -> None:
    """Console-script entry point."""
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from sparkmail.output import error

        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
