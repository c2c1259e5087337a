"""Typer command line for mangoclient.

Three commands cover the everyday checks against a Mangopay environment:

* ``mangoclient token`` -- run the client-credentials grant and show the
  token type and expiry;
* ``mangoclient endpoints`` -- list the endpoint catalog;
* ``mangoclient call NAME`` -- dispatch one catalog call and print the
  payload (optionally followed by the rate-limit snapshot).

Credentials come from the usual configuration chain (see
:func:`~mangoclient.config.resolve_config`). :func:`main` is the console
script entry point declared in ``pyproject.toml``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer

from mangoclient import __version__
from mangoclient.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE

T = TypeVar("T")

app = typer.Typer(
    name="mangoclient",
    help="Command line client for the Mangopay REST API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mangoclient {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="Config file (JSON or YAML)."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output and call logging."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~mangoclient.output.OutputManager` and
    stores the shared options in ``ctx.obj``.
    """
    from mangoclient.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


def _make_api(ctx: typer.Context) -> Any:
    from mangoclient.api import Api
    from mangoclient.config import resolve_config
    from mangoclient.output import debug

    obj = ctx.obj or {}
    debug_mode = True if obj.get("verbose") else None
    config = resolve_config(obj.get("config_path"), debug_mode=debug_mode)
    debug(f"Client {config.client_id or '<unset>'} on {config.base_url} ({config.api_version})")
    return Api(config)


def _run(factory: Callable[[], Awaitable[T]]) -> T:
    """Run a coroutine and turn library errors into a clean exit code."""
    from mangoclient.exceptions import MangoError
    from mangoclient.output import error

    try:
        return asyncio.run(factory())
    except MangoError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _parse_pairs(pairs: list[str], option: str) -> dict[str, str]:
    """Parse repeated ``key=value`` options into a dict."""
    from mangoclient.output import error

    parsed: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            error(f"Invalid {option} value '{pair}', expected key=value")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        parsed[key] = value
    return parsed


@app.command("token")
def token_command(ctx: typer.Context) -> None:
    """Request an OAuth2 token and print its type and expiry."""
    from mangoclient.output import format_response

    async def _authorize() -> dict[str, Any]:
        async with _make_api(ctx) as api:
            await api.authorize()
            expires_at = datetime.fromtimestamp(api.session.expires_at, tz=timezone.utc)
            return {
                "token_type": api.session.authorization.split(" ", 1)[0],
                "expires_at": expires_at.isoformat(),
            }

    format_response(_run(_authorize))


@app.command("endpoints")
def endpoints_command(
    filter_text: Optional[str] = typer.Option(
        None, "--filter", "-f", help="Only show endpoints whose name or path contains TEXT."
    ),
) -> None:
    """List the endpoint catalog."""
    from mangoclient.endpoints import ENDPOINTS
    from mangoclient.output import print_table

    rows = [
        [endpoint.name, endpoint.method.value, endpoint.path]
        for endpoint in ENDPOINTS.values()
        if not filter_text or filter_text in endpoint.name or filter_text in endpoint.path
    ]
    print_table(["Name", "Method", "Path"], rows, title="Endpoints")


@app.command("call")
def call_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Endpoint name, see 'mangoclient endpoints'."),
    path: list[str] = typer.Option([], "--path", help="Path parameter as key=value."),
    query: list[str] = typer.Option([], "--query", help="Query parameter as key=value."),
    body: Optional[str] = typer.Option(None, "--body", help="JSON request body."),
    rate_limits: bool = typer.Option(
        False, "--rate-limits", help="Print the rate-limit snapshot afterwards."
    ),
) -> None:
    """Dispatch one catalog call and print the response payload.

    Example::

        mangoclient call users_get --path id=8494514
    """
    from mangoclient.output import error, format_response, print_table

    path_params = _parse_pairs(path, "--path")
    query_params = _parse_pairs(query, "--query")
    data: Any = None
    if body is not None:
        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            error(f"--body is not valid JSON: {exc}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    async def _call() -> tuple[Any, list[list[str]]]:
        async with _make_api(ctx) as api:
            payload = await api.call(name, path=path_params, query=query_params, data=data)
            limits = [
                [
                    str(window.minutes_interval),
                    str(window.calls_made),
                    str(window.calls_remaining),
                    str(window.reset_time),
                ]
                for window in api.rate_limits
            ]
            return payload, limits

    payload, limits = _run(_call)
    format_response(payload)
    if rate_limits:
        print_table(
            ["Window (min)", "Made", "Remaining", "Reset"], limits, title="Rate limits"
        )


def _setup_signal_handlers() -> None:
    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """Console script entry point.

    :class:`~mangoclient.exceptions.MangoError` instances escaping a command
    exit with their ``exit_code``; anything else exits with the generic
    failure code.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from mangoclient.exceptions import MangoError
        from mangoclient.output import error

        if isinstance(exc, MangoError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
