"""Command-line interface for calling declarative HTTP resources."""
from __future__ import annotations

import asyncio
import json
import os
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import requests
import typer

try:  # pragma: no cover - exercised in runtime environments
    from rich import box
    from rich.console import Console
    from rich.table import Table
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError(
        "The CLI requires Rich for table rendering. Install the CLI extras via "
        "'pip install plain-api[cli]' to enable this command."
    ) from exc

from .config import TransportConfig, compile_pattern, get_default_interpolation_pattern
from .exceptions import PlainApiError
from .mapping import interpolate
from .parsers import pluck, raise_on_failure
from .resource import create_resource
from .transport import SessionTransport

app = typer.Typer(help="Call HTTP APIs declaratively.", no_args_is_help=True)

console = Console(force_terminal=False, color_system=None)


def _env_verify_default() -> bool:
    # Accept common truthy/falsey representations (1/0, true/false, yes/no).
    env_verify = os.getenv("PLAIN_API_VERIFY_SSL")
    if env_verify is None:
        return True
    return env_verify.strip().lower() not in {"0", "false", "no", "off"}


def _coerce_simple(value: str) -> Any:
    v = value.strip()
    if not v:
        return ""
    low = v.lower()
    if low in {"true", "yes", "on"}:
        return True
    if low in {"false", "no", "off"}:
        return False
    if low in {"null", "none"}:
        return None
    try:
        if "." in v:
            return float(v)
        return int(v)
    except ValueError:
        return v


def parse_pairs(values: Sequence[str], option: str, *, coerce: bool = False) -> dict[str, Any]:
    """Parse repeated ``key=value`` options into a dict."""
    out: dict[str, Any] = {}
    for item in values:
        if "=" not in item:
            raise typer.BadParameter(f"{option} expects key=value, got {item!r}.")
        key, val = item.split("=", 1)
        key = key.strip()
        if not key:
            raise typer.BadParameter(f"{option} expects a non-empty key, got {item!r}.")
        out[key] = _coerce_simple(val) if coerce else val.strip()
    return out


def _build_transport(
    verify_ssl: bool,
    cert_path: Path | None,
    timeout: float,
    username: str | None,
    password: str | None,
) -> SessionTransport:
    verify_target: bool | str
    if cert_path:
        expanded_cert = cert_path.expanduser()
        if not expanded_cert.exists():
            raise typer.BadParameter("Certificate file not found for --cert option.")
        if not verify_ssl:
            raise typer.BadParameter("Cannot combine --cert with --no-verify.")
        verify_target = str(expanded_cert)
    else:
        verify_target = verify_ssl

    if bool(username) != bool(password):
        raise typer.BadParameter("--username and --password must be given together.")
    auth = (username, password) if username and password else None

    return SessionTransport(TransportConfig(timeout=timeout, verify_ssl=verify_target), auth=auth)


def _json_default(value: Any) -> Any:
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=_json_default))


def _render_rich_table(rows: Sequence[Mapping[str, Any]]) -> None:
    table = Table(box=box.SIMPLE, show_lines=False, header_style="bold cyan")
    columns: list[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    for column in columns:
        table.add_column(str(column))
    for row in rows:
        table.add_row(*("" if row.get(column) is None else str(row.get(column)) for column in columns))
    console.print(table)


def _present_output(payload: Any, *, as_table: bool) -> None:
    if not as_table:
        _echo_json(payload)
        return
    if not isinstance(payload, Sequence) or isinstance(payload, (str, bytes)):
        _echo_json(payload)
        return
    rows = [item for item in payload if isinstance(item, Mapping)]
    if not rows:
        _echo_json(payload)
        return
    _render_rich_table(rows)


def _handle_api_error(exc: PlainApiError) -> None:
    if exc.status_code is None:
        message = f"Error: {exc}"
    else:
        message = f"Request failed (status {exc.status_code}): {exc}"
    if exc.details:
        message += f"\nDetails: {json.dumps(exc.details, default=_json_default)}"
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _handle_transport_error(exc: requests.RequestException) -> None:
    reason = str(exc).strip() or exc.__class__.__name__
    typer.secho(f"Failed to communicate with API: {reason}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


@app.command("call")
def call(
    method: str = typer.Argument(..., help="HTTP method (get, post, put, patch, delete)."),
    api_url: str = typer.Argument(..., help="URL template, e.g. https://host/items/{{id}}."),
    param: list[str] = typer.Option(
        [], "--param", "-p", help="Payload field in key=value form.", show_default=False
    ),
    input_field: list[str] = typer.Option(
        [], "--input", "-i", help="Send payload field as logical=wire.", show_default=False
    ),
    header_field: list[str] = typer.Option(
        [], "--header", "-H", help="Send payload field as header logical=Header-Name.", show_default=False
    ),
    with_credentials: bool = typer.Option(
        False, "--with-credentials", help="Attach --username/--password to the request."
    ),
    pluck_path: list[str] = typer.Option(
        [], "--pluck", help="Key (or list index) to descend into the response body.", show_default=False
    ),
    as_table: bool = typer.Option(False, "--table", "-t", help="Render a list of objects as a table."),
    username: str | None = typer.Option(None, "--username", "-u", envvar="PLAIN_API_USERNAME"),
    password: str | None = typer.Option(
        None, "--password", envvar="PLAIN_API_PASSWORD", hide_input=True
    ),
    verify_ssl: bool = typer.Option(
        _env_verify_default(),
        "--verify/--no-verify",
        envvar="PLAIN_API_VERIFY_SSL",
        help="Enable or disable TLS certificate verification.",
        show_default=True,
    ),
    cert_path: Path | None = typer.Option(
        None,
        "--cert",
        envvar="PLAIN_API_CA_CERT",
        help="Path to a custom CA bundle for TLS verification.",
    ),
    timeout: float = typer.Option(
        30.0, "--timeout", envvar="PLAIN_API_TIMEOUT", help="Request timeout (seconds).", show_default=True
    ),
) -> None:
    """Call an endpoint once and print the parsed response."""

    payload = parse_pairs(param, "--param", coerce=True)
    parsers: list[Any] = [raise_on_failure]
    if pluck_path:
        parsers.append(pluck(*pluck_path))

    with _build_transport(verify_ssl, cert_path, timeout, username, password) as transport:
        resource = create_resource(
            method,
            api_url,
            input_map=parse_pairs(input_field, "--input") or None,
            headers_map=parse_pairs(header_field, "--header") or None,
            with_credentials=with_credentials,
            parsers=parsers,
            transport=transport,
        )
        try:
            result = asyncio.run(resource.call(payload or None))
        except PlainApiError as exc:
            _handle_api_error(exc)
            return
        except requests.RequestException as exc:
            _handle_transport_error(exc)
            return

    _present_output(result, as_table=as_table)


@app.command("url")
def url(
    template: str = typer.Argument(..., help="URL template to interpolate."),
    param: list[str] = typer.Option(
        [], "--param", "-p", help="Placeholder value in key=value form.", show_default=False
    ),
    pattern: str | None = typer.Option(
        None, "--pattern", help="Placeholder regex with one capture group for the name."
    ),
) -> None:
    """Print TEMPLATE with its placeholders filled in."""

    try:
        compiled = compile_pattern(pattern) if pattern else get_default_interpolation_pattern()
    except (re.error, ValueError) as exc:
        raise typer.BadParameter(f"Invalid --pattern: {exc}") from exc
    typer.echo(interpolate(template, parse_pairs(param, "--param"), compiled))


def main() -> None:  # pragma: no cover - console script entrypoint
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
