"""Main entry point for the CBR Gateway CLI."""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import typer
from lxml import etree

from cbr_gateway import CBRGateway, CBRGatewayError, __version__, get_config
from cbr_gateway.infrastructure.logging import LoggingConfig, LogLevel, setup_logging

app = typer.Typer(help="Query the Central Bank of Russia web services.")


def _build_gateway() -> CBRGateway:
    return CBRGateway()


@contextmanager
def _gateway_errors() -> Iterator[None]:
    """Report gateway errors and exit with status 1."""
    try:
        yield
    except CBRGatewayError as e:
        typer.echo(f"Error [{e.error_code}]: {e.message}", err=True)
        raise typer.Exit(code=1) from e


def _parse_params(params: list[str]) -> dict[str, str]:
    arguments: dict[str, str] = {}
    for param in params:
        name, sep, value = param.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"expected name=value, got '{param}'", param_hint="--param")
        arguments[name.strip()] = value
    return arguments


def _date_option(value: str | None) -> str | int | None:
    """Unix timestamps arrive as digit strings."""
    if value is not None and value.strip().isdigit():
        return int(value)
    return value


def _render_structured(result: Any) -> str:
    return json.dumps(result, default=str, ensure_ascii=False, indent=2)


@app.callback()  # type: ignore[misc]
def main(
    log_level: LogLevel = typer.Option(LogLevel.WARNING, "--log-level", help="Log level"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON log lines"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also log to this file"),
) -> None:
    """Configure logging for every command."""
    settings = get_config().logging
    setup_logging(
        LoggingConfig(
            level=log_level,
            json_format=json_logs,
            category=settings.category,
            file_enabled=log_file is not None,
            file_path=log_file,
            max_bytes=settings.log_file_max_bytes,
            backup_count=settings.log_backup_count,
        )
    )


@app.command()  # type: ignore[misc]
def version() -> None:
    """Show the CBR Gateway version."""
    typer.echo(f"CBR Gateway version {__version__}")


@app.command()  # type: ignore[misc]
def schemas() -> None:
    """List the registered schemas and their endpoints."""
    gateway = _build_gateway()
    for descriptor in gateway.registry.descriptors():
        typer.echo(f"{descriptor.schema_id}\t{descriptor.endpoint}")


@app.command()  # type: ignore[misc]
def methods(schema: str = typer.Argument(..., help="Schema identifier")) -> None:
    """List the methods a schema offers."""
    with _gateway_errors():
        for name in _build_gateway().select_schema(schema).available_methods():
            typer.echo(name)


@app.command()  # type: ignore[misc]
def describe(
    schema: str = typer.Argument(..., help="Schema identifier"),
    method: str = typer.Argument(..., help="Method name"),
) -> None:
    """Show a method's parameter signature."""
    with _gateway_errors():
        typer.echo(_build_gateway().select_schema(schema).select_method(method).describe_method())


@app.command()  # type: ignore[misc]
def call(
    schema: str = typer.Argument(..., help="Schema identifier"),
    method: str = typer.Argument(..., help="Method name"),
    param: list[str] = typer.Option([], "--param", "-p", help="Argument as name=value"),
    xml: bool = typer.Option(False, "--xml", help="Print the XML payload of the result"),
) -> None:
    """Call any method of any schema."""
    arguments = _parse_params(param)
    with _gateway_errors():
        gateway = _build_gateway().select_schema(schema).select_method(method, arguments)
        if xml:
            fragment = gateway.as_xml_fragment()
            typer.echo(etree.tostring(fragment, encoding="unicode", pretty_print=True).rstrip())
        else:
            typer.echo(_render_structured(gateway.as_structured()))


@app.command()  # type: ignore[misc]
def courses(
    date: str | None = typer.Option(
        None, "--date", "-d", help="Date (d.m.Y or Unix timestamp), today if omitted"
    ),
) -> None:
    """List the currency rates set for a date."""
    with _gateway_errors():
        rates = _build_gateway().list_courses(_date_option(date))
    for rate in rates:
        typer.echo(f"{rate.char_code}\t{rate.nominal}\t{rate.value}\t{rate.name}")


@app.command()  # type: ignore[misc]
def rate(
    code: str = typer.Argument(..., help="Alphabetic currency code, e.g. USD"),
    date: str | None = typer.Option(
        None, "--date", "-d", help="Date (d.m.Y or Unix timestamp), today if omitted"
    ),
) -> None:
    """Show the rate of one currency unit."""
    with _gateway_errors():
        value = _build_gateway().lookup_course_rate(code, _date_option(date))
    if value is None:
        typer.echo(f"Currency {code.upper()} is not quoted", err=True)
        raise typer.Exit(code=1)
    typer.echo(str(value))


if __name__ == "__main__":
    app()
