"""Command line interface for :mod:`schemagov`."""

import asyncio
import json
from typing import Any

import click

from .config import Config
from .version import VERSION

__all__ = [
    "main",
]


def _parse_arg(pair: str) -> tuple[str, Any]:
    if "=" not in pair:
        raise click.BadParameter(f"expected key=value, got {pair!r}")
    key, raw = pair.split("=", 1)
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key.strip(), value


@click.group()
@click.version_option(VERSION)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    r"""schemagov - SPARQL tools for the schema.gov.it semantic catalogue.

    Serve the tools over MCP or HTTP, or call one directly.


    Example: schemagov call list_provinces -a keyword=Roma
    """
    import logging

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            force=True,
        )
        logging.getLogger("schemagov").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(
            level=Config.LOG_LEVEL.upper(), format="%(levelname)s: %(message)s", force=True
        )


@main.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse"]),
    default="stdio",
    show_default=True,
    help="MCP transport",
)
def serve(transport: str) -> None:
    """Run the MCP server.

    With ``--transport sse`` it listens on MCP_HOST:MCP_PORT.
    """
    from .server import run

    run(transport)


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=5000, show_default=True, type=int)
@click.option("--debug", is_flag=True, help="Flask debug mode")
def web(host: str, port: int, debug: bool) -> None:
    """Run the HTTP API (Flask development server)."""
    from .backend.app import create_app

    click.echo(f"Serving the tools API at http://{host}:{port}/api/tools/")
    create_app().run(host=host, port=port, debug=debug)


@main.command()
@click.argument("tool")
@click.option(
    "--arg",
    "-a",
    "args",
    multiple=True,
    help="Tool argument as key=value; values are parsed as JSON when possible",
)
def call(tool: str, args: tuple[str, ...]) -> None:
    """Call one tool and print its output.


    Example:
      schemagov call list_municipalities -a limit=10 -a keyword=Roma
    """
    from .dispatch import Toolkit

    try:
        arguments = dict(_parse_arg(pair) for pair in args)
    except click.BadParameter as e:
        raise click.UsageError(str(e)) from e

    async def _run():
        async with Toolkit.from_config(Config) as kit:
            return await kit.call(tool, arguments)

    response = asyncio.run(_run())
    click.echo(response.text)
    if response.is_error:
        raise SystemExit(1)


@main.command()
def usage() -> None:
    """Summarize the usage log (same output as the analyze_usage tool)."""
    from .dispatch import Toolkit

    async def _run():
        async with Toolkit.from_config(Config) as kit:
            return await kit.call("analyze_usage")

    response = asyncio.run(_run())
    try:
        click.echo(json.dumps(json.loads(response.text), indent=2, ensure_ascii=False))
    except json.JSONDecodeError:
        click.echo(response.text)


@main.command()
@click.option("--endpoint", default=None, help="SPARQL endpoint URL (default: SPARQL_ENDPOINT)")
@click.option("--timeout", default=5.0, show_default=True, help="Seconds")
def health(endpoint: str, timeout: float) -> None:
    """Ping the SPARQL endpoint with ASK {}."""
    from .backend.services.endpoint_service import check_health

    result = check_health(endpoint or Config.SPARQL_ENDPOINT, timeout=timeout)
    click.echo(f"{result['endpoint']}: {result['status']}")
    if result["status"] != "ok":
        raise SystemExit(1)


if __name__ == "__main__":
    main()
