"""MCP commands -- drive the protocol responder's catalog from the shell.

Provides the ``apidex mcp`` sub-command group.  Each command performs the
same operation a protocol client would (list or read resources, list or
call tools) against the loaded specification, without a transport.  This
is the quickest way to see exactly what an AI assistant connected through a
server would receive.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from apidex.commands.common import fail, get_config, get_engine
from apidex.exceptions import ApidexError, InvalidUsageError
from apidex.output import OutputFormat, format_response, get_output, print_data
from apidex.presenters.responder import Responder


mcp_app = typer.Typer(no_args_is_help=True)


def _responder(ctx: typer.Context) -> Responder:
    engine = get_engine(ctx)
    config = get_config(ctx)
    return Responder(
        engine,
        scheme=config.resource_scheme,
        search_limit=config.search_limit,
    )


def parse_tool_args(pairs: Optional[list[str]]) -> dict[str, Any]:
    """Turn repeated ``key=value`` options into a tool argument dict.

    Values stay strings; the tool's argument model validates them.

    Raises:
        InvalidUsageError: If an item has no ``=``.
    """
    arguments: dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Expected key=value, got: {pair}")
        arguments[key.strip()] = value
    return arguments


@mcp_app.command("resources")
def mcp_resources(ctx: typer.Context) -> None:
    """List every resource URI.

    Example::

        apidex mcp resources
    """
    responder = _responder(ctx)
    resources = responder.list_resources()

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response([r.model_dump(mode="json") for r in resources])
        return

    rows = [[r.uri, r.name, r.description] for r in resources]
    output.print_table(["URI", "Name", "Description"], rows, title=f"Resources ({len(rows)})")


@mcp_app.command("read")
def mcp_read(
    ctx: typer.Context,
    uri: str = typer.Argument(help="Resource URI, e.g. apidex://api/tags."),
) -> None:
    """Read one resource and print its JSON payload.

    Example::

        apidex mcp read apidex://api/endpoints/pets
    """
    responder = _responder(ctx)
    try:
        content = responder.read_resource(uri)
    except ApidexError as exc:
        fail(exc)
    format_response(content.text)


@mcp_app.command("tools")
def mcp_tools(ctx: typer.Context) -> None:
    """List every tool with its description.

    ``--json`` includes each tool's input schema.
    """
    responder = _responder(ctx)
    tools = responder.list_tools()

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response([t.model_dump(mode="json") for t in tools])
        return

    rows = [
        [t.name, ", ".join(t.input_schema.get("properties", {})) or "-", t.description]
        for t in tools
    ]
    output.print_table(["Tool", "Arguments", "Description"], rows, title=f"Tools ({len(rows)})")


@mcp_app.command("call")
def mcp_call(
    ctx: typer.Context,
    name: str = typer.Argument(help="Tool name, e.g. search_endpoints."),
    arg: Optional[list[str]] = typer.Option(
        None, "--arg", "-a", help="Tool argument as key=value (repeatable)."
    ),
) -> None:
    """Call one tool and print its text result.

    Example::

        apidex mcp call search_endpoints --arg query=pet
        apidex mcp call get_endpoint_details -a path=/pets/{petId} -a method=get
    """
    responder = _responder(ctx)
    try:
        result = responder.call_tool(name, parse_tool_args(arg))
    except ApidexError as exc:
        fail(exc)

    if get_output().format == OutputFormat.JSON:
        format_response(result.model_dump(mode="json"))
    else:
        print_data(result.text)
