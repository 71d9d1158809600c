"""Browse commands -- navigate, search, and inspect endpoints.

Registered directly on the root application:

* ``apidex browse`` -- the whole index (or a search) grouped by tag.
* ``apidex search TERM`` -- flat keyword search results.
* ``apidex show PATH METHOD`` -- one endpoint with expanded schemas.
* ``apidex tags`` -- declared categories with endpoint counts.
* ``apidex list TAG`` -- endpoints of one category.
* ``apidex schemas`` / ``apidex schema NAME`` -- type definitions.

Lookups that find nothing print a message on stderr and exit with
:data:`~apidex.exit_codes.EXIT_NOT_FOUND`; searches that match nothing
are a normal, successful outcome.
"""

from __future__ import annotations

from typing import Optional

import typer

from apidex.commands.common import fail, get_engine
from apidex.engine.results import lookup_result, search_result, tag_listing
from apidex.exceptions import InvalidUsageError
from apidex.exit_codes import EXIT_NOT_FOUND
from apidex.output import OutputFormat, get_output, info, suggest
from apidex.presenters import browser


def browse_command(
    ctx: typer.Context,
    search: Optional[str] = typer.Option(
        None, "--search", "-s", help="Only show endpoints matching this term."
    ),
    tag: Optional[str] = typer.Option(
        None, "--tag", "-t", help="Only show endpoints in this category."
    ),
) -> None:
    """Show endpoints grouped by tag.

    Example::

        apidex browse
        apidex browse --search invoice --tag Billing
    """
    engine = get_engine(ctx)

    if search is not None:
        try:
            records = engine.search(search, tag)
        except InvalidUsageError as exc:
            fail(exc)
    elif tag:
        records = engine.list_by_tag(tag)
    else:
        records = engine.endpoints

    if not records:
        info("No endpoints match.")
        suggest("List categories with: apidex tags")
        return

    browser.render_navigation(engine, records)


def search_command(
    ctx: typer.Context,
    term: str = typer.Argument(help="Text to look for in paths, summaries, and parameters."),
    tag: Optional[str] = typer.Option(
        None, "--tag", "-t", help="Restrict the search to one category."
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l", min=1, help="Show at most this many results."
    ),
) -> None:
    """Search endpoints by keyword (case-insensitive).

    Example::

        apidex search candidate
        apidex search candidate --tag Jobs --limit 5
    """
    engine = get_engine(ctx)
    try:
        result = search_result(engine, term, tag, limit=limit)
    except InvalidUsageError as exc:
        fail(exc)

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response(result.model_dump(mode="json"))
        return

    if result.total == 0:
        info(f"{result.message}.")
        suggest("List categories with: apidex tags")
        return

    browser.render_endpoint_list(result.endpoints, title=result.message)
    if result.truncated:
        info(f"Showing {len(result.endpoints)} of {result.total}; raise --limit for more.")


def show_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="Endpoint path exactly as declared, e.g. /pets/{petId}."),
    method: str = typer.Argument(help="HTTP method (any case)."),
) -> None:
    """Show one endpoint with parameters, responses, and expanded schemas.

    Example::

        apidex show /pets/{petId} get
    """
    engine = get_engine(ctx)
    result = lookup_result(engine, path, method)

    if not result.found or result.endpoint is None:
        info(result.message)
        suggest(f"Search for it with: apidex search {path}")
        raise typer.Exit(code=EXIT_NOT_FOUND)

    browser.render_detail(result.endpoint)


def tags_command(ctx: typer.Context) -> None:
    """List declared categories with their endpoint counts."""
    engine = get_engine(ctx)
    tags = engine.list_tags()
    if not tags:
        info("This spec declares no tags.")
        suggest("Browse everything with: apidex browse")
        return
    browser.render_tags(tags)


def list_command(
    ctx: typer.Context,
    tag: str = typer.Argument(help="Category name (case-insensitive)."),
) -> None:
    """List the endpoints of one category.

    Example::

        apidex list pets
    """
    engine = get_engine(ctx)
    listing = tag_listing(engine, tag)

    if not listing.found:
        info(listing.message)
        raise typer.Exit(code=EXIT_NOT_FOUND)

    browser.render_endpoint_list(listing.endpoints, title=listing.message)


def schemas_command(ctx: typer.Context) -> None:
    """List the type definitions of the spec."""
    engine = get_engine(ctx)
    if not engine.definitions:
        info("No schemas defined in this spec.")
        return
    browser.render_definitions(engine)


def schema_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Definition name, e.g. Pet."),
) -> None:
    """Show one type definition fully expanded.

    Example::

        apidex schema Pet
    """
    engine = get_engine(ctx)
    if name not in engine.definitions:
        info(f"Schema not found: {name}")
        suggest("List schemas with: apidex schemas")
        raise typer.Exit(code=EXIT_NOT_FOUND)
    browser.render_definition(engine, name)
