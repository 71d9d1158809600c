"""Terminal browser -- grouped navigation and endpoint detail views.

Every function here renders through the global
:class:`~apidex.output.OutputManager`, so the same call produces Rich
tables on a TTY, tab-separated text when piped, and JSON with ``--json``.
In JSON mode each view emits the serialised result model instead of its
tables, which keeps the machine-readable shape identical to the protocol
responder's.
"""

from __future__ import annotations

from typing import Optional, Sequence

from apidex.engine.expander import expand_definition
from apidex.engine.query import QueryEngine
from apidex.engine.results import EndpointDetail, EndpointSummary, TagGroup, tag_groups
from apidex.models import ArrayNode, EndpointRecord, ObjectNode, ReferenceNode, TagSummary
from apidex.output import OutputFormat, get_output

REQUIRED_MARKER = " *"
_PROPERTY_PREVIEW = 5


def _label(endpoint: EndpointSummary) -> str:
    return endpoint.summary or endpoint.path


def render_navigation(
    engine: QueryEngine,
    records: Optional[Sequence[EndpointRecord]] = None,
) -> list[TagGroup]:
    """Render *records* (default: the whole index) grouped by tag.

    One table per tag, titled ``<tag> (<count>)``, with a row per
    endpoint showing its method and summary (or path when it has none).

    Returns:
        The groups that were rendered.
    """
    groups = tag_groups(engine, tuple(records) if records is not None else None)
    output = get_output()

    if output.format == OutputFormat.JSON:
        output.format_response([g.model_dump(mode="json") for g in groups])
        return groups

    for group in groups:
        rows = [
            [e.method, _label(e) + (" (deprecated)" if e.deprecated else "")]
            for e in group.endpoints
        ]
        output.print_table(
            ["Method", "Endpoint"], rows, title=f"{group.tag} ({group.count})"
        )
    return groups


def render_endpoint_list(
    endpoints: Sequence[EndpointSummary],
    title: Optional[str] = None,
) -> None:
    """Render a flat list of endpoints (search results, one category)."""
    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response([e.model_dump(mode="json") for e in endpoints])
        return

    rows = [[e.method, e.path, e.tag, e.summary or "-"] for e in endpoints]
    output.print_table(["Method", "Path", "Tag", "Summary"], rows, title=title)


def render_detail(detail: EndpointDetail) -> None:
    """Render one endpoint in full.

    Shows a header (method, path, summary falling back to operationId,
    description), a parameters table with required parameters marked
    ``*``, and a responses table.  Schemas that expand to a single line
    appear inline in the tables; multi-line expansions are printed as
    separate blocks after them.
    """
    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response(detail.model_dump(mode="json", by_alias=True))
        return

    output.print_fields(
        [
            ("Method", detail.method),
            ("Path", detail.path),
            ("Summary", detail.summary or detail.operation_id or ""),
            ("Operation ID", detail.operation_id or ""),
            ("Tags", ", ".join(detail.tags)),
            ("Description", detail.description),
            ("Deprecated", "yes" if detail.deprecated else ""),
        ],
        title=f"{detail.method} {detail.path}",
    )

    blocks: list[tuple[str, str]] = []

    if detail.parameters:
        rows = []
        for param in detail.parameters:
            shown_type = param.type_text
            if "\n" in shown_type:
                blocks.append((f"Parameter {param.name}", shown_type))
                shown_type = param.type
            rows.append(
                [
                    param.name + (REQUIRED_MARKER if param.required else ""),
                    param.location,
                    shown_type,
                    param.description or "-",
                ]
            )
        output.print_table(["Name", "In", "Type", "Description"], rows, title="Parameters")

    if detail.responses:
        rows = []
        for response in detail.responses:
            schema = response.schema_ or "-"
            if "\n" in schema:
                blocks.append((f"Response {response.code}", schema))
                schema = "see below"
            rows.append([response.code, response.description or "-", schema])
        output.print_table(["Code", "Description", "Schema"], rows, title="Responses")

    for title, text in blocks:
        output.print_block(text, title=title)


def render_tags(tags: Sequence[TagSummary]) -> None:
    """Render declared categories with their endpoint counts."""
    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response([t.model_dump(mode="json") for t in tags])
        return

    rows = [[t.name, str(t.endpoint_count), t.description or "-"] for t in tags]
    output.print_table(["Tag", "Endpoints", "Description"], rows, title=f"Tags ({len(rows)})")


def _kind(node: object) -> str:
    if isinstance(node, ReferenceNode):
        return f"-> {node.name}"
    if isinstance(node, ArrayNode):
        return "array"
    if isinstance(node, ObjectNode):
        return "object"
    return getattr(node, "type", None) or "any"


def render_definitions(engine: QueryEngine) -> None:
    """Render the definitions table: name, kind, and the first property names."""
    output = get_output()
    rows: list[list[str]] = []
    for name, node in sorted(engine.definitions.items()):
        props = ""
        if isinstance(node, ObjectNode):
            names = list(node.properties)
            props = ", ".join(names[:_PROPERTY_PREVIEW])
            if len(names) > _PROPERTY_PREVIEW:
                props += "..."
        rows.append([name, _kind(node), props])

    output.print_table(["Schema", "Kind", "Properties"], rows, title=f"Schemas ({len(rows)})")


def render_definition(engine: QueryEngine, name: str) -> str:
    """Render one definition expanded, and return the expansion."""
    text = expand_definition(name, engine.definitions)
    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response({"name": name, "schema": text})
    else:
        output.print_block(text, title=name)
    return text
