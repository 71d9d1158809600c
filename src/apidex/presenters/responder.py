"""Protocol responder -- a fixed catalog of resources and tools over the query engine.

This module is the transport-agnostic half of a Model Context Protocol
style server.  It exposes the :class:`~apidex.engine.query.QueryEngine`
through:

**Resources** (read-only, addressed by URI, JSON payloads):

* ``<scheme>://api/overview`` -- API metadata and counts.
* ``<scheme>://api/tags`` -- declared categories with endpoint counts.
* ``<scheme>://api/endpoints`` -- method, path, tag and summary of every
  endpoint.
* ``<scheme>://api/endpoints/<tag>`` -- one per declared category
  (URL-encoded name), with descriptions and parameters.

**Tools** (invocable, validated arguments, text payloads):

* ``search_endpoints(query, tag?)`` -- keyword search, capped at
  ``search_limit`` results after querying.
* ``get_endpoint_details(path, method)`` -- one endpoint in full.
* ``list_tags()`` -- declared categories with counts.
* ``list_endpoints_by_tag(tag)`` -- one category.

Every result is one of the :mod:`~apidex.engine.results` models,
serialised.  "Not found" is a normal payload.  Unknown URIs, unknown tool
names and arguments failing validation raise
:class:`~apidex.exceptions.InvalidUsageError`; a transport maps those to
its own fault type.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import quote, unquote

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from apidex.engine.query import QueryEngine
from apidex.engine.results import (
    endpoint_summary,
    lookup_result,
    overview,
    search_result,
    tag_listing,
)
from apidex.exceptions import InvalidUsageError
from apidex.models import HTTPMethod

DEFAULT_SEARCH_LIMIT = 20
"""Maximum endpoints returned by ``search_endpoints`` unless configured otherwise."""

JSON_MIME_TYPE = "application/json"


# --- Tool argument models ---


class SearchArgs(BaseModel):
    """Arguments of ``search_endpoints``."""

    model_config = ConfigDict(extra="forbid")

    query: str = Field(min_length=1, description="Search term to find in endpoints")
    tag: Optional[str] = Field(
        default=None, description="Optional: filter by API tag/category"
    )


class EndpointArgs(BaseModel):
    """Arguments of ``get_endpoint_details``."""

    model_config = ConfigDict(extra="forbid")

    path: str = Field(
        min_length=1, description="The API endpoint path (e.g., /pets/{petId})"
    )
    method: HTTPMethod = Field(description="HTTP method (GET, POST, PUT, DELETE, ...)")

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class TagArgs(BaseModel):
    """Arguments of ``list_endpoints_by_tag``."""

    model_config = ConfigDict(extra="forbid")

    tag: str = Field(min_length=1, description="The API tag/category name")


class NoArgs(BaseModel):
    """Tools without arguments."""

    model_config = ConfigDict(extra="forbid")


# --- Catalog entries ---


class ResourceInfo(BaseModel):
    """An addressable read-only resource."""

    uri: str
    name: str
    description: str = ""
    mime_type: str = JSON_MIME_TYPE


class ResourceContent(BaseModel):
    """The payload of a resource read."""

    uri: str
    mime_type: str = JSON_MIME_TYPE
    text: str


class ToolInfo(BaseModel):
    """An invocable tool with its JSON input schema."""

    name: str
    description: str
    input_schema: dict[str, Any]


class ToolResult(BaseModel):
    """The payload of a tool call.

    ``text`` is what a client displays; ``data`` is the structured result it
    was rendered from.
    """

    tool: str
    text: str
    data: Any = None


@dataclass(frozen=True)
class _Tool:
    name: str
    description: str
    args_model: type[BaseModel]
    handler: Callable[["Responder", Any], ToolResult]


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


class Responder:
    """Serve the resource and tool catalog for one query engine.

    Args:
        engine: The engine to query.
        scheme: URI scheme of the resources (``<scheme>://api/...``).
        search_limit: Cap applied to ``search_endpoints`` results.
    """

    def __init__(
        self,
        engine: QueryEngine,
        scheme: str = "apidex",
        search_limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> None:
        self._engine = engine
        self._scheme = scheme
        self._search_limit = search_limit
        self._tools = {tool.name: tool for tool in _TOOLS}

    # ------------------------------------------------------------------ #
    # Resources
    # ------------------------------------------------------------------ #

    @property
    def _prefix(self) -> str:
        return f"{self._scheme}://api"

    def list_resources(self) -> list[ResourceInfo]:
        """Enumerate every resource: three fixed ones plus one per declared category."""
        resources = [
            ResourceInfo(
                uri=f"{self._prefix}/overview",
                name="API Overview",
                description="API title, version, and endpoint counts",
            ),
            ResourceInfo(
                uri=f"{self._prefix}/tags",
                name="API Tags/Categories",
                description="List all available API categories (tags)",
            ),
            ResourceInfo(
                uri=f"{self._prefix}/endpoints",
                name="All Endpoints Summary",
                description="Summary of all API endpoints",
            ),
        ]
        for tag in self._engine.list_tags():
            resources.append(
                ResourceInfo(
                    uri=f"{self._prefix}/endpoints/{quote(tag.name, safe='')}",
                    name=f"{tag.name} Endpoints",
                    description=tag.description or f"Endpoints for {tag.name}",
                )
            )
        return resources

    def read_resource(self, uri: str) -> ResourceContent:
        """Read one resource.

        Raises:
            InvalidUsageError: If *uri* is not part of the catalog.
        """
        if uri == f"{self._prefix}/overview":
            data: Any = overview(self._engine).model_dump(mode="json")
        elif uri == f"{self._prefix}/tags":
            data = [t.model_dump(mode="json") for t in self._engine.list_tags()]
        elif uri == f"{self._prefix}/endpoints":
            data = [
                endpoint_summary(r).model_dump(
                    mode="json", include={"method", "path", "tag", "summary"}
                )
                for r in self._engine.endpoints
            ]
        elif uri.startswith(f"{self._prefix}/endpoints/"):
            tag = unquote(uri[len(f"{self._prefix}/endpoints/"):])
            data = self._tag_detail(tag)
        else:
            raise InvalidUsageError(f"Unknown resource: {uri}")

        return ResourceContent(uri=uri, text=_dumps(data))

    def _tag_detail(self, tag: str) -> list[dict[str, Any]]:
        detail = []
        for record in self._engine.list_by_tag(tag):
            detail.append(
                {
                    "method": record.method.value,
                    "path": record.path,
                    "summary": record.summary,
                    "description": record.description,
                    "parameters": [
                        {
                            "name": p.name,
                            "in": p.location.value,
                            "type": p.type,
                            "required": p.required,
                            "description": p.description,
                        }
                        for p in record.parameters
                    ],
                }
            )
        return detail

    # ------------------------------------------------------------------ #
    # Tools
    # ------------------------------------------------------------------ #

    def list_tools(self) -> list[ToolInfo]:
        """Enumerate every tool with the JSON schema of its arguments."""
        return [
            ToolInfo(
                name=tool.name,
                description=tool.description,
                input_schema=tool.args_model.model_json_schema(),
            )
            for tool in _TOOLS
        ]

    def call_tool(self, name: str, arguments: Optional[dict[str, Any]] = None) -> ToolResult:
        """Validate *arguments* and invoke the tool called *name*.

        Raises:
            InvalidUsageError: If the tool is unknown or the arguments do not
                match its input schema.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise InvalidUsageError(
                f"Unknown tool: {name}. Available tools: {', '.join(self._tools)}"
            )

        try:
            args = tool.args_model.model_validate(arguments or {})
        except ValidationError as exc:
            raise InvalidUsageError(f"Invalid arguments for {name}: {exc}") from exc

        return tool.handler(self, args)

    def _search(self, args: SearchArgs) -> ToolResult:
        result = search_result(
            self._engine, args.query, args.tag, limit=self._search_limit
        )
        shown = [
            e.model_dump(mode="json", exclude={"deprecated"}) for e in result.endpoints
        ]
        return ToolResult(
            tool="search_endpoints",
            text=f"{result.message}:\n\n{_dumps(shown)}",
            data=result.model_dump(mode="json"),
        )

    def _details(self, args: EndpointArgs) -> ToolResult:
        result = lookup_result(self._engine, args.path, args.method.value)
        if not result.found or result.endpoint is None:
            text = result.message
        else:
            text = _dumps(result.endpoint.model_dump(mode="json", by_alias=True))
        return ToolResult(
            tool="get_endpoint_details",
            text=text,
            data=result.model_dump(mode="json", by_alias=True),
        )

    def _tags(self, args: NoArgs) -> ToolResult:
        data = [t.model_dump(mode="json") for t in self._engine.list_tags()]
        return ToolResult(tool="list_tags", text=_dumps(data), data=data)

    def _by_tag(self, args: TagArgs) -> ToolResult:
        listing = tag_listing(self._engine, args.tag)
        if not listing.found:
            text = listing.message
        else:
            brief = [
                e.model_dump(mode="json", include={"method", "path", "summary"})
                for e in listing.endpoints
            ]
            text = f"{listing.message}:\n\n{_dumps(brief)}"
        return ToolResult(
            tool="list_endpoints_by_tag",
            text=text,
            data=listing.model_dump(mode="json"),
        )


_TOOLS = (
    _Tool(
        name="search_endpoints",
        description=(
            "Search API endpoints by keyword. Searches in path, summary, "
            "description, operationId, parameter names and descriptions, and "
            "response descriptions."
        ),
        args_model=SearchArgs,
        handler=Responder._search,
    ),
    _Tool(
        name="get_endpoint_details",
        description=(
            "Get full details of a specific API endpoint including all "
            "parameters, responses, and expanded schemas."
        ),
        args_model=EndpointArgs,
        handler=Responder._details,
    ),
    _Tool(
        name="list_tags",
        description="List all API categories (tags) with their endpoint counts.",
        args_model=NoArgs,
        handler=Responder._tags,
    ),
    _Tool(
        name="list_endpoints_by_tag",
        description="List all endpoints for a specific API category/tag.",
        args_model=TagArgs,
        handler=Responder._by_tag,
    ),
)
