"""Serialisable query results shared by every presenter.

The terminal browser, the protocol responder, and the Markdown exporter all
present the same four query operations.  This module turns
:class:`~apidex.engine.query.QueryEngine` outputs into Pydantic models with
a fixed shape, so the three surfaces cannot drift apart:

* :class:`EndpointSummary` / :class:`EndpointDetail` -- one endpoint, short
  or with parameters and responses (schemas already expanded).
* :class:`SearchResult` -- a search, with the untruncated ``total``.
* :class:`LookupResult` -- a path + method lookup, found or not.
* :class:`TagListing` -- one category's endpoints, or a not-found notice
  listing the declared categories.
* :class:`TagGroup` -- one tag of the navigation grouping.
* :class:`Overview` -- API metadata and counts.

Not-found results carry ``found=False`` and a human-readable ``message``;
they are ordinary values, not errors.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from apidex.engine.expander import expand_schema
from apidex.engine.index import group_by_tag
from apidex.engine.query import QueryEngine
from apidex.models import EndpointRecord, ParameterRecord, ResponseRecord, TagSummary


class EndpointSummary(BaseModel):
    """Short description of one endpoint."""

    method: str
    path: str
    tag: str
    summary: str = ""
    description: str = ""
    deprecated: bool = False


class ParameterView(BaseModel):
    """A parameter with its schema expanded to text.

    Serialises ``location`` as ``in`` and ``schema_`` as ``schema`` (dump
    with ``by_alias=True``).
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    location: str = Field(alias="in")
    type: str
    required: bool = False
    description: str = ""
    schema_: Optional[str] = Field(default=None, alias="schema")

    @property
    def type_text(self) -> str:
        """The expanded schema when there is one, the declared type otherwise."""
        return self.schema_ if self.schema_ is not None else self.type


class ResponseView(BaseModel):
    """A response with its schema expanded to text."""

    model_config = ConfigDict(populate_by_name=True)

    code: str
    description: str = ""
    schema_: Optional[str] = Field(default=None, alias="schema")


class EndpointDetail(EndpointSummary):
    """Everything a detail view or an export section needs about one endpoint."""

    operation_id: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    parameters: list[ParameterView] = Field(default_factory=list)
    responses: list[ResponseView] = Field(default_factory=list)
    security: Optional[list[dict[str, list[str]]]] = None


class SearchResult(BaseModel):
    """Result of a keyword search.

    ``total`` counts every match; ``endpoints`` may be truncated to a
    presenter's limit, in which case ``truncated`` is set.
    """

    query: str
    tag: Optional[str] = None
    total: int
    truncated: bool = False
    endpoints: list[EndpointSummary] = Field(default_factory=list)

    @property
    def message(self) -> str:
        suffix = f" in {self.tag}" if self.tag else ""
        return f'Found {self.total} endpoints matching "{self.query}"{suffix}'


class LookupResult(BaseModel):
    """Result of an exact path + method lookup."""

    found: bool
    method: str
    path: str
    endpoint: Optional[EndpointDetail] = None
    message: str = ""


class TagListing(BaseModel):
    """Endpoints of one category, or a not-found notice with the declared categories."""

    tag: str
    found: bool
    endpoints: list[EndpointSummary] = Field(default_factory=list)
    available_tags: list[str] = Field(default_factory=list)
    message: str = ""


class TagGroup(BaseModel):
    """One tag of the navigation grouping."""

    tag: str
    count: int
    endpoints: list[EndpointSummary] = Field(default_factory=list)


class Overview(BaseModel):
    """API metadata and index counts."""

    title: str
    version: str
    description: Optional[str] = None
    spec_version: str = ""
    base_url: Optional[str] = None
    endpoint_count: int
    definition_count: int
    tags: list[TagSummary] = Field(default_factory=list)


# --- Builders ---


def endpoint_summary(record: EndpointRecord) -> EndpointSummary:
    return EndpointSummary(
        method=record.method.value,
        path=record.path,
        tag=record.tag,
        summary=record.summary,
        description=record.description,
        deprecated=record.deprecated,
    )


def _parameter_view(param: ParameterRecord, engine: QueryEngine) -> ParameterView:
    schema = None
    if param.schema_ref is not None:
        schema = expand_schema(param.schema_ref, engine.definitions)
    return ParameterView(
        name=param.name,
        location=param.location.value,
        type=param.type,
        required=param.required,
        description=param.description,
        schema_=schema,
    )


def _response_view(response: ResponseRecord, engine: QueryEngine) -> ResponseView:
    schema = None
    if response.schema_ref is not None:
        schema = expand_schema(response.schema_ref, engine.definitions)
    return ResponseView(
        code=response.code,
        description=response.description,
        schema_=schema,
    )


def _security_view(
    requirements: Optional[Sequence[Mapping[str, Sequence[str]]]],
) -> Optional[list[dict[str, list[str]]]]:
    if requirements is None:
        return None
    return [{name: list(scopes) for name, scopes in req.items()} for req in requirements]


def endpoint_detail(record: EndpointRecord, engine: QueryEngine) -> EndpointDetail:
    """Build the detail view of *record*, expanding every schema against the engine's definitions."""
    return EndpointDetail(
        method=record.method.value,
        path=record.path,
        tag=record.tag,
        summary=record.summary,
        description=record.description,
        deprecated=record.deprecated,
        operation_id=record.operation_id,
        tags=list(record.tags),
        parameters=[_parameter_view(p, engine) for p in record.parameters],
        responses=[_response_view(r, engine) for r in record.responses],
        security=_security_view(record.security),
    )


def search_result(
    engine: QueryEngine,
    term: str,
    tag: Optional[str] = None,
    limit: Optional[int] = None,
) -> SearchResult:
    """Run a search and package it, truncating to *limit* after querying.

    Raises:
        InvalidUsageError: If *term* is empty (see
            :meth:`~apidex.engine.query.QueryEngine.search`).
    """
    matches = engine.search(term, tag)
    shown = matches if limit is None else matches[:limit]
    return SearchResult(
        query=term,
        tag=tag or None,
        total=len(matches),
        truncated=len(shown) < len(matches),
        endpoints=[endpoint_summary(r) for r in shown],
    )


def lookup_result(engine: QueryEngine, path: str, method: str) -> LookupResult:
    """Look up one endpoint; a miss yields ``found=False`` with a message."""
    canonical = method.upper()
    record = engine.get_by_path_and_method(path, canonical)
    if record is None:
        return LookupResult(
            found=False,
            method=canonical,
            path=path,
            message=f"Endpoint not found: {canonical} {path}",
        )
    return LookupResult(
        found=True,
        method=canonical,
        path=path,
        endpoint=endpoint_detail(record, engine),
    )


def tag_listing(engine: QueryEngine, tag: str) -> TagListing:
    """List one category; an empty result names the declared categories instead."""
    records = engine.list_by_tag(tag)
    if not records:
        available = list(engine.tag_names())
        return TagListing(
            tag=tag,
            found=False,
            available_tags=available,
            message=(
                f'No endpoints found for tag "{tag}". '
                f"Available tags: {', '.join(available)}"
            ),
        )
    return TagListing(
        tag=tag,
        found=True,
        endpoints=[endpoint_summary(r) for r in records],
        message=f"{len(records)} endpoints in {tag}",
    )


def tag_groups(
    engine: QueryEngine,
    records: Optional[tuple[EndpointRecord, ...]] = None,
) -> list[TagGroup]:
    """Group *records* (default: the whole index) for navigation."""
    grouped = engine.grouped() if records is None else group_by_tag(records)
    return [
        TagGroup(
            tag=tag,
            count=len(members),
            endpoints=[endpoint_summary(r) for r in members],
        )
        for tag, members in grouped
    ]


def overview(engine: QueryEngine) -> Overview:
    """Summarise the loaded API."""
    spec = engine.spec
    return Overview(
        title=spec.info.title,
        version=spec.info.version,
        description=spec.info.description,
        spec_version=spec.spec_version,
        base_url=spec.base_url,
        endpoint_count=len(engine.endpoints),
        definition_count=len(spec.definitions),
        tags=list(engine.list_tags()),
    )
