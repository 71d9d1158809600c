"""Canonical Pydantic models shared across all apidex modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig` and :class:`GlobalConfig`.

**Type models** -- the recursive :data:`TypeNode` union describing schema
fragments: :class:`ReferenceNode`, :class:`ArrayNode`, :class:`ObjectNode`,
and :class:`PrimitiveNode`. References are kept by name and resolved lazily
by :func:`~apidex.engine.expander.expand_schema`, so cyclic definitions never
produce cyclic objects.

**Spec models** -- produced by the loader and the index, consumed by the
query engine and presenters:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`APIInfo`,
    :class:`TagInfo`, :class:`TagSummary`, :class:`ParameterRecord`,
    :class:`ResponseRecord`, :class:`EndpointRecord`, and
    :class:`Specification`.

Spec and type models are frozen and their containers are tuples or read-only
mappings: they are built once at load time and only read afterwards.
"""

from __future__ import annotations

import enum
from types import MappingProxyType
from typing import Annotated, Any, Literal, Mapping, Optional, TypeVar, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

K = TypeVar("K")
V = TypeVar("V")


def _read_only(value: Mapping[Any, Any]) -> Mapping[Any, Any]:
    return MappingProxyType(dict(value))


ReadOnlyMapping = Annotated[Mapping[K, V], AfterValidator(_read_only)]
"""A mapping field stored behind :class:`types.MappingProxyType`."""


# --- Config ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )
    pager: bool = Field(
        default=True, description="Use pager for long output in TTY mode"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/apidex/config.json``.

    Loaded and saved by :func:`~apidex.config.load_global_config` and
    :func:`~apidex.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~apidex.config.resolve_config`
    for the full precedence chain.
    """

    default_spec: Optional[str] = Field(
        default=None, description="URL or file path of the spec to load"
    )
    search_limit: int = Field(
        default=20,
        ge=1,
        description="Maximum endpoints returned by the search_endpoints tool",
    )
    resource_scheme: str = Field(
        default="apidex", description="URI scheme for responder resources"
    )
    export_title: Optional[str] = Field(
        default=None, description="Heading for exported docs (defaults to API title)"
    )
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Type nodes ---


class ReferenceNode(BaseModel):
    """A named pointer into the spec's definitions table (``$ref``)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["reference"] = "reference"
    name: str


class ArrayNode(BaseModel):
    """An array whose elements are described by ``items``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["array"] = "array"
    items: Optional[TypeNode] = None


class ObjectNode(BaseModel):
    """An object with declared properties, in source declaration order."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["object"] = "object"
    properties: ReadOnlyMapping[str, TypeNode] = Field(default_factory=dict, validate_default=True)


class PrimitiveNode(BaseModel):
    """A scalar (or otherwise unstructured) type. ``type`` is ``None`` when untyped."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["primitive"] = "primitive"
    type: Optional[str] = None


TypeNode = Annotated[
    Union[ReferenceNode, ArrayNode, ObjectNode, PrimitiveNode],
    Field(discriminator="kind"),
]

ArrayNode.model_rebuild()
ObjectNode.model_rebuild()


# --- Spec models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised as operation keys of a path item.

    Values are upper case: the index canonicalises method tokens at build
    time so that lookups compare two upper-cased strings.
    """

    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"
    PATCH = "PATCH"
    TRACE = "TRACE"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per the ``in`` field."""

    QUERY = "query"
    PATH = "path"
    HEADER = "header"
    BODY = "body"
    FORM_DATA = "formData"
    COOKIE = "cookie"


SecurityRequirement = ReadOnlyMapping[str, tuple[str, ...]]
"""One security requirement: scheme name -> required scopes."""


class APIInfo(BaseModel):
    """API metadata extracted from the spec's *Info Object*."""

    model_config = ConfigDict(frozen=True)

    title: str = "Untitled API"
    version: str = "0.0.0"
    description: Optional[str] = None


class TagInfo(BaseModel):
    """A category declared in the spec's top-level ``tags`` list."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""


class TagSummary(BaseModel):
    """A declared category together with the number of endpoints filed under it."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    endpoint_count: int = 0


class ParameterRecord(BaseModel):
    """A single parameter of an endpoint, in source declaration order.

    ``type`` is the declared type, ``"object"`` when the parameter only
    carries a schema, and ``"string"`` when nothing is declared.
    ``schema_ref`` holds the structured schema for body parameters (and any
    OpenAPI 3 parameter with a ``schema``), for expansion by
    :func:`~apidex.engine.expander.expand_schema`.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    location: ParameterLocation
    type: str = "string"
    required: bool = False
    description: str = ""
    schema_ref: Optional[TypeNode] = None
    format: Optional[str] = None
    default: Any = None
    enum_values: Optional[tuple[Any, ...]] = None


class ResponseRecord(BaseModel):
    """Response metadata for a single status code."""

    model_config = ConfigDict(frozen=True)

    code: str
    description: str = ""
    schema_ref: Optional[TypeNode] = None


class EndpointRecord(BaseModel):
    """One (path, method) operation, flattened into a uniform record.

    Identity is the ``(method, path)`` pair, unique within an index. ``tag``
    is the first declared tag, or ``"Other"`` when the operation declares
    none; ``tags`` keeps the full declared list. ``responses`` are in source
    order, one per declared status code.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    method: HTTPMethod
    tag: str = "Other"
    tags: tuple[str, ...] = ()
    summary: str = ""
    description: str = ""
    operation_id: Optional[str] = None
    parameters: tuple[ParameterRecord, ...] = ()
    responses: tuple[ResponseRecord, ...] = ()
    security: Optional[tuple[SecurityRequirement, ...]] = None
    deprecated: bool = False

    @property
    def key(self) -> tuple[str, str]:
        """The ``(method, path)`` identity of this endpoint."""
        return (self.method.value, self.path)


class Specification(BaseModel):
    """The loaded API description, immutable for the life of the process.

    Produced by :func:`~apidex.parser.loader.parse_spec`. ``paths`` is the
    raw operations table (path -> method -> operation dict) in source
    order; :func:`~apidex.engine.index.build_index` flattens it into
    :class:`EndpointRecord` objects. ``definitions`` maps type names to
    :data:`TypeNode` values from ``definitions`` (Swagger 2.0) or
    ``components.schemas`` (OpenAPI 3.x). Both tables are read-only
    mappings.
    """

    model_config = ConfigDict(frozen=True)

    info: APIInfo = Field(default_factory=APIInfo)
    spec_version: str = Field(
        default="", description="'swagger 2.0', 'openapi 3.0.3', or '' if undeclared"
    )
    base_url: Optional[str] = None
    tags: tuple[TagInfo, ...] = ()
    paths: ReadOnlyMapping[str, ReadOnlyMapping[str, Any]] = Field(
        default_factory=dict, validate_default=True
    )
    definitions: ReadOnlyMapping[str, TypeNode] = Field(default_factory=dict, validate_default=True)
    shared_parameters: ReadOnlyMapping[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Reusable parameters ('parameters' or 'components.parameters')",
        validate_default=True,
    )
    shared_responses: ReadOnlyMapping[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Reusable responses ('responses' or 'components.responses')",
        validate_default=True,
    )
    security: Optional[tuple[SecurityRequirement, ...]] = None
