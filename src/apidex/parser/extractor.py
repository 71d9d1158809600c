"""Extract uniform endpoint records from raw operation objects.

This module turns one raw operation (the dict found at
``paths[path][method]``) into an :class:`~apidex.models.EndpointRecord`,
normalising the many optional shapes Swagger 2.0 and OpenAPI 3.x allow:

* ``_extract_parameters`` -- parameter list, declaration order preserved.
* ``_extract_request_body`` -- OpenAPI 3 ``requestBody`` surfaced as a
  ``body`` parameter so both spec versions look the same downstream.
* ``_extract_responses`` -- one :class:`~apidex.models.ResponseRecord` per
  status code, in source order.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they share
the same ``name`` and ``in`` values.

Schemas are never inlined here: ``$ref`` pointers become
:class:`~apidex.models.ReferenceNode` values through
:func:`~apidex.parser.type_nodes.to_type_node`.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping, Optional, Sequence

from apidex.models import (
    EndpointRecord,
    HTTPMethod,
    ParameterLocation,
    ParameterRecord,
    ResponseRecord,
    TypeNode,
)
from apidex.parser.type_nodes import ref_name, schema_type_of, to_type_node

DEFAULT_TAG = "Other"
"""Category assigned to operations that declare no tags."""


def extract_endpoint(
    path: str,
    method: HTTPMethod,
    operation: dict[str, Any],
    path_params: Optional[list[Any]] = None,
    global_security: Optional[Sequence[Mapping[str, Sequence[str]]]] = None,
    shared_parameters: Optional[Mapping[str, dict[str, Any]]] = None,
    shared_responses: Optional[Mapping[str, dict[str, Any]]] = None,
) -> EndpointRecord:
    """Build an :class:`~apidex.models.EndpointRecord` from one raw operation.

    Args:
        path: The path template (e.g. ``/widgets/{id}``).
        method: The canonical (upper-case) HTTP method.
        operation: The raw operation dict.
        path_params: Parameters declared on the enclosing path item.
        global_security: Top-level security requirements, used when the
            operation declares none.  An explicit empty list on the
            operation means "no auth required" and is kept as-is.
        shared_parameters: Reusable parameters that parameter ``$ref``
            entries point into.
        shared_responses: Reusable responses that response ``$ref``
            entries point into.

    Returns:
        The flattened record.
    """
    tags = tuple(str(t) for t in _as_list(operation.get("tags")) if t)

    shared_parameters = shared_parameters or {}
    merged = _merge_parameters(
        [_deref(p, shared_parameters) for p in _as_list(path_params)],
        [_deref(p, shared_parameters) for p in _as_list(operation.get("parameters"))],
    )
    parameters = _extract_parameters(merged)
    body = _extract_request_body(operation.get("requestBody"))
    if body is not None:
        parameters.append(body)

    security = security_requirements(operation.get("security"))
    if security is None:
        security = global_security

    return EndpointRecord(
        path=path,
        method=method,
        tag=tags[0] if tags else DEFAULT_TAG,
        tags=tags,
        summary=_text(operation.get("summary")),
        description=_text(operation.get("description")),
        operation_id=_optional_text(operation.get("operationId")),
        parameters=tuple(parameters),
        responses=_extract_responses(operation.get("responses"), shared_responses or {}),
        security=security,
        deprecated=bool(operation.get("deprecated", False)),
    )


def security_requirements(value: Any) -> Optional[tuple[dict[str, tuple[str, ...]], ...]]:
    """Normalise a ``security`` list into requirement mappings.

    Entries that are not mappings are dropped, and scope lists that are not
    lists become empty.  Returns ``None`` when *value* is not a list, which
    callers treat as "not declared".
    """
    if not isinstance(value, list):
        return None
    return tuple(
        {
            str(scheme): tuple(str(s) for s in scopes) if isinstance(scopes, list) else ()
            for scheme, scopes in requirement.items()
        }
        for requirement in value
        if isinstance(requirement, dict)
    )


def _text(value: Any) -> str:
    """Coerce an optional text field to ``str`` (``None`` -> ``""``)."""
    if value is None:
        return ""
    return str(value)


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _as_list(value: Any) -> list[Any]:
    """Return *value* if it is a list, else an empty list."""
    return value if isinstance(value, list) else []


def _as_tuple(value: Any) -> Optional[tuple[Any, ...]]:
    """Deep-copy a list into a tuple, or return ``None`` for anything else."""
    if not isinstance(value, list):
        return None
    return tuple(copy.deepcopy(value))


def _deref(obj: Any, table: Mapping[str, dict[str, Any]]) -> Any:
    """Follow ``$ref`` pointers into a reusable-object table.

    Chains are followed until a non-reference object is reached.  Pointers
    to unknown names, and cyclic chains, return the last ``$ref`` dict
    unresolved.
    """
    seen: set[str] = set()
    while isinstance(obj, dict) and isinstance(obj.get("$ref"), str):
        name = ref_name(obj["$ref"])
        if name in seen or name not in table:
            return obj
        seen.add(name)
        obj = table[name]
    return obj


def _param_key(param: dict[str, Any]) -> tuple[str, str]:
    return (str(param.get("name", "")), str(param.get("in", "")))


def _merge_parameters(
    path_params: list[Any],
    op_params: list[Any],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec.  Entries that
    are not dicts are dropped.
    """
    path_params = [p for p in path_params if isinstance(p, dict)]
    op_params = [p for p in op_params if isinstance(p, dict)]

    op_keys = {_param_key(p) for p in op_params}

    merged = [p for p in path_params if _param_key(p) not in op_keys]
    merged.extend(op_params)
    return merged


def _extract_parameters(params_list: list[dict[str, Any]]) -> list[ParameterRecord]:
    """Convert raw parameter dicts into :class:`~apidex.models.ParameterRecord` models.

    Path parameters are always required regardless of the ``required``
    field in the source.  Parameters with unrecognised ``in`` locations,
    unresolved ``$ref`` entries, and nameless entries are skipped.
    """
    parameters: list[ParameterRecord] = []

    for param in params_list:
        if "$ref" in param or not param.get("name"):
            continue
        try:
            location = ParameterLocation(param.get("in", "query"))
        except ValueError:
            continue

        schema = param.get("schema")
        schema_ref: Optional[TypeNode] = None
        if isinstance(schema, dict):
            schema_ref = to_type_node(schema)
            source = schema
        else:
            source = param

        if "type" in param:
            param_type = str(param["type"])
        elif isinstance(schema, dict):
            param_type = schema_type_of(schema) or "object"
        else:
            param_type = "string"

        required = bool(param.get("required", False))
        if location == ParameterLocation.PATH:
            required = True

        enum_values = source.get("enum")
        parameters.append(
            ParameterRecord(
                name=str(param.get("name", "")),
                location=location,
                type=param_type,
                required=required,
                description=_text(param.get("description")),
                schema_ref=schema_ref,
                format=_optional_text(source.get("format")),
                default=copy.deepcopy(source.get("default")),
                enum_values=_as_tuple(enum_values),
            )
        )

    return parameters


def _first_content_schema(content: Any) -> Any:
    """Return the schema of the first media type entry that declares one."""
    if not isinstance(content, dict):
        return None
    for media in content.values():
        if isinstance(media, dict) and "schema" in media:
            return media["schema"]
    return None


def _extract_request_body(body: Any) -> Optional[ParameterRecord]:
    """Surface an OpenAPI 3 ``requestBody`` as a ``body`` parameter.

    Returns ``None`` when the operation has no request body.
    """
    if not isinstance(body, dict):
        return None

    schema = _first_content_schema(body.get("content"))
    return ParameterRecord(
        name="body",
        location=ParameterLocation.BODY,
        type=(schema_type_of(schema) or "object") if isinstance(schema, dict) else "object",
        required=bool(body.get("required", False)),
        description=_text(body.get("description")),
        schema_ref=to_type_node(schema) if isinstance(schema, dict) else None,
    )


def _extract_responses(
    responses: Any,
    shared_responses: Mapping[str, dict[str, Any]],
) -> tuple[ResponseRecord, ...]:
    """Extract response metadata for all declared status codes, in source order.

    The schema comes from the Swagger 2.0 ``schema`` field, or from the
    first OpenAPI 3 ``content`` media type that declares one.  A status code
    declared twice (``200`` and ``"200"``) keeps its first position and its
    last definition.
    """
    result: dict[str, ResponseRecord] = {}
    if not isinstance(responses, dict):
        return ()

    for status_code, response in responses.items():
        response = _deref(response, shared_responses)
        if not isinstance(response, dict):
            continue

        schema = response.get("schema")
        if schema is None:
            schema = _first_content_schema(response.get("content"))

        code = str(status_code)
        result[code] = ResponseRecord(
            code=code,
            description=_text(response.get("description")),
            schema_ref=to_type_node(schema) if isinstance(schema, dict) else None,
        )

    return tuple(result.values())
