"""Convert raw JSON Schema fragments into :data:`~apidex.models.TypeNode` values.

Swagger and OpenAPI documents describe payloads with JSON Schema fragments
that may point at each other through ``$ref`` pointers, including cyclic
ones (a ``Category`` with a ``children: [Category]`` field).  Rather than
inlining those pointers, this module keeps every ``$ref`` as a
:class:`~apidex.models.ReferenceNode` holding the target's *name*.  The
definitions table is converted the same way, so the resulting structure is
a finite tree per fragment and cycles only exist as names, resolved lazily
(and depth-bounded) by :func:`~apidex.engine.expander.expand_schema`.
"""

from __future__ import annotations

from typing import Any

from apidex.models import (
    ArrayNode,
    ObjectNode,
    PrimitiveNode,
    ReferenceNode,
    TypeNode,
)


def to_type_node(schema: Any) -> TypeNode:
    """Convert one schema fragment into a :data:`~apidex.models.TypeNode`.

    Rules:

    * ``{"$ref": "#/definitions/Pet"}`` -> ``ReferenceNode(name="Pet")``.
    * ``type: array`` -> :class:`~apidex.models.ArrayNode` over ``items``.
    * A schema with a non-empty ``properties`` map (typed ``object`` or
      untyped) -> :class:`~apidex.models.ObjectNode`, properties in
      declaration order.
    * Anything else -> :class:`~apidex.models.PrimitiveNode` carrying the
      declared type, or ``None`` when no type is declared.

    Args:
        schema: A schema dict, or any other value (treated as untyped).

    Returns:
        The converted node.  Never raises.
    """
    if not isinstance(schema, dict) or not schema:
        return PrimitiveNode()

    ref = schema.get("$ref")
    if isinstance(ref, str):
        return ReferenceNode(name=ref_name(ref))

    schema_type = schema_type_of(schema)

    if schema_type == "array":
        items = schema.get("items")
        return ArrayNode(items=to_type_node(items) if items is not None else None)

    properties = schema.get("properties")
    if isinstance(properties, dict) and properties and schema_type in (None, "object"):
        return ObjectNode(
            properties={
                str(name): to_type_node(prop) for name, prop in properties.items()
            }
        )

    return PrimitiveNode(type=schema_type)


def convert_definitions(definitions: Any) -> dict[str, TypeNode]:
    """Convert a definitions table (name -> schema) into name -> TypeNode.

    Non-dict tables yield an empty mapping.
    """
    if not isinstance(definitions, dict):
        return {}
    return {str(name): to_type_node(schema) for name, schema in definitions.items()}


def ref_name(ref: str) -> str:
    """Return the definition name a ``$ref`` pointer targets.

    The name is the last pointer segment with RFC 6901 escaping undone, so
    ``#/definitions/Pet``, ``#/components/schemas/Pet`` and
    ``common.json#/definitions/Pet`` all name ``Pet``.
    """
    segment = ref.rsplit("/", 1)[-1]
    return segment.replace("~1", "/").replace("~0", "~")


def schema_type_of(schema: dict[str, Any]) -> str | None:
    """Extract the declared type string from a schema dict.

    Handles OpenAPI 3.1 type arrays (e.g. ``["string", "null"]``) by
    returning the first non-null type.

    Returns:
        The type string, or ``None`` when the schema declares no type.
    """
    type_value = schema.get("type")
    if type_value is None:
        return None

    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        return str(non_null[0]) if non_null else None

    return str(type_value)
