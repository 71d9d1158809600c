"""Expand type nodes into human-readable, nested type descriptions.

:func:`expand_schema` resolves :class:`~apidex.models.ReferenceNode` values
through the definitions table on demand.  Definitions may refer to
themselves or to each other (a ``Category`` with ``children: [Category]``),
so resolution is bounded by nesting depth instead of tracked with a visited
set: a name that legitimately appears twice as siblings is expanded both
times, and a cycle stops once :data:`MAX_DEPTH` is reached, printing the bare
reference name.

Output shape::

    {
      id: integer
      tags: Array<{
          name: string
        }>
    }

The function never raises; malformed input degrades to ``any``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from apidex.models import ArrayNode, ObjectNode, PrimitiveNode, ReferenceNode, TypeNode
from apidex.parser.type_nodes import to_type_node

MAX_DEPTH = 4
"""Depth at which references stop being expanded."""

ANY_TYPE = "any"
"""Fallback description for nodes without type information."""

_INDENT = "  "


def expand_schema(
    node: Optional[TypeNode | dict[str, Any]],
    definitions: Mapping[str, TypeNode],
    depth: int = 0,
) -> str:
    """Render *node* as a nested type description.

    Rules, in order:

    1. A reference to a name missing from *definitions* renders as the name.
    2. A known reference expands its definition at ``depth + 1`` while
       ``depth < MAX_DEPTH``; past that it renders as the bare name.
    3. An array renders as ``Array<...>`` around its element, expanded at
       ``depth + 1``.
    4. An object with properties renders as a braced field listing, one
       ``name: type`` line per property in declaration order, indented one
       level deeper than the object itself.
    5. Anything else renders as its primitive type, or ``any``.

    Args:
        node: The node to expand.  Raw schema dicts are converted with
            :func:`~apidex.parser.type_nodes.to_type_node` first.
        definitions: Type name -> node table of the specification.
        depth: Current nesting depth; callers normally leave the default.

    Returns:
        The description text.
    """
    if isinstance(node, dict):
        node = to_type_node(node)

    if isinstance(node, ReferenceNode):
        target = definitions.get(node.name)
        if target is None or depth >= MAX_DEPTH:
            return node.name
        return expand_schema(target, definitions, depth + 1)

    if isinstance(node, ArrayNode):
        return f"Array<{expand_schema(node.items, definitions, depth + 1)}>"

    if isinstance(node, ObjectNode):
        if not node.properties:
            return "object"
        indent = _INDENT * depth
        lines = ["{"]
        for name, prop in node.properties.items():
            lines.append(
                f"{indent}{_INDENT}{name}: {expand_schema(prop, definitions, depth + 1)}"
            )
        lines.append(f"{indent}}}")
        return "\n".join(lines)

    if isinstance(node, PrimitiveNode) and node.type:
        return node.type

    return ANY_TYPE


def expand_definition(name: str, definitions: Mapping[str, TypeNode]) -> str:
    """Expand the definition called *name* as if it were referenced at the top level."""
    return expand_schema(ReferenceNode(name=name), definitions)
