"""Schema builder — structural description of a declared type.

Walks types exactly like the scaffolder does, so a schema and a scaffold
of the same type always have the same members and nesting.
"""

from typing import Any

from api_help.introspection.classifier import Collection, Composite, Primitive, Wrapper
from api_help.introspection.node import TypeNode
from api_help.introspection.scaffold import CYCLE_PLACEHOLDER, MAPPING_KEY


def schema(node: TypeNode | Any) -> Any:
    """Return the schema for ``node`` (a ``TypeNode`` or a bare type).

    Primitives render as their type name, collections as a one-element list
    holding the element schema, mappings as ``{key_schema: value_schema}``
    and composites as ``{member: member_schema}``. Types without declared
    data render as ``None``; a composite already being expanded renders as
    an empty mapping, the same as a composite without public members.
    """
    if not isinstance(node, TypeNode):
        node = TypeNode(node)

    description = node.describe()

    if isinstance(description, Primitive):
        return description.name

    if isinstance(description, Wrapper):
        return schema(TypeNode(description.inner, node.path))

    if isinstance(description, Collection):
        element = schema(node.child(description.element))
        if description.is_mapping:
            key = schema(node.child(description.key))
            return {MAPPING_KEY if key is None else str(key): element}
        return [element]

    if isinstance(description, Composite):
        if node.is_cycle:
            return dict(CYCLE_PLACEHOLDER)
        return {name: schema(node.child(hint)) for name, hint in description.members}

    return None
