"""Scaffolder — builds a representative example value for a declared type.

Primitive examples follow a fixed zero-value convention so that the same
type always renders the same example.

A composite already being expanded renders as ``CYCLE_PLACEHOLDER`` (``{}``).
A composite with no public members also renders as ``{}``, so the two are
only told apart by the declared type.
"""

import enum
import typing
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

from api_help.introspection.classifier import Collection, Composite, Primitive, Wrapper
from api_help.introspection.node import TypeNode

CYCLE_PLACEHOLDER: dict = {}

# Checked in order; subclasses must come before their bases.
PRIMITIVE_EXAMPLES: list[tuple[type, Any]] = [
    (bool, False),
    (int, 0),
    (float, 0.0),
    (complex, "0j"),
    (Decimal, 0),
    (datetime, datetime.min.isoformat()),
    (date, date.min.isoformat()),
    (time, time.min.isoformat()),
    (timedelta, 0.0),
    (UUID, str(UUID(int=0))),
    (bytes, ""),
    (bytearray, ""),
]

DEFAULT_EXAMPLE = "string"
MAPPING_KEY = "key"


def scaffold(node: TypeNode | Any) -> Any:
    """Return an example value for ``node`` (a ``TypeNode`` or a bare type)."""
    if not isinstance(node, TypeNode):
        node = TypeNode(node)

    description = node.describe()

    if isinstance(description, Primitive):
        return primitive_example(description.type)

    if isinstance(description, Wrapper):
        return scaffold(TypeNode(description.inner, node.path))

    if isinstance(description, Collection):
        element = scaffold(node.child(description.element))
        if description.is_mapping:
            key = scaffold(node.child(description.key))
            return {MAPPING_KEY if key is None else str(key): element}
        return [element]

    if isinstance(description, Composite):
        if node.is_cycle:
            return dict(CYCLE_PLACEHOLDER)
        return {name: scaffold(node.child(hint)) for name, hint in description.members}

    # NoData and result containers
    return None


def primitive_example(tp: Any) -> Any:
    if typing.get_origin(tp) is typing.Literal:
        return typing.get_args(tp)[0]
    if issubclass(tp, enum.Enum):
        first = next(iter(tp), None)
        return None if first is None else first.value
    for base, example in PRIMITIVE_EXAMPLES:
        if issubclass(tp, base):
            return example
    return DEFAULT_EXAMPLE
