"""Type nodes — a declared type together with the path being expanded."""

from dataclasses import dataclass
from typing import Any

from api_help.introspection.classifier import Describable, describe, type_identity


@dataclass(frozen=True)
class TypeNode:
    """A declared type plus the identities of the composites currently being expanded."""

    type: Any
    path: frozenset = frozenset()

    def describe(self) -> Describable:
        return describe(self.type)

    @property
    def is_cycle(self) -> bool:
        """True when this type is already being expanded further up the path."""
        return type_identity(self.type) in self.path

    def child(self, tp: Any) -> "TypeNode":
        """Node for a member/element of this type, with this type pushed onto the path."""
        return TypeNode(tp, self.path | {type_identity(self.type)})
