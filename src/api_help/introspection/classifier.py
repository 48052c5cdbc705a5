"""Type classifier — decides how a declared Python type is documented.

Every type is described once as one of a handful of capabilities
(primitive, collection, async wrapper, result container, composite or
no data). Scaffolding and schema building only ever dispatch on these
descriptions, never on raw annotations.
"""

import collections.abc
import concurrent.futures
import dataclasses
import enum
import inspect
import logging
import types
import typing
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from pathlib import PurePath
from typing import Any, ClassVar, Literal, Union
from uuid import UUID

from fastapi import Response, UploadFile
from pydantic import AnyUrl, BaseModel

logger = logging.getLogger(__name__)

# Return types that only say "some HTTP response"; the payload is not declared.
RESULT_CONTAINER_TYPES: tuple[type, ...] = (Response,)

PRIMITIVE_NAMES: dict[type, str] = {
    bool: "bool",
    int: "int",
    float: "float",
    complex: "complex",
    Decimal: "decimal",
    str: "string",
    bytes: "bytes",
    bytearray: "bytes",
    datetime: "datetime",
    date: "date",
    time: "time",
    timedelta: "timedelta",
    UUID: "uuid",
    PurePath: "path",
    AnyUrl: "url",
    UploadFile: "file",
}

_NO_DATA_FORMS = {None, type(None), Any, object, inspect.Signature.empty, typing.NoReturn}
if hasattr(typing, "Never"):
    _NO_DATA_FORMS.add(typing.Never)

_UNION_TYPES = (Union, types.UnionType)


class TypeKind(enum.Enum):
    PRIMITIVE = "primitive"
    COLLECTION = "collection"
    ASYNC_WRAPPER = "async_wrapper"
    RESULT_CONTAINER = "result_container"
    COMPOSITE = "composite"
    NO_DATA = "no_data"


@dataclass(frozen=True)
class NoData:
    kind: ClassVar[TypeKind] = TypeKind.NO_DATA


@dataclass(frozen=True)
class Primitive:
    type: Any
    name: str
    kind: ClassVar[TypeKind] = TypeKind.PRIMITIVE


@dataclass(frozen=True)
class Collection:
    """An iterable of ``element``; ``key`` is set for mappings."""

    element: Any
    key: Any = None
    kind: ClassVar[TypeKind] = TypeKind.COLLECTION

    @property
    def is_mapping(self) -> bool:
        return self.key is not None


@dataclass(frozen=True)
class Wrapper:
    """A deferred computation carrying ``inner`` (``None`` when it carries nothing)."""

    inner: Any
    kind: ClassVar[TypeKind] = TypeKind.ASYNC_WRAPPER


@dataclass(frozen=True)
class ResultContainer:
    type: Any
    kind: ClassVar[TypeKind] = TypeKind.RESULT_CONTAINER


@dataclass(frozen=True)
class Composite:
    type: Any
    name: str
    members: tuple[tuple[str, Any], ...]
    kind: ClassVar[TypeKind] = TypeKind.COMPOSITE


Describable = Union[NoData, Primitive, Collection, Wrapper, ResultContainer, Composite]

NO_DATA = NoData()

_cache: dict[Any, Describable] = {}


def describe(tp: Any) -> Describable:
    """Describe ``tp``, reusing a previous description when the type is hashable."""
    try:
        return _cache[tp]
    except KeyError:
        pass
    except TypeError:
        # Unhashable annotation metadata; describe without caching.
        return _describe(tp)
    description = _describe(tp)
    _cache[tp] = description
    return description


def classify(tp: Any) -> TypeKind:
    return describe(tp).kind


def is_primitive(tp: Any) -> bool:
    return classify(tp) is TypeKind.PRIMITIVE


def type_identity(tp: Any) -> Any:
    """Key used to recognise a type already being expanded.

    Parameterized generics are keyed by their origin, so ``Box[list[int]]``
    nested inside ``Box[int]`` counts as a revisit.
    """
    target = _unwrap(tp)
    target = typing.get_origin(target) or target
    try:
        hash(target)
    except TypeError:
        return id(target)
    return target


def _describe(tp: Any) -> Describable:
    tp = _unwrap(tp)
    if _is_no_data(tp):
        return NO_DATA

    primitive = _describe_primitive(tp)
    if primitive is not None:
        return primitive

    origin = typing.get_origin(tp) or tp
    args = typing.get_args(tp)
    if not inspect.isclass(origin):
        logger.debug("Cannot introspect annotation %r", tp)
        return NO_DATA

    if issubclass(origin, (collections.abc.Awaitable, concurrent.futures.Future)):
        return Wrapper(inner=_wrapper_payload(origin, args))

    if issubclass(origin, RESULT_CONTAINER_TYPES):
        return ResultContainer(type=origin)

    if _is_structured_class(origin):
        return _describe_composite(tp, origin, args)

    if issubclass(origin, collections.abc.Mapping):
        key = args[0] if args else None
        value = args[1] if len(args) > 1 else None
        return Collection(element=value, key=key if key is not None else Any)

    if issubclass(origin, (collections.abc.Iterable, collections.abc.AsyncIterable)):
        return Collection(element=args[0] if args else None)

    return _describe_composite(tp, origin, args)


def _unwrap(tp: Any) -> Any:
    """Strip annotations, new types, optionals and type variables."""
    while True:
        if isinstance(tp, (str, typing.ForwardRef)):
            return None
        if typing.get_origin(tp) is typing.Annotated:
            tp = typing.get_args(tp)[0]
        elif hasattr(tp, "__supertype__"):
            tp = tp.__supertype__
        elif isinstance(tp, typing.TypeVar):
            tp = tp.__bound__
        elif typing.get_origin(tp) in _UNION_TYPES:
            members = [arg for arg in typing.get_args(tp) if arg is not type(None)]
            tp = members[0] if members else None
        else:
            return tp


def _is_no_data(tp: Any) -> bool:
    try:
        return tp in _NO_DATA_FORMS
    except TypeError:
        return False


def _describe_primitive(tp: Any) -> Primitive | None:
    if typing.get_origin(tp) is Literal:
        return Primitive(type=tp, name="literal")
    if not inspect.isclass(tp) or typing.get_origin(tp) is not None:
        return None
    if issubclass(tp, enum.Enum):
        return Primitive(type=tp, name=tp.__name__)
    for base, name in PRIMITIVE_NAMES.items():
        if issubclass(tp, base):
            return Primitive(type=tp, name=name)
    return None


def _wrapper_payload(origin: type, args: tuple) -> Any:
    if not args:
        return None
    # Coroutine[YieldType, SendType, ReturnType]
    if issubclass(origin, collections.abc.Coroutine):
        return args[-1]
    return args[0]


def _is_structured_class(cls: type) -> bool:
    return (
        issubclass(cls, BaseModel)
        or dataclasses.is_dataclass(cls)
        or typing.is_typeddict(cls)
        or (issubclass(cls, tuple) and hasattr(cls, "_fields"))
    )


def _describe_composite(tp: Any, origin: type, args: tuple) -> Describable:
    substitutions = _type_arguments(origin, args)
    if issubclass(origin, BaseModel):
        members = _model_members(origin)
    else:
        members = _class_members(origin)
    members = tuple((name, _substitute(hint, substitutions)) for name, hint in members)
    return Composite(type=tp, name=_type_name(tp, origin), members=members)


def _type_arguments(origin: type, args: tuple) -> dict:
    parameters = getattr(origin, "__parameters__", ())
    return dict(zip(parameters, args))


def _substitute(hint: Any, substitutions: dict) -> Any:
    if not substitutions:
        return hint
    if isinstance(hint, typing.TypeVar):
        return substitutions.get(hint, hint)
    parameters = getattr(hint, "__parameters__", ())
    if parameters:
        try:
            return hint[tuple(substitutions.get(p, p) for p in parameters)]
        except TypeError:
            return hint
    return hint


def _type_name(tp: Any, origin: type) -> str:
    name = getattr(origin, "__name__", repr(origin))
    args = typing.get_args(tp)
    if args:
        return f"{name}[{', '.join(getattr(a, '__name__', repr(a)) for a in args)}]"
    return name


def _resolved_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except Exception as e:  # NameError, TypeError from unresolvable forward refs
        logger.debug("Falling back to raw annotations for %s: %s", cls.__name__, e)
        hints: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            hints.update(getattr(klass, "__annotations__", {}))
        return hints


def _model_members(model: type[BaseModel]) -> list[tuple[str, Any]]:
    hints = None
    members = []
    for name, field in model.model_fields.items():
        annotation = field.annotation
        if _has_forward_ref(annotation):
            hints = hints if hints is not None else _resolved_hints(model)
            annotation = hints.get(name, annotation)
        members.append((field.serialization_alias or field.alias or name, annotation))
    for name, computed in model.model_computed_fields.items():
        members.append((computed.alias or name, computed.return_type))
    return members


def _has_forward_ref(annotation: Any) -> bool:
    if typing.get_origin(annotation) is Literal:
        return False
    if isinstance(annotation, (str, typing.ForwardRef)):
        return True
    return any(_has_forward_ref(arg) for arg in typing.get_args(annotation))


def _class_members(cls: type) -> list[tuple[str, Any]]:
    members = []
    for name, hint in _resolved_hints(cls).items():
        if name.startswith("_") or typing.get_origin(hint) is ClassVar or hint is ClassVar:
            continue
        members.append((name, hint))
    seen = {name for name, _ in members}
    for name, attr in inspect.getmembers(cls, lambda a: isinstance(a, property)):
        if name.startswith("_") or name in seen or attr.fget is None:
            continue
        returns = inspect.signature(attr.fget).return_annotation
        if returns is not inspect.Signature.empty:
            members.append((name, _resolve_return(attr.fget, returns)))
    return members


def _resolve_return(func: Any, returns: Any) -> Any:
    if not isinstance(returns, str):
        return returns
    try:
        return typing.get_type_hints(func, include_extras=True).get("return")
    except Exception as e:  # NameError from unresolvable forward refs
        logger.debug("Cannot resolve return annotation of %r: %s", func, e)
        return None
