"""
Type introspection adapter.

Turns Python type hints into a small closed classification (scalar, optional,
sequence, map, interface, function, record) and record classes into an
ordered list of ``FieldDescriptor`` objects. The column and relation builders
only ever look at these neutral structures.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import datetime
import decimal
import enum
import logging
import types
import typing
import uuid
from dataclasses import dataclass
from typing import Any, ClassVar, Iterator, Optional, Tuple

from typegorm.errors import InvalidInputError
from typegorm.metadata.tags import TAG_NAME, OrmTag

logger = logging.getLogger(__name__)


class TypeKind(str, enum.Enum):
    """Classification of a field type."""
    SCALAR = "scalar"
    POINTER = "pointer"
    SEQUENCE = "sequence"
    MAP = "map"
    INTERFACE = "interface"
    FUNCTION = "function"
    RECORD = "record"


SCALAR_TYPES = (
    str, int, float, bool, bytes, bytearray, complex,
    decimal.Decimal,
    datetime.datetime, datetime.date, datetime.time, datetime.timedelta,
    uuid.UUID,
)

# Modules whose classes are never treated as user record types
_NON_RECORD_MODULES = frozenset({
    "builtins", "typing", "types", "abc", "collections", "collections.abc",
    "datetime", "decimal", "uuid", "enum", "numbers",
})

_UNION_ORIGINS = (typing.Union, getattr(types, "UnionType", typing.Union))


@dataclass(frozen=True)
class TypeClassification:
    """
    Closed description of a field type.

    ``inner`` is set for POINTER (``Optional[T]``) and SEQUENCE kinds;
    ``python_type`` holds the class for SCALAR and RECORD kinds.
    """
    kind: TypeKind
    name: str
    python_type: Any = None
    inner: Optional[TypeClassification] = None

    @property
    def is_record(self) -> bool:
        return self.kind is TypeKind.RECORD

    def __str__(self) -> str:
        if self.kind is TypeKind.POINTER:
            return f"Optional[{self.inner}]"
        if self.kind is TypeKind.SEQUENCE:
            return f"{self.name}[{self.inner}]"
        return self.name


INTERFACE = TypeClassification(TypeKind.INTERFACE, "Any")


def _hint_name(hint: Any) -> str:
    if isinstance(hint, type):
        return hint.__qualname__
    return repr(hint).replace("typing.", "")


def _is_record_class(cls: type) -> bool:
    if issubclass(cls, enum.Enum) or issubclass(cls, SCALAR_TYPES):
        return False
    return cls.__module__ not in _NON_RECORD_MODULES


def classify(hint: Any) -> TypeClassification:
    """
    Classify a type hint.

    Args:
        hint: A resolved type hint (``Annotated`` wrappers already removed)

    Returns:
        TypeClassification for the hint
    """
    origin = typing.get_origin(hint)

    if origin is typing.Annotated:
        return classify(typing.get_args(hint)[0])

    if hint is typing.Any or hint is object:
        return INTERFACE

    if origin in _UNION_ORIGINS:
        args = typing.get_args(hint)
        members = [a for a in args if a is not type(None)]
        inner = classify(members[0]) if len(members) == 1 else INTERFACE
        if len(members) < len(args):
            return TypeClassification(TypeKind.POINTER, inner.name, inner=inner)
        return inner

    if origin is typing.Literal:
        return TypeClassification(TypeKind.SCALAR, _hint_name(hint))

    if origin is collections.abc.Callable:
        return TypeClassification(TypeKind.FUNCTION, _hint_name(hint))

    if origin is not None:
        return _classify_generic(hint, origin)

    # NewType("UserId", int)
    supertype = getattr(hint, "__supertype__", None)
    if supertype is not None:
        return classify(supertype)

    if not isinstance(hint, type):
        # TypeVar, unresolved forward reference, ...
        return TypeClassification(TypeKind.INTERFACE, _hint_name(hint))

    if issubclass(hint, enum.Enum) or issubclass(hint, SCALAR_TYPES):
        return TypeClassification(TypeKind.SCALAR, hint.__qualname__, python_type=hint)
    if issubclass(hint, collections.abc.Mapping):
        return TypeClassification(TypeKind.MAP, hint.__qualname__)
    if issubclass(hint, (collections.abc.Sequence, collections.abc.Set)):
        return TypeClassification(TypeKind.SEQUENCE, hint.__qualname__, inner=INTERFACE)
    if _is_record_class(hint):
        return TypeClassification(TypeKind.RECORD, hint.__qualname__, python_type=hint)

    return TypeClassification(TypeKind.INTERFACE, hint.__qualname__)


def _classify_generic(hint: Any, origin: Any) -> TypeClassification:
    """Classify parameterized generics such as ``list[Post]``."""
    args = typing.get_args(hint)
    name = getattr(origin, "__name__", _hint_name(origin))

    if not isinstance(origin, type):
        return TypeClassification(TypeKind.INTERFACE, _hint_name(hint))

    if issubclass(origin, collections.abc.Mapping):
        return TypeClassification(TypeKind.MAP, _hint_name(hint))

    if issubclass(origin, (collections.abc.Iterable,)) and not issubclass(origin, (str, bytes)):
        # tuple[Post, ...] and list[Post] both describe a sequence of Post
        inner = classify(args[0]) if args else INTERFACE
        return TypeClassification(TypeKind.SEQUENCE, name, inner=inner)

    if origin is type:
        return TypeClassification(TypeKind.INTERFACE, _hint_name(hint))

    return classify(origin)


@dataclass(frozen=True)
class ResolvedType:
    """Outcome of resolving a parse target to its record class."""
    cls: type
    is_class: bool


def resolve_target(target: Any) -> ResolvedType:
    """
    Resolve a parse target to the record class used as the registry key.

    A class is used as is; an instance resolves to its class.

    Raises:
        InvalidInputError: target is None or does not denote a record type
    """
    if target is None:
        raise InvalidInputError("parse: target cannot be None")

    if typing.get_origin(target) is not None:
        raise InvalidInputError(
            f"parse: target must be a record class or an instance of one, got {_hint_name(target)}"
        )

    is_class = isinstance(target, type)
    cls = target if is_class else type(target)
    classification = classify(cls)

    if classification.kind is not TypeKind.RECORD:
        original = f"type[{cls.__qualname__}]" if is_class else cls.__qualname__
        raise InvalidInputError(
            f"parse: target must be a record class or an instance of one, "
            f"got {original} ({classification.kind.value})"
        )

    logger.debug(f"Resolved target {cls.__qualname__} (passed as class: {is_class})")
    return ResolvedType(cls=cls, is_class=is_class)


@dataclass(frozen=True)
class FieldDescriptor:
    """A record field as seen by the builders."""
    name: str
    index: int
    type: TypeClassification
    hint: Any
    annotation: str = ""

    @property
    def exported(self) -> bool:
        return not self.name.startswith("_")

    @property
    def python_type(self) -> str:
        return _hint_name(self.hint)


def _is_class_var(hint: Any) -> bool:
    return hint is ClassVar or typing.get_origin(hint) is ClassVar


def _orm_tag(extras: Any) -> Optional[str]:
    for extra in extras:
        if isinstance(extra, OrmTag):
            return extra.value
    return None


def _unwrap_optional_member(hint: Any) -> Tuple[Any, Optional[str]]:
    """
    Lift an annotation out of an ``Optional`` member.

    ``Optional[Annotated[int, orm("pk")]]`` -> ``(Optional[int], "pk")``.
    """
    if typing.get_origin(hint) not in _UNION_ORIGINS:
        return hint, None

    annotation = None
    stripped = False
    members = []
    for arg in typing.get_args(hint):
        if typing.get_origin(arg) is typing.Annotated:
            base, *extras = typing.get_args(arg)
            annotation = annotation or _orm_tag(extras)
            arg = base
            stripped = True
        members.append(arg)
    if not stripped:
        return hint, None
    return typing.Union[tuple(members)], annotation


def _nested_tag(hint: Any) -> Optional[str]:
    """Find an ``orm()`` marker anywhere below the top level of a hint."""
    for arg in typing.get_args(hint):
        if typing.get_origin(arg) is typing.Annotated:
            found = _orm_tag(typing.get_args(arg)[1:])
            if found is not None:
                return found
        found = _nested_tag(arg)
        if found is not None:
            return found
    return None


def inspect_fields(cls: type) -> Iterator[FieldDescriptor]:
    """
    Yield the annotated fields of a record class in declaration order.

    Base class fields come first. ``ClassVar`` and dataclass ``InitVar``
    annotations are not fields.

    Raises:
        InvalidInputError: a type hint cannot be resolved
    """
    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        raise InvalidInputError(f"parse: cannot resolve type hints of {cls.__qualname__}: {e}") from e

    dataclass_fields = (
        {f.name: f for f in dataclasses.fields(cls)} if dataclasses.is_dataclass(cls) else {}
    )

    index = 0
    for name, hint in hints.items():
        if _is_class_var(hint) or isinstance(hint, dataclasses.InitVar):
            continue

        annotation = None
        if typing.get_origin(hint) is typing.Annotated:
            hint, *extras = typing.get_args(hint)
            annotation = _orm_tag(extras)
        else:
            hint, annotation = _unwrap_optional_member(hint)

        if annotation is None and name in dataclass_fields:
            annotation = dataclass_fields[name].metadata.get(TAG_NAME)

        if annotation is None:
            nested = _nested_tag(hint)
            if nested is not None:
                logger.warning(
                    f"Annotation '{nested}' on {cls.__qualname__}.{name} is nested inside "
                    f"{_hint_name(hint)} and ignored (put Annotated outermost)"
                )

        yield FieldDescriptor(
            name=name,
            index=index,
            type=classify(hint),
            hint=hint,
            annotation=annotation or "",
        )
        index += 1
