"""Field discovery and accessor resolution for record types."""

# Module responsibilities:
# - Derive an ordered FieldDescriptor table from a record type's own annotations.
# - Translate field names into getter/setter names via the naming convention.
# - Read and write field values through those accessors, falling back to attributes.

from __future__ import annotations

import inspect
import types
from dataclasses import dataclass
from datetime import date
from enum import Enum
from functools import lru_cache
from typing import Any, ClassVar, NewType, Tuple, Union, get_args, get_origin

from .errors import ReflectionError, SchemaError, SheetBindError

# Single precision float and signed 8-bit integer markers for annotations.
Float = NewType("Float", float)
Byte = NewType("Byte", int)


class FieldKind(str, Enum):
    """Declared type of a record field as seen by the coercion rules."""

    INT = "int"
    FLOAT = "float"
    DOUBLE = "double"
    BYTE = "byte"
    BOOLEAN = "boolean"
    DATE = "date"
    STRING = "string"
    OTHER = "other"


@dataclass(frozen=True)
class FieldDescriptor:
    """One field of a record type, bound to the sheet column at ``position``."""

    name: str
    kind: FieldKind
    position: int
    annotation: Any = None

    @property
    def getter(self) -> str:
        return accessor_name(self.name, True, self.kind)

    @property
    def setter(self) -> str:
        return accessor_name(self.name, False, self.kind)


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def _kind_for(annotation: Any) -> FieldKind:
    if annotation is Float:
        return FieldKind.FLOAT
    if annotation is Byte:
        return FieldKind.BYTE
    if not isinstance(annotation, type):
        return FieldKind.OTHER
    # bool is a subclass of int and must be checked first.
    if issubclass(annotation, bool):
        return FieldKind.BOOLEAN
    if issubclass(annotation, int):
        return FieldKind.INT
    if issubclass(annotation, float):
        return FieldKind.DOUBLE
    if issubclass(annotation, date):
        return FieldKind.DATE
    if issubclass(annotation, str):
        return FieldKind.STRING
    return FieldKind.OTHER


@lru_cache(maxsize=None)
def resolve_fields(record_type: type) -> Tuple[FieldDescriptor, ...]:
    """Return the descriptors of *record_type*'s own fields in declaration order.

    Inherited annotations are ignored and ``ClassVar`` entries are skipped.
    The result is cached per type.

    Raises:
        SchemaError: When the type declares no usable fields or its
            annotations cannot be evaluated.
    """

    try:
        annotations = inspect.get_annotations(record_type, eval_str=True)
    except (NameError, SyntaxError, TypeError) as exc:
        raise SchemaError(
            f"Cannot evaluate field annotations of {record_type.__qualname__}: {exc}"
        ) from exc

    descriptors = []
    for name, annotation in annotations.items():
        if annotation is ClassVar or get_origin(annotation) is ClassVar:
            continue
        resolved = _unwrap_optional(annotation)
        descriptors.append(
            FieldDescriptor(
                name=name,
                kind=_kind_for(resolved),
                position=len(descriptors),
                annotation=resolved,
            )
        )

    if not descriptors:
        raise SchemaError(f"{record_type.__qualname__} declares no fields")
    return tuple(descriptors)


def accessor_name(field_name: str, is_getter: bool, field_kind: FieldKind) -> str:
    """Build the conventional accessor name for a field.

    ``name`` -> ``getName``/``setName``; boolean getters use ``is``.
    Names starting with an underscore keep the prefix but are not
    capitalised (``_id`` -> ``get_id``).
    """

    if not is_getter:
        prefix = "set"
    elif field_kind is FieldKind.BOOLEAN:
        prefix = "is"
    else:
        prefix = "get"
    if field_name.startswith("_"):
        return prefix + field_name
    return prefix + field_name[:1].upper() + field_name[1:]


def _accessor(record: object, name: str) -> Any:
    candidate = getattr(type(record), name, None)
    return candidate if callable(candidate) else None


def read_field(record: object, descriptor: FieldDescriptor) -> Any:
    """Return a field value via its getter, or the plain attribute when absent."""

    getter = _accessor(record, descriptor.getter)
    try:
        if getter is not None:
            return getattr(record, descriptor.getter)()
        return getattr(record, descriptor.name)
    except SheetBindError:
        raise
    except Exception as exc:
        raise ReflectionError(
            f"Cannot read field '{descriptor.name}' of {type(record).__qualname__}: {exc}"
        ) from exc


def write_field(record: object, descriptor: FieldDescriptor, value: Any) -> None:
    """Assign a field value via its setter, or the plain attribute when absent."""

    setter = _accessor(record, descriptor.setter)
    try:
        if setter is not None:
            getattr(record, descriptor.setter)(value)
        else:
            setattr(record, descriptor.name, value)
    except SheetBindError:
        raise
    except Exception as exc:
        # Anything a setter raises is a failed assignment of this one field.
        raise ReflectionError(
            f"Cannot assign field '{descriptor.name}' of {type(record).__qualname__}: {exc}"
        ) from exc


def instantiate(record_type: type) -> Any:
    """Create an empty record through the zero-argument constructor."""

    try:
        return record_type()
    except TypeError as exc:
        raise SchemaError(
            f"{record_type.__qualname__} has no zero-argument constructor: {exc}"
        ) from exc
