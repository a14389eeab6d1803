"""Kind classification for arbitrary Python values."""

from __future__ import annotations

import array
import asyncio
import dataclasses
import enum
import functools
import numbers
import queue
import types
import weakref
from collections import deque
from collections.abc import Mapping, Sequence, Set
from decimal import Decimal
from typing import Any

import numpy as np


class Kind(enum.Enum):
    NIL = "nil"
    BOOL = "bool"
    STRING = "string"
    BYTES = "bytes"
    INT = "int"
    FLOAT = "float"
    COMPLEX = "complex"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    SET = "set"
    STRUCT = "struct"
    POINTER = "pointer"
    CHANNEL = "channel"
    FUNCTION = "function"
    OTHER = "other"


NUMERIC_KINDS = frozenset({Kind.INT, Kind.FLOAT, Kind.COMPLEX})
CONTAINER_KINDS = frozenset(
    {Kind.SEQUENCE, Kind.MAPPING, Kind.SET, Kind.STRUCT, Kind.POINTER}
)
SIZED_KINDS = frozenset({Kind.SEQUENCE, Kind.MAPPING, Kind.SET, Kind.CHANNEL})

_CHANNEL_TYPES = (queue.Queue, queue.SimpleQueue, asyncio.Queue)
_FUNCTION_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.BuiltinMethodType,
    types.MethodWrapperType,
    functools.partial,
)
_SEQUENCE_TYPES = (Sequence, deque, array.array)

# set on builtin and extension types, never on classes from a class statement
_IMMUTABLE_TYPE = 1 << 8

UNSET = object()


def kind_of(value: Any) -> Kind:
    """Return the coarse runtime category of ``value``."""
    if value is None:
        return Kind.NIL
    if isinstance(value, (bool, np.bool_)):
        return Kind.BOOL
    if isinstance(value, str):
        return Kind.STRING
    if isinstance(value, bytes):
        return Kind.BYTES
    if isinstance(value, numbers.Integral):
        return Kind.INT
    if isinstance(value, (numbers.Real, Decimal)):
        return Kind.FLOAT
    if isinstance(value, numbers.Complex):
        return Kind.COMPLEX
    if isinstance(value, np.ndarray):
        return Kind.SEQUENCE if value.ndim > 0 else Kind.OTHER
    if isinstance(value, weakref.ReferenceType):
        return Kind.POINTER
    if isinstance(value, _CHANNEL_TYPES):
        return Kind.CHANNEL
    if isinstance(value, type):
        return Kind.OTHER
    if isinstance(value, _FUNCTION_TYPES):
        return Kind.FUNCTION
    if _is_namedtuple(value) or dataclasses.is_dataclass(value):
        return Kind.STRUCT
    if isinstance(value, Mapping):
        return Kind.MAPPING
    if isinstance(value, Set):
        return Kind.SET
    if isinstance(value, _SEQUENCE_TYPES):
        return Kind.SEQUENCE
    if isinstance(value, enum.Enum):
        return Kind.OTHER
    if isinstance(value, BaseException):
        return Kind.STRUCT
    cls = type(value)
    if (
        cls.__eq__ is object.__eq__
        and is_python_class(cls)
        and _has_attribute_table(value)
    ):
        return Kind.STRUCT
    return Kind.OTHER


def family_of(kind: Kind) -> frozenset[Kind] | None:
    """Return the set of kinds a value of ``kind`` may be converted within."""
    if kind in NUMERIC_KINDS:
        return NUMERIC_KINDS
    if kind in (Kind.BOOL, Kind.STRING, Kind.BYTES):
        return frozenset({kind})
    return None


def fields_of(value: Any) -> list[tuple[str, Any]]:
    """Return every field of a struct-kind value, private ones included.

    Dataclass fields declared with ``compare=False`` are left out. Slots
    that were never assigned are reported as ``UNSET``.
    """
    if dataclasses.is_dataclass(value):
        return [
            (field.name, getattr(value, field.name, UNSET))
            for field in dataclasses.fields(value)
            if field.compare
        ]
    if _is_namedtuple(value):
        return list(zip(value._fields, value))
    fields: list[tuple[str, Any]] = []
    if isinstance(value, BaseException):
        fields.append(("args", value.args))
    fields.extend(getattr(value, "__dict__", {}).items())
    for name in _slot_names(type(value)):
        fields.append((name, getattr(value, name, UNSET)))
    return fields


def deref(value: weakref.ReferenceType) -> Any:
    return value()


def type_name(value: Any) -> str:
    """Return the dynamic type name used in failure messages."""
    cls = type(value)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def short_type_name(value: Any) -> str:
    return type(value).__qualname__


def is_builtin_class(cls: type) -> bool:
    return bool(cls.__flags__ & _IMMUTABLE_TYPE)


def is_python_class(cls: type) -> bool:
    """Report whether ``cls`` and its bases, ``object`` aside, are Python classes.

    Builtin and extension types keep state outside ``__dict__`` and
    ``__slots__``, so their instances are never compared field by field.
    """
    return all(
        klass is object or not is_builtin_class(klass) for klass in cls.__mro__
    )


def _is_namedtuple(value: Any) -> bool:
    return isinstance(value, tuple) and hasattr(type(value), "_fields")


def _has_attribute_table(value: Any) -> bool:
    return hasattr(value, "__dict__") or bool(_slot_names(type(value)))


def _slot_names(cls: type) -> list[str]:
    names: list[str] = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in ("__dict__", "__weakref__"):
                continue
            if slot.startswith("__") and not slot.endswith("__"):
                slot = f"_{klass.__name__.lstrip('_')}{slot}"
            if slot not in names:
                names.append(slot)
    return names
