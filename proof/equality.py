"""Relaxed structural equality and nil/zero classification."""

from __future__ import annotations

import warnings
from fractions import Fraction
from typing import Any

import numpy as np

from proof.kinds import (
    NUMERIC_KINDS,
    SIZED_KINDS,
    UNSET,
    Kind,
    deref,
    family_of,
    fields_of,
    is_builtin_class,
    kind_of,
)

_CONVERSION_ERRORS = (TypeError, ValueError, ArithmeticError)
_TRAVERSED_KINDS = frozenset(
    {Kind.SEQUENCE, Kind.MAPPING, Kind.STRUCT, Kind.POINTER}
)


def equal(x: Any, y: Any) -> bool:
    """Report whether ``x`` and ``y`` are structurally equal.

    Values of different classes are equal only when one converts
    losslessly to the class of the other and the result equals it. ``x``
    is tried first. Classes sharing a ``__name__`` are never converted.
    """
    return _Comparer().equal(x, y)


def is_nil(value: Any) -> bool:
    if value is None:
        return True
    return kind_of(value) is Kind.POINTER and deref(value) is None


def is_zero(value: Any) -> bool:
    """Report whether ``value`` is the zero value of its type.

    Empty containers are zero. A struct is zero when every field is zero,
    and a live reference is zero when its referent is.
    """
    return _is_zero(value, set())


def get_len(value: Any) -> tuple[int, bool]:
    """Return the element count of a sized value and whether it has one."""
    kind = kind_of(value)
    if kind is Kind.CHANNEL:
        return value.qsize(), True
    if kind in SIZED_KINDS:
        return len(value), True
    return 0, False


def convertible(x: Any, y: Any) -> bool:
    """Report whether ``x`` converts losslessly to the class of ``y``."""
    ok, _ = _conversion(x, y)
    return ok


def magnitude(value: Any) -> tuple[Any, Any]:
    """Return the exact (real, imaginary) magnitude of a numeric value."""
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, complex):
        return _exact(value.real), _exact(value.imag)
    return _exact(value), 0


def _is_zero(value: Any, seen: set[int]) -> bool:
    if is_nil(value):
        return True
    kind = kind_of(value)
    if kind in (Kind.POINTER, Kind.STRUCT):
        if id(value) in seen:
            return True
        seen.add(id(value))
    if kind is Kind.POINTER:
        return _is_zero(deref(value), seen)
    if kind is Kind.STRUCT:
        return all(
            field is UNSET or _is_zero(field, seen)
            for _, field in fields_of(value)
        )
    if isinstance(value, np.ndarray):
        return value.size == 0
    if kind in (Kind.SEQUENCE, Kind.MAPPING, Kind.SET, Kind.STRING, Kind.BYTES):
        return len(value) == 0
    if kind in NUMERIC_KINDS:
        return magnitude(value) == (0, 0)
    if kind is Kind.BOOL:
        return not value
    if kind in (Kind.CHANNEL, Kind.FUNCTION):
        return False
    return _equals_default(value)


def _equals_default(value: Any) -> bool:
    # classes defined in Python are never instantiated here
    cls = type(value)
    if not is_builtin_class(cls):
        return False
    try:
        zero_value = cls()
    except Exception:
        return False
    return equal(value, zero_value)


def _exact(value: Any) -> Any:
    try:
        return Fraction(value)
    except (ValueError, OverflowError, TypeError):
        return float(value)


def _conversion(x: Any, y: Any) -> tuple[bool, Any]:
    if x is None or y is None:
        return False, None
    if type(x).__name__ == type(y).__name__:
        return False, None
    family = family_of(kind_of(x))
    if family is None or kind_of(y) not in family:
        return False, None
    return _convert(x, type(y))


def _convert(value: Any, target: type) -> tuple[bool, Any]:
    source = value.item() if isinstance(value, np.generic) else value
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            converted = target(source)
        except _CONVERSION_ERRORS:
            return False, None
    if type(converted) is not target:
        return False, None
    if not _same_content(value, converted):
        return False, None
    return True, converted


def _same_content(original: Any, converted: Any) -> bool:
    kind = kind_of(original)
    if kind in NUMERIC_KINDS:
        return magnitude(original) == magnitude(converted)
    if kind is Kind.BOOL:
        return bool(original) == bool(converted)
    if kind is Kind.STRING:
        return str.__str__(original) == str.__str__(converted)
    return bytes(original) == bytes(converted)


class _Comparer:
    """One equality traversal; pairs still being compared count as equal."""

    def __init__(self) -> None:
        self._open: set[tuple[int, int]] = set()

    def equal(self, x: Any, y: Any) -> bool:
        if x is None or y is None:
            return x is None and y is None
        if type(x) is not type(y):
            ok, converted = _conversion(x, y)
            if ok:
                return self.equal(converted, y)
            ok, converted = _conversion(y, x)
            return ok and self.equal(x, converted)
        kind = kind_of(x)
        if kind is Kind.CHANNEL:
            return x is y
        if kind not in _TRAVERSED_KINDS:
            return bool(x == y)
        pair = (id(x), id(y))
        if pair in self._open:
            return True
        self._open.add(pair)
        try:
            if kind is Kind.SEQUENCE:
                return self._sequences(x, y)
            if kind is Kind.MAPPING:
                return self._mappings(x, y)
            if kind is Kind.STRUCT:
                return self._structs(x, y)
            return self.equal(deref(x), deref(y))
        finally:
            self._open.discard(pair)

    def _sequences(self, x: Any, y: Any) -> bool:
        if isinstance(x, np.ndarray) and x.shape != y.shape:
            return False
        if len(x) != len(y):
            return False
        return all(self.equal(a, b) for a, b in zip(x, y))

    def _mappings(self, x: Any, y: Any) -> bool:
        if len(x) != len(y):
            return False
        for key, value in x.items():
            if key not in y:
                return False
            if not self.equal(value, y[key]):
                return False
        return True

    def _structs(self, x: Any, y: Any) -> bool:
        x_fields = dict(fields_of(x))
        y_fields = dict(fields_of(y))
        if x_fields.keys() != y_fields.keys():
            return False
        for name, a in x_fields.items():
            b = y_fields[name]
            if a is UNSET or b is UNSET:
                if a is not b:
                    return False
                continue
            if not self.equal(a, b):
                return False
        return True
