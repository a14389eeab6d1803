"""Deterministic value rendering and line diffs."""

from __future__ import annotations

import difflib
from typing import Any, Iterable

import numpy as np

from proof.kinds import (
    CONTAINER_KINDS,
    UNSET,
    Kind,
    deref,
    fields_of,
    kind_of,
    short_type_name,
)

INDENT = "    "
DEFAULT_CONTEXT_LINES = 3

_BRACKETS = {list: ("[", "]"), tuple: ("(", ")")}


def render(value: Any) -> list[str]:
    """Render ``value`` as indented lines suitable for diffing."""
    return _Renderer().lines(value)


def diff(x: Any, y: Any, context: int = DEFAULT_CONTEXT_LINES) -> str:
    """Return a line diff of the renderings of ``x`` and ``y``.

    Lines only in ``x`` start with ``- ``, lines only in ``y`` with ``+ ``.
    Identical renderings produce an empty string even when the values
    differ by type.
    """
    left = render(x)
    right = render(y)
    if left == right:
        return ""
    out: list[str] = []
    matcher = difflib.SequenceMatcher(a=left, b=right, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            out.extend(
                _context(
                    left[i1:i2],
                    context,
                    leading=i1 == 0,
                    trailing=i2 == len(left),
                )
            )
            continue
        out.extend(f"- {line}" for line in left[i1:i2])
        out.extend(f"+ {line}" for line in right[j1:j2])
    return "\n".join(out)


def _context(
    lines: list[str], context: int, *, leading: bool, trailing: bool
) -> list[str]:
    context = max(context, 0)
    head = [] if leading else lines[:context]
    tail = [] if trailing else lines[max(len(lines) - context, 0) :]
    if len(head) + len(tail) >= len(lines):
        return [f"  {line}" for line in lines]
    hidden = len(lines) - len(head) - len(tail)
    return [
        *(f"  {line}" for line in head),
        f"  ... {hidden} identical lines",
        *(f"  {line}" for line in tail),
    ]


class _Renderer:
    def __init__(self) -> None:
        self._inside: set[int] = set()

    def lines(self, value: Any) -> list[str]:
        kind = kind_of(value)
        if kind not in CONTAINER_KINDS:
            return _scalar(value).splitlines() or [""]
        if id(value) in self._inside:
            return [f"<cycle {short_type_name(value)}>"]
        self._inside.add(id(value))
        try:
            if kind is Kind.SEQUENCE:
                return self._sequence(value)
            if kind is Kind.MAPPING:
                return self._mapping(value)
            if kind is Kind.SET:
                return self._set(value)
            if kind is Kind.STRUCT:
                return self._struct(value)
            return self._pointer(value)
        finally:
            self._inside.discard(id(value))

    def _sequence(self, value: Any) -> list[str]:
        if isinstance(value, np.ndarray):
            opening, closing = "array([", "])"
        else:
            opening, closing = _BRACKETS.get(
                type(value), (f"{short_type_name(value)}([", "])")
            )
        entries = [self.lines(item) for item in value]
        return _block(opening, closing, entries)

    def _mapping(self, value: Any) -> list[str]:
        if type(value) is dict:
            opening, closing = "{", "}"
        else:
            opening, closing = f"{short_type_name(value)}({{", "})"
        items = sorted(
            ((self._inline(key), item) for key, item in value.items()),
            key=lambda pair: pair[0],
        )
        entries = [_prefixed(f"{key}: ", self.lines(item)) for key, item in items]
        return _block(opening, closing, entries)

    def _set(self, value: Any) -> list[str]:
        if not value:
            return [f"{short_type_name(value)}()"]
        if type(value) is set:
            opening, closing = "{", "}"
        else:
            opening, closing = f"{short_type_name(value)}({{", "})"
        entries = sorted((self.lines(item) for item in value), key="\n".join)
        return _block(opening, closing, entries)

    def _struct(self, value: Any) -> list[str]:
        entries = []
        for name, field in fields_of(value):
            field_lines = ["<unset>"] if field is UNSET else self.lines(field)
            entries.append(_prefixed(f"{name}=", field_lines))
        return _block(f"{short_type_name(value)}(", ")", entries)

    def _pointer(self, value: Any) -> list[str]:
        target = deref(value)
        if target is None:
            return ["ref(None)"]
        inner = self.lines(target)
        return _prefixed("ref(", inner[:-1] + [inner[-1] + ")"])

    def _inline(self, value: Any) -> str:
        return " ".join(line.strip() for line in self.lines(value))


def _scalar(value: Any) -> str:
    # numpy scalars print like the Python value they hold
    if isinstance(value, np.generic):
        return repr(value.item())
    return repr(value)


def _prefixed(prefix: str, lines: list[str]) -> list[str]:
    return [prefix + lines[0], *lines[1:]]


def _block(opening: str, closing: str, entries: Iterable[list[str]]) -> list[str]:
    body: list[str] = []
    for entry in entries:
        entry = entry[:-1] + [entry[-1] + ","]
        body.extend(INDENT + line for line in entry)
    if not body:
        return [opening + closing]
    return [opening, *body, closing]
