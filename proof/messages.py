"""Failure message formatting.

Messages keep the shape ``(<type>[, <type>]) <message>[ (<values>)][:\\n<diff>]``
so existing log scrapers keep matching them.
"""

from __future__ import annotations

from typing import Any

from proof.config import DEFAULT_DIFF_CONTEXT_LINES, DEFAULT_MAX_VALUE_LENGTH
from proof.kinds import type_name
from proof.render import diff

_ELLIPSIS = "..."


def failure_with_value(
    message: str, value: Any, max_length: int = DEFAULT_MAX_VALUE_LENGTH
) -> str:
    return f"({type_name(value)}) {message} ({format_value(value, max_length)})"


def failure_with_values(
    message: str, x: Any, y: Any, max_length: int = DEFAULT_MAX_VALUE_LENGTH
) -> str:
    return (
        f"({type_name(x)}, {type_name(y)}) {message} "
        f"({format_value(x, max_length)}, {format_value(y, max_length)})"
    )


def failure_with_diff(
    message: str, x: Any, y: Any, context: int = DEFAULT_DIFF_CONTEXT_LINES
) -> str:
    text = f"({type_name(x)}, {type_name(y)}) {message}"
    delta = diff(x, y, context=context)
    if delta:
        text += ":\n" + delta
    return text


def format_value(value: Any, max_length: int = DEFAULT_MAX_VALUE_LENGTH) -> str:
    text = repr(value)
    if len(text) <= max_length:
        return text
    return text[: max(max_length - len(_ELLIPSIS), 0)] + _ELLIPSIS


def format_duration(seconds: float) -> str:
    """Format a duration compactly: ``200ms``, ``1.5s``."""
    if seconds < 1:
        return f"{seconds * 1000:g}ms"
    return f"{seconds:g}s"
