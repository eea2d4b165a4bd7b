"""Racket datum rendering.

Turns Python values into text the Racket reader accepts, so values spliced
into generated code or commands stay syntactically valid.
"""

from __future__ import annotations

import math
from typing import Any, Mapping

_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def write_string(text: str) -> str:
    """Render a Python string as a Racket string literal."""
    escaped = "".join(_STRING_ESCAPES.get(ch, ch) for ch in text)
    return f'"{escaped}"'


def write_datum(value: Any) -> str:
    """Render a value in Racket `write` syntax.

    Lists and tuples become parenthesised lists, mappings become
    association lists of dotted pairs, None becomes the empty list.
    """
    if value is None:
        return "()"
    if isinstance(value, bool):
        return "#t" if value else "#f"
    if isinstance(value, float):
        if math.isnan(value):
            return "+nan.0"
        if math.isinf(value):
            return "+inf.0" if value > 0 else "-inf.0"
        return repr(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return write_string(value)
    if isinstance(value, Mapping):
        pairs = " ".join(
            f"({write_datum(k)} . {write_datum(v)})" for k, v in value.items()
        )
        return f"({pairs})"
    if isinstance(value, (list, tuple)):
        return "(" + " ".join(write_datum(item) for item in value) + ")"
    return str(value)


def display_datum(value: Any) -> str:
    """Render a value for splicing into a template.

    Strings are inserted as-is, everything else in `write` syntax.
    """
    if isinstance(value, str):
        return value
    return write_datum(value)


def is_compound(value: Any) -> bool:
    """Whether a value needs quoting to be read back as data."""
    return isinstance(value, (list, tuple, Mapping)) or value is None
