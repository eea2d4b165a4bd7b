"""Format spec expansion for rkteval.

A format spec is either a plain string, used verbatim, or a sequence of
tokens:

  - "text"                 literal fragment
  - Marker.NEWLINE         a newline
  - Marker.QUOTE           a double quote
  - Marker.APOSTROPHE      a single quote
  - Placeholder("name")    the value of params["name"]

The same expander builds source fragments (prologue, epilogue, value
printer) and shell commands; it knows nothing about either.

For YAML files and the command line, parse_format() accepts the
GitHub Actions-style ${{ name }} syntax:

    >>> parse_format("racket -u ${{ src-file }}")
    ['racket -u ', Placeholder(name='src-file')]
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Mapping, NamedTuple, Sequence, Union

from rkteval.lib.datum import display_datum
from rkteval.lib.errors import InvalidTokenError, MissingKeyError


class Marker(Enum):
    """Special single-character tokens."""

    NEWLINE = "\n"
    QUOTE = '"'
    APOSTROPHE = "'"


class Placeholder(NamedTuple):
    """A named slot filled from the parameter mapping."""

    name: str


Token = Union[str, Marker, Placeholder]
FormatSpec = Union[str, Sequence[Token]]

# ${{ ln }}, ${{ quot }} and ${{ apos }} are markers, not placeholders
MARKER_NAMES: dict[str, Marker] = {
    "ln": Marker.NEWLINE,
    "quot": Marker.QUOTE,
    "apos": Marker.APOSTROPHE,
}

_PLACEHOLDER = re.compile(r"\$\{\{\s*([^}]+?)\s*\}\}")


def expand(spec: FormatSpec, params: Mapping[str, Any]) -> str:
    """Expand a format spec into a string.

    Args:
        spec: A literal string or a sequence of tokens.
        params: Values for the placeholders named in the spec.

    Returns:
        The expanded text. A literal string spec is returned unchanged.

    Raises:
        MissingKeyError: If a placeholder has no entry in params.
        InvalidTokenError: If spec is not a sequence, or a token is not a
            string, marker or placeholder.
    """
    if isinstance(spec, str):
        return spec
    if not isinstance(spec, Sequence):
        raise InvalidTokenError(spec)

    parts: list[str] = []
    for token in spec:
        if isinstance(token, Marker):
            parts.append(token.value)
        elif isinstance(token, Placeholder):
            if token.name not in params:
                raise MissingKeyError(token.name, params)
            parts.append(display_datum(params[token.name]))
        elif isinstance(token, str):
            parts.append(token)
        else:
            raise InvalidTokenError(token)

    return "".join(parts)


def parse_format(text: str) -> list[Token]:
    """Parse ${{ name }} placeholders in text into a token list."""
    tokens: list[Token] = []
    pos = 0

    for match in _PLACEHOLDER.finditer(text):
        if match.start() > pos:
            tokens.append(text[pos : match.start()])
        name = match.group(1).strip()
        tokens.append(MARKER_NAMES.get(name, Placeholder(name)))
        pos = match.end()

    if pos < len(text):
        tokens.append(text[pos:])

    return tokens
