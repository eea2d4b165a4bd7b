"""Variable bindings for generated Racket programs.

Block variables become a single define-values form placed ahead of the
user body, so every name is bound at once:

    (define-values (x y) (values 1 '(2 3)))
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from rkteval.lib.datum import is_compound, write_datum

# Dialects whose reader and top level accept define-values as emitted here
BINDING_DIALECTS = ("racket", "racket/base", "racket/gui", "lazy")


def supports_bindings(lang: str, dialects: Iterable[str] = BINDING_DIALECTS) -> bool:
    """Check whether variables can be bound for a dialect."""
    return lang in set(dialects)


def bind_value(value: Any, hline_marker: str = "hline", hline_to: str = "null") -> str:
    """Render one bound value as Racket source.

    Lists are quoted; rows equal to the hline marker are written as the
    hline_to token.
    """
    if isinstance(value, (list, tuple)):
        rows = [
            hline_to if isinstance(row, str) and row == hline_marker else write_datum(row)
            for row in value
        ]
        return "'(" + " ".join(rows) + ")"
    if is_compound(value):
        return "'" + write_datum(value)
    return write_datum(value)


def bind(
    variables: Mapping[str, Any],
    hline_marker: str = "hline",
    hline_to: str = "null",
) -> str:
    """Build the binding fragment for a set of variables.

    Args:
        variables: Ordered mapping of name to value.
        hline_marker: Row value standing for a horizontal rule in input tables.
        hline_to: Racket token written in place of such rows.

    Returns:
        A define-values form, or "" when there is nothing to bind.
    """
    if not variables:
        return ""

    names = " ".join(variables)
    values = " ".join(
        bind_value(value, hline_marker, hline_to) for value in variables.values()
    )
    return f"(define-values ({names}) (values {values}))"
