"""Assemble a block body into a complete Racket program.

Program layout, one part per line group, empty parts left out:

    #lang <dialect>
    <prologue>
    (define-values (...) (values ...))
    <body, wrapped by the value printer when result-type is value>
    <epilogue>
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from rkteval.lib.bindings import bind, supports_bindings
from rkteval.lib.config import EngineConfig
from rkteval.lib.errors import (
    DIALECT_BINDING_UNSUPPORTED,
    Diagnostic,
    MissingParameterError,
    UnsupportedResultTypeError,
)
from rkteval.lib.template import expand

logger = logging.getLogger(__name__)

RESULT_TYPES = ("value", "output")


@dataclass
class Assembly:
    """Assembled program text plus anything worth warning about."""

    source: str
    diagnostics: list[Diagnostic] = field(default_factory=list)


def assemble(
    body: str, params: Mapping[str, Any], config: Optional[EngineConfig] = None
) -> Assembly:
    """Compose the full program for a block.

    Args:
        body: The block's source as written in the document.
        params: Header arguments; lang and result-type are required.
        config: Engine settings. Defaults to EngineConfig().

    Returns:
        Assembly with the program text and any non-fatal diagnostics.

    Raises:
        MissingParameterError: If lang is not set.
        UnsupportedResultTypeError: If result-type is not value or output.
    """
    config = config or EngineConfig()

    lang = params.get("lang")
    if not lang:
        raise MissingParameterError("lang")

    result_type = params.get("result-type")
    if result_type not in RESULT_TYPES:
        raise UnsupportedResultTypeError(result_type)

    diagnostics: list[Diagnostic] = []
    parts = [f"#lang {lang}"]

    prologue = params.get("prologue")
    if prologue:
        parts.append(expand(prologue, params))

    variables = dict(params.get("vars") or {})
    if variables:
        if supports_bindings(lang, config.binding_dialects):
            parts.append(
                bind(
                    variables,
                    hline_marker=config.hline_marker,
                    hline_to=params.get("hline-to", config.hline_to),
                )
            )
        else:
            diagnostic = Diagnostic(
                code=DIALECT_BINDING_UNSUPPORTED,
                message=f"Variables are not bound for dialect {lang}; "
                f"skipping {', '.join(variables)}",
            )
            logger.warning(diagnostic.message)
            diagnostics.append(diagnostic)

    if result_type == "value":
        parts.append(expand(config.value_printer_for(lang), {**params, "body": body}))
    else:
        parts.append(body)

    epilogue = params.get("epilogue")
    if epilogue:
        parts.append(expand(epilogue, params))

    return Assembly(source="\n".join(part for part in parts if part), diagnostics=diagnostics)
