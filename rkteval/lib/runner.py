"""Block runner for rkteval.

This module handles:
1. Merging configured default header arguments under a block's own
2. Resolving the eval-mode parameter to one evaluation strategy
3. Writing the assembled program to a source file
4. Building the shell command from the command template
5. Running it and capturing standard output
6. Coercing the output into the block's result

Every evaluation is one-shot: a fresh source file and a fresh process,
no state carried over between blocks.
"""

from __future__ import annotations

import importlib
import logging
import os
import pprint
import shlex
import subprocess
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from rkteval.lib.assembler import Assembly, assemble
from rkteval.lib.config import EngineConfig
from rkteval.lib.errors import (
    Diagnostic,
    SessionsUnsupportedError,
    UnsupportedEvalModeError,
)
from rkteval.lib.results import Result, coerce
from rkteval.lib.template import expand

logger = logging.getLogger(__name__)

CustomEvaluator = Callable[[str, Optional[str]], Any]


class EvalKind(str, Enum):
    """How a block gets turned into text."""

    BODY = "body"  # the body as written
    CODE = "code"  # the assembled program
    DEBUG = "debug"  # the merged header arguments
    FILE = "file"  # path of the written source file
    DEFAULT = "default"  # run the command template
    CUSTOM = "custom"  # call a user function


NAMED_MODES = {
    "body": EvalKind.BODY,
    "code": EvalKind.CODE,
    "debug": EvalKind.DEBUG,
    "file": EvalKind.FILE,
}


@dataclass(frozen=True)
class EvalMode:
    kind: EvalKind
    fn: Optional[CustomEvaluator] = None


def _import_callable(ref: str) -> CustomEvaluator:
    """Import a 'package.module:function' reference."""
    module_name, sep, attr = ref.partition(":")
    if not sep or not module_name or not attr:
        raise UnsupportedEvalModeError(
            ref, f"expected one of {', '.join(NAMED_MODES)} or 'module:function'"
        )

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise UnsupportedEvalModeError(ref, str(e)) from e

    for part in attr.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise UnsupportedEvalModeError(ref, str(e)) from e

    if not callable(target):
        raise UnsupportedEvalModeError(ref, "not callable")
    return target


def resolve_eval_mode(value: Any) -> EvalMode:
    """Map an eval-mode header argument to an EvalMode.

    None runs the command template; "body", "code", "debug" and "file"
    select the matching short-cut; a callable, or a string naming one as
    'module:function', is called with the source and output paths.

    Raises:
        UnsupportedEvalModeError: For anything else.
    """
    if value is None:
        return EvalMode(EvalKind.DEFAULT)
    if callable(value):
        return EvalMode(EvalKind.CUSTOM, value)
    if isinstance(value, str):
        if value in NAMED_MODES:
            return EvalMode(NAMED_MODES[value])
        return EvalMode(EvalKind.CUSTOM, _import_callable(value))
    raise UnsupportedEvalModeError(value)


@dataclass
class Evaluation:
    """Raw text produced for a block."""

    text: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    source_path: Optional[str] = None


@dataclass
class Outcome:
    """Coerced block result, ready for the host to place in the document."""

    result: Result
    diagnostics: list[Diagnostic] = field(default_factory=list)
    colnames: Any = None
    rownames: Any = None


class BlockRunner:
    """Evaluates Racket blocks one at a time."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def merge_params(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Layer a block's header arguments over the configured defaults."""
        merged = dict(self.config.default_header_args)
        merged.update(params)
        return merged

    def assemble(self, body: str, params: Mapping[str, Any]) -> Assembly:
        """Assemble the program for a block without running it."""
        return assemble(body, self.merge_params(params), self.config)

    def evaluate(self, body: str, params: Mapping[str, Any]) -> Evaluation:
        """Produce the raw text for a block according to its eval-mode.

        Args:
            body: The block source.
            params: Header arguments for the block.

        Returns:
            Evaluation with the text and any non-fatal diagnostics.
        """
        params = self.merge_params(params)
        mode = resolve_eval_mode(params.get("eval-mode"))
        logger.debug("Eval mode: %s", mode.kind.value)

        if mode.kind is EvalKind.BODY:
            return Evaluation(text=body)
        if mode.kind is EvalKind.DEBUG:
            return Evaluation(text=pprint.pformat(params))

        assembly = assemble(body, params, self.config)
        if mode.kind is EvalKind.CODE:
            return Evaluation(text=assembly.source, diagnostics=assembly.diagnostics)

        src_path = self.write_source(assembly.source, params)
        out_path = params.get("out-file")

        if mode.kind is EvalKind.FILE:
            text = src_path
        elif mode.kind is EvalKind.CUSTOM:
            produced = mode.fn(src_path, str(out_path) if out_path is not None else None)
            text = "" if produced is None else str(produced)
        else:
            text = self.run_command(src_path, out_path, params)

        return Evaluation(
            text=text, diagnostics=assembly.diagnostics, source_path=src_path
        )

    def execute(self, body: str, params: Mapping[str, Any]) -> Outcome:
        """Evaluate a block and coerce its output."""
        merged = self.merge_params(params)
        evaluation = self.evaluate(body, merged)
        return Outcome(
            result=coerce(evaluation.text, merged, self.config),
            diagnostics=evaluation.diagnostics,
            colnames=merged.get("colnames"),
            rownames=merged.get("rownames"),
        )

    def write_source(self, source: str, params: Mapping[str, Any]) -> str:
        """Write the program to src-file, or to a fresh temp file.

        Returns:
            Absolute path of the written file.
        """
        explicit = params.get("src-file")
        if explicit:
            path = Path(explicit).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source, encoding="utf-8")
            src_path = os.path.abspath(path)
        else:
            suffix = "." + self.config.extension_for(str(params.get("lang", "")))
            fd, src_path = tempfile.mkstemp(prefix=self.config.temp_prefix, suffix=suffix)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(source)

        logger.debug("Wrote source to %s", src_path)
        return src_path

    def build_command(
        self, src_path: str, out_path: Any, params: Mapping[str, Any]
    ) -> str:
        """Expand the command template for a written source file."""
        cmd_params = dict(params)
        cmd_params["command"] = self.config.command
        cmd_params["src-file"] = shlex.quote(os.path.abspath(src_path))
        if out_path is not None:
            cmd_params["out-file"] = shlex.quote(
                os.path.abspath(os.path.expanduser(str(out_path)))
            )
        else:
            cmd_params.pop("out-file", None)

        template = params.get("cmd") or self.config.command_template
        return expand(template, cmd_params)

    def run_command(
        self, src_path: str, out_path: Any, params: Mapping[str, Any]
    ) -> str:
        """Run the interpreter on a source file and capture stdout.

        The exit status is logged but does not change the result: whatever
        the process printed is returned, possibly an empty string.
        """
        command = self.build_command(src_path, out_path, params)
        logger.info("Running: %s", command)

        completed = subprocess.run(
            command,
            shell=True,
            stdout=subprocess.PIPE,
            text=True,
        )
        if completed.returncode != 0:
            logger.debug("Command exited with %s: %s", completed.returncode, command)

        return completed.stdout or ""

    def initiate_session(
        self, session: Optional[str] = None, params: Optional[Mapping[str, Any]] = None
    ) -> None:
        """Racket blocks are stateless; sessions are always refused."""
        lang = self.merge_params(params or {}).get("lang", "racket")
        raise SessionsUnsupportedError(str(lang))
