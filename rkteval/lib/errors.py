"""Shared error handling for rkteval.

Every fatal condition raised while evaluating a block derives from
RktEvalError. The single recoverable condition (bindings requested for a
dialect that cannot take them) is reported as a Diagnostic instead.
"""

from __future__ import annotations

import pprint
import sys
from dataclasses import dataclass
from typing import Any, Mapping, NoReturn

import typer


class RktEvalError(Exception):
    """Base exception for rkteval operations."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)


class MissingKeyError(RktEvalError):
    """Raised when a template placeholder has no value in the parameters."""

    def __init__(self, name: str, params: Mapping[str, Any]):
        self.name = name
        self.params = dict(params)
        super().__init__(
            f"Expand: undefined placeholder '{name}' in parameters "
            f"{pprint.pformat(self.params)}"
        )


class InvalidTokenError(RktEvalError):
    """Raised when a format spec holds something that is not a token."""

    def __init__(self, token: Any):
        self.token = token
        super().__init__(f"Expand: bad format token {token!r}")


class MissingParameterError(RktEvalError):
    """Raised when a required header argument is absent."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Missing required parameter: {key}")


class UnsupportedResultTypeError(RktEvalError):
    """Raised when result-type is neither 'value' nor 'output'."""

    def __init__(self, result_type: Any):
        self.result_type = result_type
        super().__init__(
            f"Unsupported result type: {result_type!r} (expected 'value' or 'output')"
        )


class UnsupportedEvalModeError(RktEvalError):
    """Raised when eval-mode is neither a known mode nor a callable."""

    def __init__(self, eval_mode: Any, reason: str = ""):
        self.eval_mode = eval_mode
        message = f"Unsupported eval mode: {eval_mode!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class SessionsUnsupportedError(RktEvalError):
    """Raised on any attempt to start a persistent session."""

    def __init__(self, lang: str = "racket"):
        self.lang = lang
        super().__init__(f"Sessions are not supported for {lang} blocks")


class ConfigError(RktEvalError):
    """Raised when an rkteval.yaml file cannot be understood."""

    pass


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem reported next to an evaluation result."""

    code: str
    message: str


DIALECT_BINDING_UNSUPPORTED = "dialect-binding-unsupported"


def exit_with_error(message: str, exit_code: int = 1) -> NoReturn:
    """Exit the program with an error message."""
    typer.echo(f"Error: {message}", err=True)
    sys.exit(exit_code)


def handle_error(error: RktEvalError) -> NoReturn:
    """Exit with an rkteval error's message and exit code."""
    exit_with_error(error.message, error.exit_code)
