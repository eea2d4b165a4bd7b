"""rkteval - evaluate Racket code blocks from literate documents"""

from rkteval._version import __version__
from rkteval.lib.assembler import Assembly, assemble
from rkteval.lib.bindings import bind
from rkteval.lib.config import EngineConfig, load_engine_config
from rkteval.lib.errors import (
    Diagnostic,
    InvalidTokenError,
    MissingKeyError,
    MissingParameterError,
    RktEvalError,
    SessionsUnsupportedError,
    UnsupportedEvalModeError,
    UnsupportedResultTypeError,
)
from rkteval.lib.results import coerce
from rkteval.lib.runner import BlockRunner, EvalKind, EvalMode, resolve_eval_mode
from rkteval.lib.template import Marker, Placeholder, expand, parse_format

__all__ = [
    "__version__",
    # engine
    "BlockRunner",
    "EngineConfig",
    "load_engine_config",
    "EvalKind",
    "EvalMode",
    "resolve_eval_mode",
    # stages
    "Assembly",
    "assemble",
    "bind",
    "coerce",
    "expand",
    "parse_format",
    "Marker",
    "Placeholder",
    # errors
    "Diagnostic",
    "RktEvalError",
    "MissingKeyError",
    "InvalidTokenError",
    "MissingParameterError",
    "UnsupportedResultTypeError",
    "UnsupportedEvalModeError",
    "SessionsUnsupportedError",
]
