"""Engine configuration for rkteval.

Settings live in an optional rkteval.yaml:

- command: interpreter binary (default: racket)
- command_template: shell command, ${{ command }}, ${{ src-file }} and
  ${{ out-file }} are filled in at run time
- value_printer: wrapper used when result-type is value, ${{ body }} is
  the block body
- plain_value_printer: the same for dialects outside binding_dialects
- value_printers: per-dialect wrappers taking precedence over both
- default_header_args: header arguments applied under every block's own
- binding_dialects, extensions, temp_prefix
- hline_marker, hline_to, nil_to: table marker handling

The loaded EngineConfig is handed to BlockRunner; nothing here is global.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from rkteval.lib.bindings import BINDING_DIALECTS
from rkteval.lib.errors import ConfigError
from rkteval.lib.template import Marker, Placeholder, parse_format

CONFIG_FILENAME = "rkteval.yaml"

DEFAULT_COMMAND_TEMPLATE = [Placeholder("command"), " -u ", Placeholder("src-file")]

# Prints the block's value as JSON when it has a JSON form, so lists and
# null come back readable; anything else goes through write.
DEFAULT_VALUE_PRINTER = [
    "(let ([result (let () ",
    Placeholder("body"),
    Marker.NEWLINE,
    ")]) (if ((dynamic-require 'json 'jsexpr?) result)"
    " ((dynamic-require 'json 'write-json) result)"
    " (write result)))",
]

# Dialects outside binding_dialects (typed/racket and the like) cannot apply
# the untyped result of dynamic-require, so they only get write.
PLAIN_VALUE_PRINTER = ["(write (let () ", Placeholder("body"), Marker.NEWLINE, "))"]


class EngineConfig(BaseModel):
    """Settings shared by every evaluation a BlockRunner performs."""

    command: str = Field(default="racket", description="Interpreter binary")
    command_template: Any = Field(
        default_factory=lambda: list(DEFAULT_COMMAND_TEMPLATE),
        description="Format spec for the shell command",
    )
    value_printer: Any = Field(
        default_factory=lambda: list(DEFAULT_VALUE_PRINTER),
        description="Format spec wrapping the body when result-type is value",
    )
    plain_value_printer: Any = Field(
        default_factory=lambda: list(PLAIN_VALUE_PRINTER),
        description="Value printer for dialects outside binding_dialects",
    )
    value_printers: dict[str, Any] = Field(
        default_factory=dict,
        description="Value printer per dialect, overriding the two above",
    )
    default_header_args: dict[str, Any] = Field(
        default_factory=lambda: {"lang": "racket", "result-type": "value"},
        description="Header arguments applied under each block's own",
    )
    binding_dialects: list[str] = Field(
        default_factory=lambda: list(BINDING_DIALECTS),
        description="Dialects that accept variable bindings",
    )
    extensions: dict[str, str] = Field(
        default_factory=lambda: {"racket": "rkt"},
        description="Source file extension per dialect",
    )
    default_extension: str = Field(default="rkt")
    temp_prefix: str = Field(default="rkteval-", description="Temp file prefix")
    hline_marker: str = Field(
        default="hline", description="Row value meaning a horizontal rule"
    )
    hline_to: str = Field(
        default="null", description="Racket token written for hline rows in vars"
    )
    nil_to: str = Field(
        default="hline", description="Replacement for null entries in tables"
    )

    @field_validator(
        "command_template", "value_printer", "plain_value_printer", mode="before"
    )
    @classmethod
    def parse_format_text(cls, value: Any) -> Any:
        """Accept ${{ name }} text wherever a format spec is expected."""
        if isinstance(value, str):
            return parse_format(value)
        return value

    @field_validator("value_printers", mode="before")
    @classmethod
    def parse_printer_texts(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                lang: parse_format(spec) if isinstance(spec, str) else spec
                for lang, spec in value.items()
            }
        return value

    def value_printer_for(self, lang: str) -> Any:
        """Format spec that prints a block's value in a given dialect."""
        if lang in self.value_printers:
            return self.value_printers[lang]
        if lang in self.binding_dialects:
            return self.value_printer
        return self.plain_value_printer

    def extension_for(self, lang: str) -> str:
        """File extension for a dialect's source files."""
        return self.extensions.get(lang, self.default_extension)


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """Find rkteval.yaml in a directory or its parents."""
    cwd = start or Path.cwd()
    for parent in [cwd] + list(cwd.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return None


def load_engine_config(path: Path) -> EngineConfig:
    """Load an EngineConfig from a YAML file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {path}")

    try:
        return EngineConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {path}: {e}") from e
