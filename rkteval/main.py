"""rkteval CLI Main Entry Point

Evaluates a Racket code block the way a literate-programming host would:
header arguments come from options, the body from a file or stdin.

Usage:
    rkteval run block.rkt                    # run and print the result
    rkteval run -r output block.rkt          # print what the program prints
    rkteval run --var x=1 --var 'y=[2, 3]'   # bind variables (YAML values)
    rkteval code block.rkt                   # show the assembled program
    rkteval version                          # show version
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from rich.table import Table

from rkteval._version import __version__
from rkteval.lib.config import EngineConfig, find_config_file, load_engine_config
from rkteval.lib.console import console, setup_logging
from rkteval.lib.errors import ConfigError, RktEvalError, exit_with_error, handle_error
from rkteval.lib.results import Result
from rkteval.lib.runner import BlockRunner
from rkteval.lib.template import parse_format

typer_app = typer.Typer(help="Evaluate Racket code blocks from literate documents.")


def load_config(config_path: Optional[Path]) -> EngineConfig:
    """Load rkteval.yaml from the given path, or search cwd and parents."""
    path = config_path or find_config_file()
    if path is None:
        return EngineConfig()
    try:
        return load_engine_config(path)
    except FileNotFoundError as e:
        raise ConfigError(str(e)) from e


def read_body(path: Optional[Path]) -> str:
    """Read the block body from a file, or stdin when no file is given."""
    if path is None:
        return sys.stdin.read()
    if not path.exists():
        exit_with_error(f"File not found: {path}")
    return path.read_text(encoding="utf-8")


def parse_vars(items: Optional[List[str]]) -> dict[str, Any]:
    """Parse NAME=VALUE options, reading each value as YAML."""
    variables: dict[str, Any] = {}
    for item in items or []:
        name, sep, raw = item.partition("=")
        name = name.strip()
        if not sep or not name:
            raise typer.BadParameter(f"Expected NAME=VALUE, got {item!r}", param_hint="--var")
        try:
            variables[name] = yaml.safe_load(raw) if raw.strip() else ""
        except yaml.YAMLError:
            variables[name] = raw
    return variables


def build_params(**options: Any) -> dict[str, Any]:
    """Turn CLI options into header arguments, dropping unset ones."""
    params: dict[str, Any] = {}
    for key, value in options.items():
        if value is None or value == [] or value == {}:
            continue
        if key in ("cmd", "prologue", "epilogue"):
            value = parse_format(value)
        params[key.replace("_", "-")] = value
    return params


def render_result(result: Result, hline: str) -> None:
    """Print a string result as-is, or a table with rich."""
    if isinstance(result, str):
        typer.echo(result, nl=not result.endswith("\n"))
        return

    rows = [row if isinstance(row, list) else [row] for row in result if row != hline]
    width = max((len(row) for row in rows), default=0)

    table = Table(show_header=False)
    for _ in range(width):
        table.add_column()

    for row in result:
        if row == hline:
            table.add_section()
            continue
        cells = row if isinstance(row, list) else [row]
        table.add_row(*[str(cell) for cell in cells])

    console.print(table)


@typer_app.command()
def run(
    file: Optional[Path] = typer.Argument(None, help="Block body (default: stdin)."),
    lang: Optional[str] = typer.Option(None, "-l", "--lang", help="Dialect, e.g. racket/base."),
    result_type: Optional[str] = typer.Option(
        None, "-r", "--result-type", help="value or output."
    ),
    var: Optional[List[str]] = typer.Option(None, "--var", help="NAME=VALUE binding."),
    eval_mode: Optional[str] = typer.Option(
        None, "-e", "--eval-mode", help="body, code, debug, file or module:function."
    ),
    cmd: Optional[str] = typer.Option(
        None, "--cmd", help="Command template, e.g. 'racket -u ${{ src-file }}'."
    ),
    src: Optional[Path] = typer.Option(None, "--src", help="Write the program here."),
    out: Optional[Path] = typer.Option(None, "--out", help="Output artifact path."),
    prologue: Optional[str] = typer.Option(None, "--prologue", help="Code before the body."),
    epilogue: Optional[str] = typer.Option(None, "--epilogue", help="Code after the body."),
    raw: bool = typer.Option(False, "--raw", help="Never turn output into a table."),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config", help="rkteval.yaml path."),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log the command being run."),
) -> None:
    """Evaluate a block and print its result."""
    setup_logging(verbose)
    body = read_body(file)

    try:
        config = load_config(config_path)
        params = build_params(
            lang=lang,
            result_type=result_type,
            vars=parse_vars(var),
            eval_mode=eval_mode,
            cmd=cmd,
            src_file=str(src) if src else None,
            out_file=str(out) if out else None,
            prologue=prologue,
            epilogue=epilogue,
            result_params=["raw"] if raw else None,
        )
        outcome = BlockRunner(config).execute(body, params)
    except RktEvalError as e:
        handle_error(e)

    render_result(outcome.result, config.nil_to)


@typer_app.command()
def code(
    file: Optional[Path] = typer.Argument(None, help="Block body (default: stdin)."),
    lang: Optional[str] = typer.Option(None, "-l", "--lang", help="Dialect, e.g. racket/base."),
    result_type: Optional[str] = typer.Option(
        None, "-r", "--result-type", help="value or output."
    ),
    var: Optional[List[str]] = typer.Option(None, "--var", help="NAME=VALUE binding."),
    prologue: Optional[str] = typer.Option(None, "--prologue", help="Code before the body."),
    epilogue: Optional[str] = typer.Option(None, "--epilogue", help="Code after the body."),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config", help="rkteval.yaml path."),
) -> None:
    """Print the program that would be run for a block."""
    setup_logging()
    body = read_body(file)

    try:
        config = load_config(config_path)
        params = build_params(
            lang=lang,
            result_type=result_type,
            vars=parse_vars(var),
            prologue=prologue,
            epilogue=epilogue,
        )
        assembly = BlockRunner(config).assemble(body, params)
    except RktEvalError as e:
        handle_error(e)

    typer.echo(assembly.source)


@typer_app.command()
def session(
    name: Optional[str] = typer.Argument(None, help="Session name."),
    lang: Optional[str] = typer.Option(None, "-l", "--lang"),
) -> None:
    """Start a session (always refused: blocks run one-shot)."""
    try:
        BlockRunner().initiate_session(name, {"lang": lang} if lang else None)
    except RktEvalError as e:
        handle_error(e)


@typer_app.command()
def version() -> None:
    """Show version and exit."""
    typer.echo(f"rkteval {__version__}")


def app() -> None:
    """Entry point for the CLI."""
    typer_app()


if __name__ == "__main__":
    app()
