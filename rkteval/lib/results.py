"""Coerce captured program output into a block result.

Output that reads as a list literal ("[1, 2]", "[[1, 2], null, [3, 4]]")
becomes a table: a list of rows, with null rows and cells replaced by the
nil-to token. Everything else is handed back as the original text.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

import yaml

from rkteval.lib.config import EngineConfig

# result-params that ask for the text exactly as printed
RAW_RESULT_PARAMS = frozenset(
    {"raw", "verbatim", "scalar", "file", "html", "latex", "code", "org", "drawer", "pp"}
)

Result = Union[str, list]


def _result_params(params: Mapping[str, Any]) -> list[str]:
    value = params.get("result-params") or []
    if isinstance(value, str):
        return value.split()
    return [str(item) for item in value]


def _replace_nil(row: Any, nil_to: Any) -> Any:
    if row is None:
        return nil_to
    if isinstance(row, list):
        return [nil_to if cell is None else cell for cell in row]
    return row


def parse_table(text: str) -> Optional[list]:
    """Read text as a list literal, or return None if it is not one."""
    if not text.strip().startswith("["):
        return None
    try:
        data = yaml.safe_load(text)
    except (yaml.YAMLError, RecursionError):
        # deeply nested or truncated brackets exhaust the recursive composer
        return None
    return data if isinstance(data, list) else None


def coerce(
    raw: str,
    params: Optional[Mapping[str, Any]] = None,
    config: Optional[EngineConfig] = None,
) -> Result:
    """Turn raw output into a string or a list of rows.

    Args:
        raw: Text captured from the program.
        params: Header arguments; result-params and nil-to are consulted.
        config: Engine settings for the default nil-to token.

    Returns:
        A list of rows when raw is a list literal, otherwise raw unchanged.
    """
    params = params or {}
    config = config or EngineConfig()

    if RAW_RESULT_PARAMS.intersection(_result_params(params)):
        return raw

    table = parse_table(raw)
    if table is None:
        return raw

    nil_to = params.get("nil-to", config.nil_to)
    return [_replace_nil(row, nil_to) for row in table]
