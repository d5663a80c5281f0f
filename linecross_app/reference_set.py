from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from .errors import MalformedData, NotFound
from .models import ScatteredLine

_SCATTERED_LINES = TypeAdapter(List[ScatteredLine])


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not valid JSON")


def parse_json(raw: Union[str, bytes]) -> Any:
    """Strict JSON decode: NaN and Infinity literals are refused."""
    return json.loads(raw, parse_constant=_reject_constant)


def load_scattered_lines(source: Union[str, Path]) -> List[ScatteredLine]:
    path = Path(source)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise NotFound(f"Reference set not readable: {path} ({e})") from e

    try:
        data = parse_json(raw)
    except ValueError as e:
        raise MalformedData(f"Reference set is not valid JSON: {path} ({e})") from e

    if not isinstance(data, list):
        raise MalformedData(f"Reference set must be a JSON array: {path}")

    try:
        lines = _SCATTERED_LINES.validate_python(data)
    except ValidationError as e:
        raise MalformedData(f"Reference set has invalid entries: {path}\n{e}") from e

    logger.debug(f"Loaded {len(lines)} scattered lines from {path}")
    return lines
