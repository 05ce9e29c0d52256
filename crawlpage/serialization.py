"""
Helpers behind Page.to_dict / to_json / from_dict.

Headers travel as a nested {name: [values]} mapping inside the canonical
map. decode_headers also accepts that mapping as a JSON string, for stores
that flatten nested values.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"content-type": [""]}


def normalize_headers(headers: Optional[Mapping]) -> dict[str, list[str]]:
    """Lower-case header names and make every value a list."""
    normalized: dict[str, list[str]] = {}
    for name, value in (headers or {}).items():
        if isinstance(value, (str, bytes)):
            values = [value]
        elif value is None:
            values = []
        else:
            values = list(value)
        normalized.setdefault(str(name).lower(), []).extend(values)

    if not normalized.get("content-type"):
        normalized["content-type"] = [""]
    return normalized


def encode_headers(headers: Mapping) -> dict[str, list[str]]:
    return {name: list(values) for name, values in headers.items()}


def decode_headers(blob: Union[Mapping, str, None]) -> dict[str, list[str]]:
    if not blob:
        return {name: list(values) for name, values in DEFAULT_HEADERS.items()}
    if isinstance(blob, str):
        try:
            blob = json.loads(blob)
        except ValueError as exc:
            logger.warning("Unreadable headers blob, using defaults: %s", exc)
            return decode_headers(None)
    if not isinstance(blob, Mapping):
        logger.warning("Headers blob is a %s, not a mapping; using defaults", type(blob).__name__)
        return decode_headers(None)
    return normalize_headers(blob)


def to_int(value: Any) -> int:
    """Best-effort integer parse; anything missing or malformed becomes 0."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def is_blank(value: Any) -> bool:
    """True for None and for empty strings, bytes and containers."""
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict, set)):
        return len(value) == 0
    return False


def prune_blank(data: Mapping) -> dict:
    return {key: value for key, value in data.items() if not is_blank(value)}


def _json_default(obj: Any):
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    return str(obj)


def dumps(data: Mapping) -> str:
    return json.dumps(data, default=_json_default)
