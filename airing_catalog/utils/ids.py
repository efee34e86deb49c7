from __future__ import annotations

from typing import Any


def coerce_int(value: Any) -> int | None:
    """Provider ids arrive as ints or digit strings; anything else is treated as missing."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if raw.isdigit():
            return int(raw)
    return None
