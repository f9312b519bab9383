"""
execution/payload/coerce_fields.py

Lenient scalar coercions shared by every boundary decoding strategy.

Each helper maps a raw value (query-string text or a decoded JSON scalar)
to its canonical form, or to None when the value is absent or unusable.
None of them raise: a bad field degrades to "absent" and decoding of the
sibling fields carries on.
"""

from __future__ import annotations

import math
import re

from execution.course.module_registry import PROGRESS_MAX, PROGRESS_MIN

# Plain ASCII decimal with optional exponent, as the host writes numbers.
_NUMERIC_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def parse_number(raw: object) -> int | float | None:
    """Return raw as a finite number, or None.

    Accepts ints, floats and numeric strings (surrounding whitespace allowed).
    Empty strings, booleans, NaN and infinities are treated as absent.
    Integral values come back as int.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, int):
        return raw

    if isinstance(raw, float):
        value = raw
    elif isinstance(raw, str):
        text = raw.strip()
        if not _NUMERIC_RE.fullmatch(text):
            return None
        value = float(text)
    else:
        return None

    if not math.isfinite(value):
        return None
    if value.is_integer():
        return int(value)
    return value


def parse_int(raw: object) -> int | None:
    """Return raw as an int, or None when it is absent or not integral."""
    value = parse_number(raw)
    if isinstance(value, float):
        return None
    return value


def parse_progress(raw: object) -> int | None:
    """Return raw as a whole percentage clamped to 0..100, or None."""
    value = parse_number(raw)
    if value is None:
        return None
    clamped = max(PROGRESS_MIN, min(PROGRESS_MAX, value))
    return int(round(clamped))


def parse_flag(raw: object) -> bool | None:
    """Return a tri-state boolean from a JSON scalar.

    true/false pass through; 1/0 and "1"/"0"/"true"/"false" are accepted;
    anything else (including null) is None.
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int):
        return {1: True, 0: False}.get(raw)
    if isinstance(raw, str):
        return {"1": True, "true": True, "0": False, "false": False}.get(
            raw.strip().lower()
        )
    return None


def clean_text(raw: object) -> str | None:
    """Return raw unchanged when it is a non-blank string, else None."""
    if not isinstance(raw, str) or not raw.strip():
        return None
    return raw
