"""Scalar coercions shared by the models and the wire codecs.

JSON decoders hand back numbers as floats and identifiers in whatever form
the API chose; these helpers normalise them deterministically so encode and
decode agree.
"""

from __future__ import annotations

import json
from typing import Any


def to_str(value: Any) -> str:
    """Render a wire value as the string Terraform-style state expects.

    ``None`` becomes ``""``, integral floats lose their fractional part
    (``42.0`` -> ``"42"``), booleans are lower-case, and containers are
    rendered as compact JSON with sorted keys.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, separators=(",", ":"))
    return str(value)


def to_int(value: Any) -> Any:
    """Best-effort integer coercion for numeric identifiers.

    Returns the input unchanged when it cannot be read as an integer, so the
    caller's own validation reports the bad value.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lstrip("-").isdigit():
            return int(stripped)
    return value


def empty_to_none(value: Any) -> Any:
    if isinstance(value, str) and value == "":
        return None
    return value
