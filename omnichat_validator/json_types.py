"""Helpers for inspecting decoded JSON values.

Decoded JSON is one of a small set of kinds; these helpers name the kind of a
value and check object fields while keeping "missing" and "wrong kind" apart.
"""

from collections.abc import Mapping
from enum import StrEnum
from typing import Any


class JsonKind(StrEnum):
    """Kind of a decoded JSON value."""

    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"


def kind_of(value: Any) -> JsonKind:
    """Return the JSON kind of a decoded value.

    Raises:
        TypeError: If the value cannot come out of a JSON decoder

    """
    # bool is checked before number since bool subclasses int
    if value is None:
        return JsonKind.NULL
    if isinstance(value, bool):
        return JsonKind.BOOLEAN
    if isinstance(value, int | float):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, list):
        return JsonKind.ARRAY
    if isinstance(value, Mapping):
        return JsonKind.OBJECT
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def is_kind(value: Any, kind: JsonKind) -> bool:
    """Check whether a value has the given JSON kind."""
    try:
        return kind_of(value) is kind
    except TypeError:
        return False


def check_field(
    obj: Mapping[str, Any], field: str, kind: JsonKind, *, required: bool = True
) -> str | None:
    """Check one field of a JSON object.

    Returns:
        None when the field is acceptable, otherwise a short description of
        the problem ("missing field 'x'" or "field 'x' should be ...")

    """
    if field not in obj:
        return f"missing field '{field}'" if required else None

    value = obj[field]
    if not required and value is None:
        return None
    if not is_kind(value, kind):
        try:
            actual = kind_of(value).value
        except TypeError:
            actual = type(value).__name__
        return f"field '{field}' should be {kind.value}, got {actual}"
    return None
