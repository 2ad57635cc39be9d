from __future__ import annotations

from typing import TypeAlias, TypeGuard

JsonScalar: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonScalar | dict[str, "JsonValue"] | list["JsonValue"]
JsonDict: TypeAlias = dict[str, JsonValue]


def is_dict(value: object) -> TypeGuard[dict[object, object]]:
    return isinstance(value, dict)


def is_list(value: object) -> TypeGuard[list[object]]:
    return isinstance(value, list)


def coerce_json_value(value: object) -> JsonValue:
    if is_dict(value):
        return {str(k): coerce_json_value(v) for k, v in value.items()}
    if is_list(value):
        return [coerce_json_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def as_json_dict(value: object) -> JsonDict:
    if not is_dict(value):
        return {}
    return {str(k): coerce_json_value(v) for k, v in value.items()}


def as_str(value: object, default: str = "") -> str:
    return value if isinstance(value, str) else default


def as_str_list(value: object) -> list[str]:
    if not is_list(value):
        return []
    return [item for item in value if isinstance(item, str)]


def as_str_map(value: object) -> dict[str, str]:
    if not is_dict(value):
        return {}
    return {str(k): v for k, v in value.items() if isinstance(v, str)}


def dig_str(data: object, *keys: str, default: str = "") -> str:
    """Follow ``keys`` through nested objects and return the string found there."""
    current = data
    for key in keys:
        if not is_dict(current):
            return default
        current = current.get(key)
    return as_str(current, default)
