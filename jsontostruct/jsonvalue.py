"""Classification of decoded JSON values.

Python's ``json`` module hands back plain ``dict``/``list``/``str``/``int``/
``float``/``bool``/``None`` values. Everything downstream dispatches on the
closed set of kinds defined here rather than on Python types, so ``bool`` vs
``int`` and ``int`` vs ``float`` are settled in exactly one place.
"""

import math
from enum import Enum
from typing import Dict, List

JsonNode = Dict[str, 'JsonNode'] | List['JsonNode'] | str | bool | int | float | None


class JsonKind(Enum):
    """The six shapes a decoded JSON value can take."""
    NULL = 'null'
    BOOL = 'bool'
    NUMBER = 'number'
    STRING = 'string'
    ARRAY = 'array'
    OBJECT = 'object'

    @property
    def is_scalar(self) -> bool:
        return self in (JsonKind.BOOL, JsonKind.NUMBER, JsonKind.STRING)


def kind_of(value: JsonNode) -> JsonKind:
    """Classify a decoded JSON value.

    Raises:
        TypeError: if the value is not something ``json.loads`` can produce.
    """
    if value is None:
        return JsonKind.NULL
    # bool is a subclass of int, test it first
    if isinstance(value, bool):
        return JsonKind.BOOL
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, list):
        return JsonKind.ARRAY
    if isinstance(value, dict):
        return JsonKind.OBJECT
    raise TypeError(f"not a JSON value: {type(value).__name__}")


def format_number(value: float) -> str:
    """Render a JSON number the way it is shown in annotations and value counts."""
    if isinstance(value, int):
        return str(value)
    if math.isfinite(value) and value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)


def as_float(value: float) -> float:
    """A JSON number as a double; integers beyond the double range saturate to +/-inf."""
    try:
        return float(value)
    except OverflowError:
        return math.copysign(math.inf, value)
