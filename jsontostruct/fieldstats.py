"""Running per-field statistics over a stream of JSON objects.

A ``StructStats`` collects observations for one nesting level. Nested
objects are not reduced here: they are captured verbatim on the field and
re-accumulated into a fresh ``StructStats`` by the resolver, which is how a
nested schema ends up unioned over every sample rather than taken from one.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Tuple

from jsontostruct.common import field_name
from jsontostruct.jsonvalue import JsonKind, as_float, format_number, kind_of

logger = logging.getLogger(__name__)

# Distinct scalar values remembered per field.
DEFAULT_PROBE_LIMIT = 100

NULL_LABEL = 'null'
RECORD_LABEL = 'record'
DYNAMIC_LABEL = 'dynamic'
ARRAY_PREFIX = '[]'

_SCALAR_LABELS = {
    JsonKind.BOOL: 'bool',
    JsonKind.NUMBER: 'number',
    JsonKind.STRING: 'string',
}


def type_label(kind: JsonKind) -> str:
    """Histogram label for a non-array value of the given kind."""
    if kind is JsonKind.NULL:
        return NULL_LABEL
    if kind is JsonKind.OBJECT:
        return RECORD_LABEL
    if kind is JsonKind.ARRAY:
        return 'array'
    return _SCALAR_LABELS[kind]


def array_label(items: List[Any]) -> str:
    """Histogram label for an array, classified by its first element."""
    if not items:
        return ARRAY_PREFIX + DYNAMIC_LABEL
    first = kind_of(items[0])
    if first is JsonKind.NULL:
        return ARRAY_PREFIX + DYNAMIC_LABEL
    return ARRAY_PREFIX + type_label(first)


def probe_key(value: Any) -> str:
    """Key under which a scalar value is counted in the per-field value counts."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return format_number(value)
    return value


class FieldStat:
    """Statistics for one normalized field name at one nesting level."""

    def __init__(self, key: str, first_seen: int, probe_limit: int = DEFAULT_PROBE_LIMIT):
        self.key = key
        self.first_seen = first_seen
        self.probe_limit = probe_limit
        self.types: Counter = Counter()
        self.total_count = 0
        self.nested_objects: List[Dict[str, Any]] = []
        self.numeric_values: List[float] = []
        self.values: Dict[str, int] = {}
        self.probe_saturated = False

    @property
    def value_order(self) -> List[str]:
        """Probed values in first-seen order."""
        return list(self.values)

    @property
    def null_count(self) -> int:
        return self.types.get(NULL_LABEL, 0)

    @property
    def non_null_count(self) -> int:
        return self.total_count - self.null_count

    def observe(self, value: Any, kind: JsonKind) -> None:
        """Record one occurrence of the field holding ``value``."""
        self.total_count += 1
        if kind is JsonKind.OBJECT:
            self.types[RECORD_LABEL] += 1
            self.nested_objects.append(value)
        elif kind is JsonKind.ARRAY:
            label = array_label(value)
            self.types[label] += 1
            # only the first element is captured, later elements are not unioned
            if label == ARRAY_PREFIX + RECORD_LABEL:
                self.nested_objects.append(value[0])
        elif kind is JsonKind.NULL:
            self.types[NULL_LABEL] += 1
        else:
            self.types[_SCALAR_LABELS[kind]] += 1
            if kind is JsonKind.NUMBER:
                self.numeric_values.append(as_float(value))
            self._probe(probe_key(value))

    def _probe(self, key: str) -> None:
        if key in self.values:
            self.values[key] += 1
        elif len(self.values) < self.probe_limit:
            self.values[key] = 1
        else:
            self.probe_saturated = True

    def __repr__(self) -> str:
        return f"FieldStat(key={self.key!r}, total={self.total_count}, types={dict(self.types)})"


class StructStats:
    """Field statistics for every object sample seen at one nesting level."""

    def __init__(self, probe_limit: int = DEFAULT_PROBE_LIMIT):
        self.probe_limit = probe_limit
        self.fields: Dict[str, FieldStat] = {}
        self.total_samples = 0
        self._encounters = 0

    def observe(self, key: str, value: Any) -> None:
        """Record one key/value pair of the current sample."""
        self._observe(field_name(key), key, value, kind_of(value))

    def _observe(self, name: str, key: str, value: Any, kind: JsonKind) -> None:
        stat = self.fields.get(name)
        if stat is None:
            stat = FieldStat(key, self._encounters, self.probe_limit)
            self._encounters += 1
            self.fields[name] = stat
        stat.observe(value, kind)

    def add_sample(self, sample: Dict[str, Any]) -> None:
        """
        Accumulate one object sample.

        Every value is classified before anything is recorded, so a sample
        that fails classification leaves the statistics untouched.

        Raises:
            TypeError: if the sample is not an object or holds a value that is
                not JSON.
        """
        if not isinstance(sample, dict):
            raise TypeError(f"sample must be a JSON object, got {type(sample).__name__}")
        pending: List[Tuple[str, str, Any, JsonKind]] = []
        for key, value in sample.items():
            kind = kind_of(value)
            if kind is JsonKind.ARRAY and value:
                kind_of(value[0])
            pending.append((field_name(key), key, value, kind))
        for name, key, value, kind in pending:
            self._observe(name, key, value, kind)
        self.total_samples += 1

    @classmethod
    def from_samples(cls, samples: List[Dict[str, Any]], probe_limit: int = DEFAULT_PROBE_LIMIT) -> 'StructStats':
        """Build statistics for a list of object samples."""
        stats = cls(probe_limit)
        for sample in samples:
            stats.add_sample(sample)
        return stats

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        return f"StructStats(samples={self.total_samples}, fields={list(self.fields)})"
