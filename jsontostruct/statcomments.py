"""Display-only annotations derived from field statistics.

Nothing here influences the inferred schema; the text is attached to
rendered fields as comments.
"""

import json
import math
from typing import List, Sequence

from jsontostruct.fieldstats import FieldStat
from jsontostruct.resolvedtype import TypeKind

# Integral values inside this range are treated as enum-like, not continuous.
DISCRETE_RANGE = (-100, 100)
# Fewer distinct values than this are listed individually.
LOW_CARDINALITY = 10
# Observations needed before percentiles are shown.
PERCENTILE_MIN_SAMPLES = 10
MAX_VALUE_DISPLAY = 20

PERCENTILES = (0.25, 0.5, 0.75, 0.90, 0.99)


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Linear-interpolation percentile at position ``p * (n - 1)``."""
    if not sorted_values:
        raise ValueError("percentile of an empty sequence")
    index = p * (len(sorted_values) - 1)
    lower = int(index)
    upper = lower + 1
    weight = index - lower
    if upper >= len(sorted_values) or weight == 0:
        return sorted_values[lower]
    return sorted_values[lower] * (1 - weight) + sorted_values[upper] * weight


def format_value(v: float) -> str:
    if math.isfinite(v) and float(v).is_integer() and -1000000 < v < 1000000:
        return f"{v:.0f}"
    return f"{v:.2g}"


def looks_continuous(values: Sequence[float]) -> bool:
    """True if any value is fractional or outside the enum-like range."""
    low, high = DISCRETE_RANGE
    return any(not float(v).is_integer() or v < low or v > high for v in values)


def truncate(value: str) -> str:
    if len(value) > MAX_VALUE_DISPLAY:
        return value[:MAX_VALUE_DISPLAY - 3] + '...'
    return value


def numeric_range(values: Sequence[float]) -> str:
    """``range: [...]`` text; percentiles once there are enough observations."""
    ordered = sorted(values)
    lo, hi = ordered[0], ordered[-1]
    if len(ordered) >= PERCENTILE_MIN_SAMPLES:
        p25, p50, p75, p90, p99 = (format_value(percentile(ordered, p)) for p in PERCENTILES)
        return (f"range: [{format_value(lo)}, p25:{p25}, p50:{p50}, p75:{p75}, "
                f"p90:{p90}, p99:{p99}, {format_value(hi)}]")
    return f"range: [{format_value(lo)}, {format_value(hi)}]"


def value_distribution(stat: FieldStat, quote: bool) -> str:
    """``values: ...`` text listing counted values in first-seen order."""
    parts = []
    for val in stat.value_order:
        pct = stat.values[val] * 100.0 / stat.total_count
        shown = json.dumps(truncate(val), ensure_ascii=False) if quote else val
        parts.append(f"{shown}:{pct:.1f}%")
    return "values: " + ", ".join(parts)


def describe_field(stat: FieldStat, sample_count: int, kind: TypeKind) -> str:
    """
    Summarize a field's statistics as one line of annotation text.

    Args:
        stat: The field's statistics.
        sample_count: Number of object samples at the field's nesting level.
        kind: The kind the field resolved to.

    Returns:
        Comma separated annotation parts, or an empty string.
    """
    comments: List[str] = []

    if sample_count > 0:
        pct = stat.total_count * 100.0 / sample_count
        comments.append(f"seen in {pct:.1f}% ({stat.total_count}/{sample_count})")

    if len(stat.types) > 1:
        type_info = sorted(f"{label}:{count}" for label, count in stat.types.items())
        comments.append("types: " + ", ".join(type_info))

    distinct = len(stat.values)
    numeric = kind is TypeKind.NUMBER
    if numeric and len(stat.numeric_values) > 2 and looks_continuous(stat.numeric_values):
        comments.append(numeric_range(stat.numeric_values))
    elif stat.probe_saturated or distinct >= LOW_CARDINALITY:
        comments.append(_cardinality(stat))
    elif distinct > 0:
        # numbers are listed bare, every other value quoted
        comments.append(value_distribution(stat, quote=not numeric))

    return ", ".join(comments)


def _cardinality(stat: FieldStat) -> str:
    if stat.probe_saturated:
        return f"{len(stat.values)}+ unique values"
    return f"{len(stat.values)} unique values"
