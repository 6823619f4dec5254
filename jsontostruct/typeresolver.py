"""Derives one type per field from accumulated field statistics."""

import logging
from typing import Callable, Dict, Tuple

from jsontostruct.fieldstats import ARRAY_PREFIX, DYNAMIC_LABEL, NULL_LABEL, FieldStat, StructStats
from jsontostruct.resolvedtype import FieldOrder, ResolvedType, TypeKind

logger = logging.getLogger(__name__)

LABEL_KINDS: Dict[str, TypeKind] = {
    'bool': TypeKind.BOOL,
    'number': TypeKind.NUMBER,
    'string': TypeKind.STRING,
    'record': TypeKind.RECORD,
    'array': TypeKind.ARRAY,
    DYNAMIC_LABEL: TypeKind.DYNAMIC,
}

# Tie-break between equally frequent labels: higher wins.
LABEL_PRECEDENCE: Dict[str, int] = {
    'record': 5,
    'string': 4,
    'number': 3,
    'bool': 2,
    'array': 1,
    DYNAMIC_LABEL: 0,
}


def dominant_label(counts: Dict[str, int]) -> str:
    """Most frequent label; ties go to the label with the higher precedence."""
    return max(counts, key=lambda label: (counts[label], LABEL_PRECEDENCE.get(label, -1), label))


def _field_sort_key(order: FieldOrder) -> Callable[[Tuple[str, FieldStat]], tuple]:
    if order is FieldOrder.ALPHABETICAL:
        return lambda item: (item[1].key, item[1].first_seen)
    if order is FieldOrder.ENCOUNTER:
        return lambda item: (item[1].first_seen,)
    if order is FieldOrder.COMMON_FIRST:
        return lambda item: (-item[1].total_count, item[1].first_seen)
    if order is FieldOrder.RARE_FIRST:
        return lambda item: (item[1].total_count, item[1].first_seen)
    raise ValueError(f"unknown field order: {order}")


class TypeResolver:
    """Turns ``StructStats`` into a ``ResolvedType`` record tree."""

    def __init__(self, field_order: FieldOrder = FieldOrder.ALPHABETICAL):
        """Initialize the resolver.

        Args:
            field_order: Order of the fields in every resolved record.
        """
        self.field_order = field_order

    def resolve(self, stats: StructStats, name: str) -> ResolvedType:
        """Resolve a nesting level into a record node named ``name``.

        Args:
            stats: Statistics of the level; read, never modified.
            name: Name of the resulting record node.

        Returns:
            A RECORD node whose children are the level's fields in the
            configured order.
        """
        items = sorted(stats.fields.items(), key=_field_sort_key(self.field_order))
        children = [self.resolve_field(field_name, stat, stats.total_samples) for field_name, stat in items]
        return ResolvedType(name, TypeKind.RECORD, children=children)

    def resolve_field(self, name: str, stat: FieldStat, level_total: int) -> ResolvedType:
        """Pick the dominant type, nullability and repetition for one field."""
        node = ResolvedType(name, TypeKind.DYNAMIC, stat=stat, stat_total=level_total,
                            json_key=stat.key if stat.key != name else None)
        non_null = {label: count for label, count in stat.types.items() if label != NULL_LABEL and count > 0}
        if not non_null:
            return node

        element_counts = {label[len(ARRAY_PREFIX):]: count for label, count in non_null.items()
                          if label.startswith(ARRAY_PREFIX)}
        if element_counts:
            if len(element_counts) != len(non_null):
                logger.debug("field %s seen both as array and as %s, resolving to dynamic",
                             stat.key, ', '.join(l for l in non_null if not l.startswith(ARRAY_PREFIX)))
                return node
            node.repeated = True
            if len(element_counts) > 1:
                # empty arrays carry no element information
                element_counts.pop(DYNAMIC_LABEL, None)
            label = dominant_label(element_counts)
        else:
            label = dominant_label(non_null)

        node.kind = LABEL_KINDS[label]
        node.nullable = stat.null_count > 0 and node.kind is not TypeKind.DYNAMIC
        node.occurrences = non_null[ARRAY_PREFIX + label] if node.repeated else non_null[label]
        if node.kind is TypeKind.RECORD:
            nested = StructStats.from_samples(stat.nested_objects, stat.probe_limit)
            node.children = self.resolve(nested, name).children
        return node
