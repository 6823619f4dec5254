"""Pairwise merging of resolved types.

This is the incremental path: every sample is turned into a type tree on its
own and folded into the running result one pair at a time. Unlike the
statistics path it does not track how often a field was present, so a field
that only one operand has is carried over as-is and not marked nullable.
"""

from typing import Any, Dict, Iterable, List, Optional

from jsontostruct.common import field_name
from jsontostruct.jsonvalue import JsonKind, kind_of
from jsontostruct.resolvedtype import FieldOrder, ResolvedType, TypeKind

_SCALAR_KINDS = {
    JsonKind.BOOL: TypeKind.BOOL,
    JsonKind.NUMBER: TypeKind.NUMBER,
    JsonKind.STRING: TypeKind.STRING,
}


def _is_null_placeholder(t: ResolvedType) -> bool:
    return t.kind is TypeKind.NULL and not t.repeated


def _dynamic(template: ResolvedType, repeated: bool = False) -> ResolvedType:
    return ResolvedType(template.name, TypeKind.DYNAMIC, repeated=repeated, json_key=template.json_key)


def _renamed(source: ResolvedType, template: ResolvedType) -> ResolvedType:
    result = source.copy()
    result.name = template.name
    result.json_key = template.json_key
    return result


def merge_types(a: ResolvedType, b: ResolvedType) -> ResolvedType:
    """
    Merge two resolved types into a new one; neither operand is modified.

    * a null placeholder yields the other operand, marked nullable;
    * arrays merge their element types, an empty array yields the other side;
    * records take the union of their fields, merging shared fields and
      appending fields new to ``b`` after those of ``a``;
    * equal kinds stay, everything else degrades to dynamic.

    The result keeps the name and serialization key of ``a``.
    """
    if _is_null_placeholder(a):
        result = _renamed(b, a)
        if b.kind not in (TypeKind.NULL, TypeKind.DYNAMIC):
            result.nullable = True
        return result
    if _is_null_placeholder(b):
        result = a.copy()
        if a.kind not in (TypeKind.NULL, TypeKind.DYNAMIC):
            result.nullable = True
        return result
    if a.repeated != b.repeated:
        return _dynamic(a)
    if a.repeated:
        if a.kind is TypeKind.NULL:
            return _renamed(b, a)
        if b.kind is TypeKind.NULL:
            return a.copy()
    if a.kind is not b.kind or a.kind is TypeKind.DYNAMIC:
        return _dynamic(a, a.repeated)

    result = a.copy()
    result.nullable = a.nullable or b.nullable
    result.occurrences = a.occurrences + b.occurrences
    if result.kind is TypeKind.RECORD:
        result.children = _merge_children(result.children, b.children)
    return result


def _merge_children(base: List[ResolvedType], other: List[ResolvedType]) -> List[ResolvedType]:
    merged = list(base)
    positions = {child.name: i for i, child in enumerate(merged)}
    for child in other:
        index = positions.get(child.name)
        if index is None:
            positions[child.name] = len(merged)
            merged.append(child.copy())
        else:
            merged[index] = merge_types(merged[index], child)
    return merged


def merge_all(types: Iterable[ResolvedType]) -> Optional[ResolvedType]:
    """Fold a sequence of types left to right; ``None`` for an empty sequence."""
    result: Optional[ResolvedType] = None
    for t in types:
        result = t if result is None else merge_types(result, t)
    return result


def type_from_value(name: str, value: Any, field_order: FieldOrder = FieldOrder.ALPHABETICAL) -> ResolvedType:
    """
    Build the resolved type of a single JSON value.

    Object keys are emitted alphabetically for ``FieldOrder.ALPHABETICAL`` and
    in document order otherwise (a single value carries no frequencies).
    Arrays merge the types of all of their elements.
    """
    kind = kind_of(value)
    if kind is JsonKind.NULL:
        return ResolvedType(name, TypeKind.NULL)
    if kind is JsonKind.OBJECT:
        return ResolvedType(name, TypeKind.RECORD, children=_fields_from_object(value, field_order))
    if kind is JsonKind.ARRAY:
        element = merge_all(type_from_value(name, item, field_order) for item in value)
        if element is None:
            return ResolvedType(name, TypeKind.NULL, repeated=True)
        if element.repeated:
            return ResolvedType(name, TypeKind.ARRAY, repeated=True)
        return ResolvedType(name, element.kind, repeated=True, children=element.children)
    return ResolvedType(name, _SCALAR_KINDS[kind])


def _fields_from_object(obj: Dict[str, Any], field_order: FieldOrder) -> List[ResolvedType]:
    keys = sorted(obj) if field_order is FieldOrder.ALPHABETICAL else list(obj)
    fields: Dict[str, ResolvedType] = {}
    for key in keys:
        name = field_name(key)
        typ = type_from_value(name, obj[key], field_order)
        if name != key:
            typ.json_key = key
        if name in fields:
            # two keys normalizing to the same identifier share one field
            fields[name] = merge_types(fields[name], typ)
        else:
            fields[name] = typ
    return list(fields.values())
