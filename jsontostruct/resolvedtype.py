"""The schema tree produced by inference and consumed by renderers."""

import copy
from enum import Enum
from typing import Any, Dict, List, Optional

from jsontostruct.fieldstats import FieldStat


class TypeKind(Enum):
    """Kind of a resolved schema node."""
    NULL = 'null'
    BOOL = 'bool'
    NUMBER = 'number'
    STRING = 'string'
    RECORD = 'record'
    # nested array whose element type is not inferred further
    ARRAY = 'array'
    DYNAMIC = 'dynamic'


class FieldOrder(Enum):
    """Order in which record fields are emitted."""
    ALPHABETICAL = 'alphabetical'
    ENCOUNTER = 'encounter'
    COMMON_FIRST = 'common-first'
    RARE_FIRST = 'rare-first'


class ResolvedType:
    """
    One node of the inferred schema.

    Records carry their fields in ``children`` until the struct designator
    replaces them with a reference (``ref``) to a shared definition; a node
    never holds both. ``json_key`` is only set when the serialization key
    differs from ``name``. ``stat``/``stat_total`` are optional and only feed
    annotations. ``occurrences`` counts how many times the input held a
    value at this position.
    """

    def __init__(self, name: str, kind: TypeKind, repeated: bool = False, nullable: bool = False,
                 children: Optional[List['ResolvedType']] = None, json_key: Optional[str] = None,
                 ref: Optional[str] = None, stat: Optional[FieldStat] = None, stat_total: int = 0,
                 occurrences: int = 1):
        self.name = name
        self.kind = kind
        self.repeated = repeated
        self.nullable = nullable
        self.children: List['ResolvedType'] = children if children is not None else []
        self.json_key = json_key
        self.ref = ref
        self.stat = stat
        self.stat_total = stat_total
        self.occurrences = occurrences

    @property
    def is_record(self) -> bool:
        return self.kind is TypeKind.RECORD

    @property
    def serialization_key(self) -> str:
        return self.json_key if self.json_key is not None else self.name

    def child(self, name: str) -> Optional['ResolvedType']:
        """Return the child field with the given name, if any."""
        return next((c for c in self.children if c.name == name), None)

    def copy(self) -> 'ResolvedType':
        """Deep copy of the node and its children; statistics are shared."""
        copied = copy.copy(self)
        copied.children = [c.copy() for c in self.children]
        return copied

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation used for comparisons and debugging output."""
        result: Dict[str, Any] = {'name': self.name, 'kind': self.kind.value}
        if self.repeated:
            result['repeated'] = True
        if self.nullable:
            result['nullable'] = True
        if self.json_key is not None:
            result['json_key'] = self.json_key
        if self.ref is not None:
            result['ref'] = self.ref
        if self.children:
            result['children'] = [c.to_dict() for c in self.children]
        return result

    def __repr__(self) -> str:
        return f"ResolvedType({self.to_dict()!r})"
