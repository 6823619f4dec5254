"""Extraction of repeated and nullable records into shared named definitions.

The designator works in two phases. The census walks the whole tree
read-only and files every candidate record into an arena, grouping arena
indices by structural signature. Only after the census is complete are the
groups rewritten, so a replacement can never hide a match elsewhere.
"""

# pylint: disable=line-too-long

import hashlib
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Set

from jsontostruct.resolvedtype import ResolvedType, TypeKind

logger = logging.getLogger(__name__)

NULLABLE_SUFFIX = ':nullable'

# Records with fewer fields stay inline unless they are nullable.
MIN_EXTRACT_FIELDS = 3

# Field name prefix -> definition name suffix used when most fields share it.
SEMANTIC_PREFIXES = {
    'St': 'Stat',
}
SEMANTIC_PREFIX_RATIO = 0.8


def has_common_prefix(fields: List[ResolvedType], prefix: str) -> bool:
    """True if at least 80% of the fields start with ``prefix``."""
    if not fields:
        return False
    count = sum(1 for f in fields if f.name.startswith(prefix))
    return count >= len(fields) * SEMANTIC_PREFIX_RATIO


class StructDesignator:
    """Factors repeated record shapes of a resolved tree into definitions."""

    def __init__(self, type_name: str):
        """
        Args:
            type_name: Name of the root type; prefixes every definition name.
        """
        self.type_name = type_name or 'Document'
        self.definitions: Dict[str, ResolvedType] = {}
        self._arena: List[ResolvedType] = []
        self._shapes: Dict[int, str] = {}

    def shape_signature(self, node: ResolvedType) -> str:
        """Sorted ``name:label`` pairs of a record's fields, nested shapes included."""
        key = id(node)
        if key not in self._shapes:
            self._shapes[key] = ','.join(sorted(f"{child.name}:{self._label(child)}" for child in node.children))
        return self._shapes[key]

    def _label(self, node: ResolvedType) -> str:
        if node.ref is not None:
            label = node.ref
        elif node.kind is TypeKind.RECORD:
            label = '{' + self.shape_signature(node) + '}'
        else:
            label = node.kind.value
        if node.nullable:
            label = '*' + label
        if node.repeated:
            label = '[]' + label
        return label

    def signature(self, node: ResolvedType) -> Optional[str]:
        """Grouping signature of a candidate record, or ``None`` if it stays inline."""
        if node.kind is not TypeKind.RECORD or node.ref is not None or not node.children:
            return None
        if node.nullable:
            return self.shape_signature(node) + NULLABLE_SUFFIX
        if len(node.children) < MIN_EXTRACT_FIELDS:
            return None
        return self.shape_signature(node)

    def census(self, root: ResolvedType) -> Dict[str, List[int]]:
        """
        Walk the tree below ``root`` in post-order and group candidates.

        Returns:
            Signature -> arena indices, in order of first occurrence. Inner
            records therefore precede the records containing them.
        """
        groups: Dict[str, List[int]] = defaultdict(list)

        def visit(node: ResolvedType, is_root: bool) -> None:
            for child in node.children:
                visit(child, False)
            if is_root:
                return
            sig = self.signature(node)
            if sig is not None:
                groups[sig].append(len(self._arena))
                self._arena.append(node)

        visit(root, True)
        return groups

    def extract(self, root: ResolvedType) -> List[ResolvedType]:
        """
        Extract shared definitions and rewrite the tree in place.

        A group's members are counted by input occurrence: a node that
        stands for a record seen in several samples counts once per sample.
        Every group with more than one occurrence and every nullable group
        becomes one non-nullable definition built from a deep copy of its
        first member; all members then reference it and lose their children.

        Returns:
            The new definitions in emission order.
        """
        self._arena = []
        self._shapes = {}
        groups = self.census(root)
        extracted: List[ResolvedType] = []
        for sig, indices in groups.items():
            occurrences = sum(max(self._arena[i].occurrences, 1) for i in indices)
            if occurrences < 2 and not sig.endswith(NULLABLE_SUFFIX):
                continue
            first = self._arena[indices[0]]
            name = self.definition_name(first, sig)
            definition = ResolvedType(name, TypeKind.RECORD, children=[c.copy() for c in first.children])
            self.definitions[name] = definition
            extracted.append(definition)
            for index in indices:
                node = self._arena[index]
                node.ref = name
                node.children = []
            logger.debug("extracted %s from %d occurrence(s)", name, len(indices))
        return extracted

    def definition_name(self, node: ResolvedType, signature: str) -> str:
        """Semantic name when the fields share a known prefix, else a checksum name."""
        for prefix, suffix in SEMANTIC_PREFIXES.items():
            if has_common_prefix(node.children, prefix):
                name = self.type_name + suffix
                if name not in self.definitions:
                    return name
        digest = hashlib.md5(signature.encode('utf-8')).hexdigest()[:8].upper()
        name = f"{self.type_name}Struct{digest}"
        taken: Set[str] = set(self.definitions)
        candidate, n = name, 2
        while candidate in taken:
            candidate = f"{name}_{n}"
            n += 1
        return candidate


def extract_repeated_structs(root: ResolvedType, type_name: str) -> List[ResolvedType]:
    """Convenience wrapper: run a fresh designator over ``root``."""
    return StructDesignator(type_name).extract(root)
