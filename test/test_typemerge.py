"""Tests for the pairwise type merge."""

import itertools
import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from jsontostruct.resolvedtype import FieldOrder, TypeKind
from jsontostruct.typemerge import merge_all, merge_types, type_from_value

SAMPLE_VALUES = [None, True, 1, 2.5, "s", {"a": 1}, {"b": "x"}, [1], ["s"], [], [{"a": 1}], [[1]]]


class TestTypeFromValue(unittest.TestCase):

    def test_scalars(self):
        self.assertIs(type_from_value("V", None).kind, TypeKind.NULL)
        self.assertIs(type_from_value("V", False).kind, TypeKind.BOOL)
        self.assertIs(type_from_value("V", 3).kind, TypeKind.NUMBER)
        self.assertIs(type_from_value("V", "x").kind, TypeKind.STRING)

    def test_object(self):
        t = type_from_value("Document", {"b": 1, "user_id": "x"})
        self.assertIs(t.kind, TypeKind.RECORD)
        self.assertEqual([c.name for c in t.children], ["B", "UserID"])
        self.assertEqual(t.child("UserID").json_key, "user_id")

    def test_document_order(self):
        t = type_from_value("Document", {"b": 1, "a": 1}, FieldOrder.ENCOUNTER)
        self.assertEqual([c.name for c in t.children], ["B", "A"])

    def test_arrays_merge_all_elements(self):
        t = type_from_value("V", [{"a": 1}, {"b": 2}])
        self.assertTrue(t.repeated)
        self.assertEqual([c.name for c in t.children], ["A", "B"])
        self.assertIs(type_from_value("V", [1, "x"]).kind, TypeKind.DYNAMIC)

    def test_empty_and_nested_arrays(self):
        empty = type_from_value("V", [])
        self.assertTrue(empty.repeated)
        self.assertIs(empty.kind, TypeKind.NULL)
        nested = type_from_value("V", [[1], [2]])
        self.assertTrue(nested.repeated)
        self.assertIs(nested.kind, TypeKind.ARRAY)

    def test_colliding_keys_share_a_field(self):
        t = type_from_value("Document", {"a_b": 1, "aB": 2})
        self.assertEqual([c.name for c in t.children], ["AB"])
        self.assertIs(t.children[0].kind, TypeKind.NUMBER)


class TestMergeTypes(unittest.TestCase):
    """Test cases for merge_types."""

    def test_kind_decision_is_symmetric(self):
        for x, y in itertools.product(SAMPLE_VALUES, repeat=2):
            with self.subTest(a=x, b=y):
                ab = merge_types(type_from_value("V", x), type_from_value("V", y))
                ba = merge_types(type_from_value("V", y), type_from_value("V", x))
                self.assertIs(ab.kind, ba.kind)
                self.assertEqual(ab.repeated, ba.repeated)
                self.assertEqual(ab.nullable, ba.nullable)

    def test_record_field_set_is_symmetric(self):
        a = type_from_value("D", {"b": 1, "a": 1}, FieldOrder.ENCOUNTER)
        b = type_from_value("D", {"c": 1, "a": "x"}, FieldOrder.ENCOUNTER)
        ab = merge_types(a, b)
        ba = merge_types(b, a)
        self.assertEqual([c.name for c in ab.children], ["B", "A", "C"])
        self.assertEqual([c.name for c in ba.children], ["C", "A", "B"])
        self.assertIs(ab.child("A").kind, TypeKind.DYNAMIC)
        self.assertIs(ba.child("A").kind, TypeKind.DYNAMIC)

    def test_null_makes_nullable(self):
        merged = merge_types(type_from_value("V", None), type_from_value("V", "x"))
        self.assertIs(merged.kind, TypeKind.STRING)
        self.assertTrue(merged.nullable)

    def test_null_and_null(self):
        merged = merge_types(type_from_value("V", None), type_from_value("V", None))
        self.assertIs(merged.kind, TypeKind.NULL)
        self.assertFalse(merged.nullable)

    def test_one_sided_field_is_not_nullable(self):
        merged = merge_types(type_from_value("D", {"a": 1}), type_from_value("D", {"b": 2}))
        self.assertFalse(merged.child("A").nullable)
        self.assertFalse(merged.child("B").nullable)

    def test_empty_array_yields_other_side(self):
        merged = merge_types(type_from_value("T", []), type_from_value("T", ["x"]))
        self.assertTrue(merged.repeated)
        self.assertIs(merged.kind, TypeKind.STRING)

    def test_array_and_scalar(self):
        merged = merge_types(type_from_value("T", [1]), type_from_value("T", 1))
        self.assertIs(merged.kind, TypeKind.DYNAMIC)
        self.assertFalse(merged.repeated)

    def test_result_keeps_first_name(self):
        merged = merge_types(type_from_value("A", None), type_from_value("B", 1))
        self.assertEqual(merged.name, "A")

    def test_operands_unchanged(self):
        a = type_from_value("D", {"x": {"y": 1}, "z": None})
        b = type_from_value("D", {"x": {"w": "s"}, "z": 3})
        before = (a.to_dict(), b.to_dict())
        merge_types(a, b)
        self.assertEqual((a.to_dict(), b.to_dict()), before)

    def test_occurrences_add_up(self):
        merged = merge_all(type_from_value("D", {"x": {"p": i}}) for i in range(3))
        self.assertEqual(merged.child("X").occurrences, 3)

    def test_merge_all_empty(self):
        self.assertIsNone(merge_all([]))


if __name__ == '__main__':
    unittest.main()
