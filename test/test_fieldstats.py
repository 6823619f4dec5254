"""Tests for per-field statistics accumulation."""

import itertools
import math
import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from jsontostruct.fieldstats import FieldStat, StructStats, array_label, probe_key
from jsontostruct.jsonvalue import JsonKind


def counts(stats):
    return {name: (dict(stat.types), stat.total_count, dict(stat.values)) for name, stat in stats.fields.items()}


class TestStructStats(unittest.TestCase):
    """Test cases for StructStats."""

    def test_type_histogram(self):
        stats = StructStats.from_samples([{"a": 1, "b": None}, {"a": "x"}])
        self.assertEqual(stats.total_samples, 2)
        self.assertEqual(dict(stats.fields["A"].types), {"number": 1, "string": 1})
        self.assertEqual(stats.fields["B"].null_count, 1)
        self.assertEqual(stats.fields["B"].non_null_count, 0)
        self.assertEqual(len(stats), 2)

    def test_keys_are_normalized(self):
        stats = StructStats.from_samples([{"user_id": 1}, {"user_id": 2}])
        self.assertEqual(list(stats.fields), ["UserID"])
        self.assertEqual(stats.fields["UserID"].key, "user_id")
        self.assertEqual(stats.fields["UserID"].total_count, 2)

    def test_permutation_invariance(self):
        samples = [
            {"a": 1, "b": "x", "c": None},
            {"c": {"d": 1}, "a": 2.5},
            {"b": [1, 2], "a": True},
        ]
        expected = counts(StructStats.from_samples(samples))
        for perm in itertools.permutations(samples):
            shuffled = [dict(reversed(list(s.items()))) for s in perm]
            self.assertEqual(counts(StructStats.from_samples(shuffled)), expected)

    def test_first_seen_order(self):
        stats = StructStats.from_samples([{"b": 1}, {"a": 1, "b": 2}, {"c": 3}])
        self.assertEqual([stats.fields[n].first_seen for n in ("B", "A", "C")], [0, 1, 2])

    def test_nested_objects_are_captured(self):
        stats = StructStats.from_samples([{"u": {"x": 1}}, {"u": {"y": 2}}])
        self.assertEqual(stats.fields["U"].nested_objects, [{"x": 1}, {"y": 2}])
        self.assertEqual(dict(stats.fields["U"].types), {"record": 2})

    def test_array_first_element_only(self):
        stats = StructStats.from_samples([{"tags": ["a", 1]}, {"items": [{"x": 1}, {"y": 2}]}])
        self.assertEqual(dict(stats.fields["Tags"].types), {"[]string": 1})
        self.assertEqual(stats.fields["Items"].nested_objects, [{"x": 1}])

    def test_bool_is_not_number(self):
        stats = StructStats.from_samples([{"flag": True}, {"flag": False}])
        stat = stats.fields["Flag"]
        self.assertEqual(dict(stat.types), {"bool": 2})
        self.assertEqual(stat.value_order, ["true", "false"])
        self.assertEqual(stat.numeric_values, [])

    def test_numeric_values(self):
        stats = StructStats.from_samples([{"n": 1}, {"n": 2.5}, {"n": None}])
        self.assertEqual(stats.fields["N"].numeric_values, [1.0, 2.5])

    def test_integer_beyond_double_range(self):
        big = 10 ** 400
        stats = StructStats.from_samples([{"n": big}, {"n": -big}, {"n": 1}])
        stat = stats.fields["N"]
        self.assertEqual(dict(stat.types), {"number": 3})
        self.assertEqual(stat.numeric_values, [math.inf, -math.inf, 1.0])
        self.assertEqual(len(stat.values), 3)

    def test_value_counts_are_capped(self):
        stats = StructStats(probe_limit=3)
        for i in range(5):
            stats.add_sample({"v": i})
        stat = stats.fields["V"]
        self.assertEqual(len(stat.values), 3)
        self.assertTrue(stat.probe_saturated)
        self.assertEqual(stat.total_count, 5)

    def test_value_counts_repeat_after_saturation(self):
        stats = StructStats(probe_limit=1)
        for v in ["a", "b", "a"]:
            stats.add_sample({"v": v})
        self.assertEqual(stats.fields["V"].values, {"a": 2})

    def test_failed_sample_leaves_stats_untouched(self):
        stats = StructStats()
        stats.add_sample({"a": 1})
        with self.assertRaises(TypeError):
            stats.add_sample({"a": 2, "b": object()})
        with self.assertRaises(TypeError):
            stats.add_sample({"c": [object()]})
        self.assertEqual(stats.total_samples, 1)
        self.assertEqual(list(stats.fields), ["A"])
        self.assertEqual(stats.fields["A"].total_count, 1)

    def test_non_object_sample_rejected(self):
        with self.assertRaises(TypeError):
            StructStats().add_sample([1, 2])

    def test_empty_object(self):
        stats = StructStats.from_samples([{}])
        self.assertEqual(stats.total_samples, 1)
        self.assertEqual(len(stats), 0)


class TestLabels(unittest.TestCase):

    def test_array_label(self):
        self.assertEqual(array_label([]), "[]dynamic")
        self.assertEqual(array_label([None, 1]), "[]dynamic")
        self.assertEqual(array_label([1, "a"]), "[]number")
        self.assertEqual(array_label([[1]]), "[]array")
        self.assertEqual(array_label([{}]), "[]record")

    def test_probe_key(self):
        self.assertEqual(probe_key(True), "true")
        self.assertEqual(probe_key(2.0), "2")
        self.assertEqual(probe_key("x"), "x")

    def test_field_stat_observe(self):
        stat = FieldStat("k", 0)
        stat.observe("x", JsonKind.STRING)
        stat.observe(None, JsonKind.NULL)
        self.assertEqual(stat.total_count, 2)
        self.assertEqual(stat.null_count, 1)
        self.assertEqual(stat.values, {"x": 1})


if __name__ == '__main__':
    unittest.main()
