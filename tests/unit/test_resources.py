"""Unit tests for stackmodules/resources.py"""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "fixtures"))

from snapshot_samples import function, record, topic
from stackmodules.resources import ResourceRecord, build_index, lookup


class TestResourceRecordName(unittest.TestCase):
    """Test ResourceRecord.name derivation."""

    def test_name_from_urn(self):
        res = topic("countDown")
        self.assertEqual(res.name, "countDown")

    def test_name_from_urn_name_input(self):
        res = ResourceRecord(urn="", type="aws:sns/topic:Topic", id="t1", inputs={"urnName": "alerts"})
        self.assertEqual(res.name, "alerts")

    def test_name_falls_back_to_id(self):
        res = ResourceRecord(urn="", type="aws:sns/topic:Topic", id="t1")
        self.assertEqual(res.name, "t1")

    def test_non_string_properties_read_as_empty(self):
        res = ResourceRecord(urn="", type="x", inputs={"stageName": 3}, outputs={"invokeUrl": None})
        self.assertEqual(res.input_str("stageName"), "")
        self.assertEqual(res.output_str("invokeUrl"), "")
        self.assertEqual(res.input_str("missing"), "")


class TestResourceRecordImmutability(unittest.TestCase):
    """Records are read-only once captured."""

    def test_property_maps_read_only(self):
        res = function("worker")
        with self.assertRaises(TypeError):
            res.inputs["name"] = "other"
        with self.assertRaises(TypeError):
            res.outputs["arn"] = "arn:aws:lambda:us-west-2:123456789012:function:other"

    def test_source_dict_is_copied(self):
        inputs = {"scheduleExpression": "rate(1 minute)"}
        res = ResourceRecord(urn="", type="aws:cloudwatch/eventRule:EventRule", inputs=inputs)
        inputs["scheduleExpression"] = "rate(1 hour)"
        self.assertEqual(res.input_str("scheduleExpression"), "rate(1 minute)")

    def test_hashable(self):
        a = function("worker", function_id="w-1")
        b = function("worker", function_id="w-1")
        self.assertEqual(a, b)
        self.assertEqual(len({a, b}), 1)


class TestBuildIndex(unittest.TestCase):
    """Test build_index() and lookup()."""

    def test_lookup_by_type_and_id(self):
        fn = function("worker", function_id="worker-123")
        tp = topic("jobs")
        index = build_index([fn, tp])
        self.assertIs(lookup(index, "aws:lambda/function:Function", "worker-123"), fn)
        self.assertIs(lookup(index, "aws:sns/topic:Topic", tp.id), tp)

    def test_same_id_different_type_kept_apart(self):
        a = record("aws:sns/topic:Topic", "a", id="shared")
        b = record("aws:dynamodb/table:Table", "b", id="shared")
        index = build_index([a, b])
        self.assertEqual(len(index), 2)

    def test_duplicate_key_last_write_wins(self):
        first = record("aws:sns/topic:Topic", "first", id="dup")
        second = record("aws:sns/topic:Topic", "second", id="dup")
        index = build_index([first, second])
        self.assertEqual(len(index), 1)
        self.assertIs(lookup(index, "aws:sns/topic:Topic", "dup"), second)

    def test_missing_key_returns_none(self):
        index = build_index([])
        self.assertIsNone(lookup(index, "aws:sns/topic:Topic", "nope"))


if __name__ == "__main__":
    unittest.main()
