"""
Tests for the class label table.
"""

import json

import pytest

from inference.labels import LabelTable


class TestLookup:
    def test_string_and_int_keys_resolve_the_same(self):
        table = LabelTable({"0": "person", 2: "car"})
        assert table.lookup(0) == "person"
        assert table.lookup(2) == "car"
        assert 0 in table and 2 in table

    def test_missing_key_falls_back(self):
        assert LabelTable({"0": "person"}).lookup(5) == "Class 5"

    def test_empty_label_falls_back(self):
        assert LabelTable({"3": ""}).lookup(3) == "Class 3"

    def test_null_label_falls_back(self):
        table = LabelTable.from_json(["person", None])
        assert table.lookup(1) == "Class 1"
        assert 1 not in table
        assert len(table) == 1

    def test_non_numeric_keys_ignored(self):
        table = LabelTable({"background": "x", "1": "bicycle"})
        assert len(table) == 1

    def test_is_read_only(self):
        table = LabelTable({"0": "person"})
        with pytest.raises(TypeError):
            table._labels[1] = "bicycle"


class TestLoad:
    def test_load_json_object(self, tmp_path):
        path = tmp_path / "labels.json"
        path.write_text(json.dumps({"0": "person", "1": "bicycle"}))
        table = LabelTable.load(path)
        assert table[1] == "bicycle"

    def test_load_json_list(self, tmp_path):
        path = tmp_path / "labels.json"
        path.write_text(json.dumps(["person", "bicycle"]))
        assert LabelTable.load(path).lookup(0) == "person"

    def test_load_text_labelmap_skips_placeholders(self, tmp_path):
        path = tmp_path / "labelmap.txt"
        path.write_text("person\nbicycle\n???\ncar\n")
        table = LabelTable.load(path)
        assert table.lookup(3) == "car"
        assert table.lookup(2) == "Class 2"

    def test_load_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LabelTable.load(tmp_path / "nope.json")

    def test_load_bad_json_payload_raises(self, tmp_path):
        path = tmp_path / "labels.json"
        path.write_text("42")
        with pytest.raises(ValueError):
            LabelTable.load(path)
