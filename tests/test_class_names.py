"""Tests for the class-name text file and category-name JSON readers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from densenet_training.data.class_names import load_category_names, load_class_names


class TestLoadClassNames:
    def test_returns_names_in_file_order(self, tmp_path: Path) -> None:
        path = tmp_path / "names.txt"
        path.write_text("tulip\ndaisy\nsunflower\n")
        assert load_class_names(path, 3) == ["tulip", "daisy", "sunflower"]

    def test_short_and_blank_lines_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "names.txt"
        path.write_text("\nbluebell\nab\n  \nx\ncrocus\n\n")
        assert load_class_names(path, 2) == ["bluebell", "crocus"]

    def test_three_character_name_kept(self, tmp_path: Path) -> None:
        path = tmp_path / "names.txt"
        path.write_text("iris\nfoo\n")
        assert load_class_names(path, 2) == ["iris", "foo"]

    def test_count_mismatch_exits_with_status_1(self, tmp_path: Path) -> None:
        path = tmp_path / "names.txt"
        path.write_text("tulip\ndaisy\n")
        with pytest.raises(SystemExit) as exc_info:
            load_class_names(path, 17)
        assert exc_info.value.code == 1

    def test_too_many_names_exits(self, tmp_path: Path) -> None:
        path = tmp_path / "names.txt"
        path.write_text("tulip\ndaisy\niris\n")
        with pytest.raises(SystemExit) as exc_info:
            load_class_names(path, 2)
        assert exc_info.value.code == 1

    def test_missing_file_exits_with_status_1(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            load_class_names(tmp_path / "missing.txt", 17)
        assert exc_info.value.code == 1


    def test_undecodable_file_exits_with_status_1(self, tmp_path: Path) -> None:
        path = tmp_path / "names.txt"
        path.write_bytes(b"\xff\xfe\xfa tulip\n\xc3\x28 daisy\n")
        with pytest.raises(SystemExit) as exc_info:
            load_class_names(path, 2)
        assert exc_info.value.code == 1


class TestLoadCategoryNames:
    def test_keys_become_ints(self, tmp_path: Path) -> None:
        path = tmp_path / "cat_to_name.json"
        path.write_text(json.dumps({"1": "pink primrose", "21": "fire lily"}))
        assert load_category_names(path) == {1: "pink primrose", 21: "fire lily"}

    def test_missing_file_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            load_category_names(tmp_path / "nope.json")
        assert exc_info.value.code == 1

    def test_malformed_json_exits(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(SystemExit):
            load_category_names(path)
