"""Tests for the tagging hygiene rule set and the tag-level checker."""

from __future__ import annotations

import pytest

from tagcheck import FeatureClass, ValidationEngine
from tagcheck.checkers import check_tags
from tagcheck.config import DEFAULT_CONFIG
from tagcheck.rules import create_tagging_rule_set


@pytest.fixture()
def rule_set():
    return create_tagging_rule_set(DEFAULT_CONFIG)


def run(rule_set, feature) -> list[tuple[str, str]]:
    return [(d.category, d.focus_key) for d in check_tags(rule_set, feature)]


class TestRuleSet:
    def test_order(self, rule_set) -> None:
        assert rule_set.feature_class is FeatureClass.TAGGING
        assert rule_set.per_tag
        assert rule_set.categories == [
            "fixme",
            "key_with_space",
            "empty_k",
            "empty_v",
            "unusual_character",
            "misspelled_key",
        ]


class TestFixme:
    @pytest.mark.parametrize("key", ["fixme", "FIXME", "todo"])
    def test_fixme_keys(self, rule_set, make_point, key: str) -> None:
        assert run(rule_set, make_point({key: "check"})) == [("fixme", key)]

    def test_fixme_record(self, rule_set, make_point) -> None:
        feature = make_point({"amenity": "bench", "fixme": "check position"})
        defect = next(check_tags(rule_set, feature))
        assert defect.focus_value == "check position"
        assert defect.other_tags == "amenity=bench"

    def test_fixme_as_value_is_fine(self, rule_set, make_point) -> None:
        assert run(rule_set, make_point({"note": "fixme"})) == []


class TestKeys:
    def test_key_with_leading_space(self, engine: ValidationEngine, make_point) -> None:
        defects = list(engine.check([make_point({" name": "yes"})]))
        tied = [d.category for d in defects if d.focus_key == " name"]
        assert tied == ["key_with_space"]

    def test_key_with_tab(self, rule_set, make_point) -> None:
        assert run(rule_set, make_point({"addr:\tstreet": "Main"})) == [
            ("key_with_space", "addr:\tstreet"),
        ]

    def test_empty_key(self, rule_set, make_point) -> None:
        assert run(rule_set, make_point([("", "x")])) == [
            ("empty_k", ""),
            ("misspelled_key", ""),
        ]

    def test_empty_value(self, rule_set, make_point) -> None:
        assert run(rule_set, make_point({"name": ""})) == [("empty_v", "name")]

    @pytest.mark.parametrize("key", ["hw", "x", "k" * 51])
    def test_suspicious_key_length(self, rule_set, make_point, key: str) -> None:
        assert run(rule_set, make_point({key: "yes"})) == [("misspelled_key", key)]

    @pytest.mark.parametrize("key", ["ref", "k" * 50])
    def test_key_length_ok(self, rule_set, make_point, key: str) -> None:
        assert run(rule_set, make_point({key: "yes"})) == []


class TestUnusualCharacter:
    def test_keyword_value(self, rule_set, make_point) -> None:
        assert run(rule_set, make_point({"surface": "pavéd"})) == [("unusual_character", "surface")]

    @pytest.mark.parametrize(
        "tags",
        [
            {"name": "Zürich"},
            {"name:ru": "Москва"},
            {"official_name": "Königliche Residenz"},
            {"name": "Main St?"},
            {"addr:street": "Müllerstraße"},
            {"description": "«Old» bridge – closed"},
        ],
    )
    def test_free_text_values(self, rule_set, make_point, tags: dict) -> None:
        assert run(rule_set, make_point(tags)) == []

    def test_control_character_in_name(self, rule_set, make_point) -> None:
        assert run(rule_set, make_point({"name": "Main\tStreet"})) == [("unusual_character", "name")]


class TestOrdering:
    def test_checks_first_then_tags(self, rule_set, make_point) -> None:
        feature = make_point([("", "v1"), ("k k", "")])
        assert run(rule_set, feature) == [
            ("key_with_space", "k k"),
            ("empty_k", ""),
            ("empty_v", "k k"),
            ("misspelled_key", ""),
        ]

    def test_every_kind_is_checked(self, engine: ValidationEngine, make_point, make_line, make_area) -> None:
        features = [
            make_point({"fixme": "a"}, feature_id=1),
            make_line({"fixme": "b"}, feature_id=2),
            make_area({"fixme": "c"}, feature_id=3),
        ]
        defects = list(engine.check(features))
        assert [(d.feature_kind.value, d.feature_id) for d in defects] == [
            ("point", 1),
            ("line", 2),
            ("area", 3),
        ]
