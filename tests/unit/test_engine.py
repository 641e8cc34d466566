"""Tests for the rule registry and the validation engine (dispatch facade)."""

from __future__ import annotations

import pytest

from tagcheck import (
    DEFAULT_CONFIG,
    FeatureClass,
    FeatureContractError,
    ListSink,
    RuleConfig,
    RuleRegistry,
    ValidationEngine,
    create_default_registry,
)
from tagcheck.rules import create_highway_rule_set


class TestRegistry:
    def test_default_rule_sets(self, registry: RuleRegistry) -> None:
        classes = [rs.feature_class for rs in registry.get_all_rule_sets()]
        assert classes == [FeatureClass.HIGHWAY, FeatureClass.PLACE, FeatureClass.TAGGING]

    def test_categories(self, registry: RuleRegistry) -> None:
        categories = registry.get_categories()
        assert categories[0] == "lanes"
        assert categories[-1] == "misspelled_key"
        assert len(categories) == len(set(categories)) == 17

    def test_documentation(self, registry: RuleRegistry) -> None:
        docs = registry.get_documentation()
        assert [d["feature_class"] for d in docs] == ["highway", "place", "tagging"]
        assert docs[0]["checks"][4]["category"] == "maxspeed"
        assert docs[2]["per_tag"] is True

    def test_register_replaces(self, registry: RuleRegistry) -> None:
        config = RuleConfig(known_highways=frozenset({"busway"}))
        replacement = create_highway_rule_set(config)
        registry.register(replacement)
        assert registry.get_rule_set(FeatureClass.HIGHWAY) is replacement

    def test_missing_rule_set(self) -> None:
        assert RuleRegistry().get_rule_set(FeatureClass.PLACE) is None


class TestClassify:
    def test_road(self, engine: ValidationEngine, make_line) -> None:
        feature = make_line({"highway": "primary"})
        assert engine.classify(feature) == [FeatureClass.HIGHWAY, FeatureClass.TAGGING]

    def test_place_point_and_area(self, engine: ValidationEngine, make_point, make_area) -> None:
        expected = [FeatureClass.PLACE, FeatureClass.TAGGING]
        assert engine.classify(make_point({"place": "city"})) == expected
        assert engine.classify(make_area({"place": "city"})) == expected

    def test_plain_feature(self, engine: ValidationEngine, make_point) -> None:
        assert engine.classify(make_point({"highway": "crossing"})) == [FeatureClass.TAGGING]

    def test_unregistered_class_is_skipped(self, make_line) -> None:
        registry = RuleRegistry()
        registry.register(create_highway_rule_set(DEFAULT_CONFIG))
        engine = ValidationEngine(registry)
        feature = make_line({"highway": "road", "fixme": "x"})
        assert engine.classify(feature) == [FeatureClass.HIGHWAY]
        assert [d.category for d in engine.check([feature])] == ["road", "type_unknown"]


class TestDispatch:
    def test_checker_order(self, engine: ValidationEngine, make_line) -> None:
        feature = make_line({"highway": "road", "fixme": "classify"})
        sink = ListSink()
        count = engine.dispatch(feature, sink)
        assert count == 3
        assert [d.category for d in sink] == ["road", "type_unknown", "fixme"]

    def test_kind_entry_points(self, engine: ValidationEngine, make_point, make_line, make_area) -> None:
        sink = ListSink()
        assert engine.point(make_point({"fixme": "x"}), sink) == 1
        assert engine.line(make_line({"highway": "road"}), sink) == 2
        assert engine.area(make_area({"place": "town", "name": "X"}), sink) == 0
        assert len(sink) == 3

    def test_kind_mismatch(self, engine: ValidationEngine, make_point) -> None:
        with pytest.raises(FeatureContractError) as exc_info:
            engine.line(make_point({"highway": "primary"}, feature_id=7), ListSink())
        assert exc_info.value.feature_id == 7

    def test_idempotent(self, engine: ValidationEngine, make_point, make_line) -> None:
        geometry = {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}
        features = [
            make_line({"highway": "primary", "maxspeed": "130 mph"}, feature_id=1, geometry=geometry),
            make_point({"place": "vilage", " name": "x"}, feature_id=2),
            make_line({"highway": "residential", "name": "Elm"}, feature_id=3),
        ]
        first = ListSink()
        second = ListSink()
        engine.run(features, first)
        engine.run(features, second)
        assert first.defects == second.defects
        assert [d.to_dict() for d in first] == [d.to_dict() for d in second]

    def test_features_in_arrival_order(self, engine: ValidationEngine, make_point) -> None:
        features = [make_point({"todo": "x"}, feature_id=i) for i in (5, 3, 9)]
        assert [d.feature_id for d in engine.check(features)] == [5, 3, 9]


class TestRunSummary:
    def test_counts(self, engine: ValidationEngine, make_point, make_line) -> None:
        features = [
            make_line({"highway": "road"}, feature_id=1),
            make_point({"amenity": "bench"}, feature_id=1),
            make_point({"fixme": "x"}, feature_id=2),
        ]
        summary = engine.run(features, ListSink())
        assert summary.feature_count == 3
        assert summary.defect_count == 3
        assert summary.clean_features == 1
        assert summary.to_dict() == {
            "feature_count": 3,
            "defect_count": 3,
            "clean_features": 1,
            "features_by_kind": {"line": 1, "point": 2},
            "defects_by_category": {"road": 1, "type_unknown": 1, "fixme": 1},
        }

    def test_contract_error_aborts_run(self, engine: ValidationEngine, make_point) -> None:
        def stream():
            yield make_point({"fixme": "x"}, feature_id=1)
            raise FeatureContractError("broken input", feature_id=2)

        sink = ListSink()
        with pytest.raises(FeatureContractError):
            engine.run(stream(), sink)
        assert len(sink) == 1


class TestConfiguredEngine:
    def test_whitelist_from_config(self, make_line) -> None:
        config = RuleConfig.from_options({"known_highways": list(DEFAULT_CONFIG.known_highways) + ["busway"]})
        engine = ValidationEngine(create_default_registry(config), config)
        assert len(engine.check([make_line({"highway": "busway"})])) == 0

    def test_field_length_from_config(self, make_line) -> None:
        config = RuleConfig(max_field_length=20)
        engine = ValidationEngine(create_default_registry(config), config)
        road = make_line({"highway": "road", "surface": "asphalt", "smoothness": "good"})
        defect = next(iter(engine.check([road])))
        assert defect.other_tags == "highway=road"
