"""
Validation engine - routes features to their checkers and forwards defects.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .base import Defect, Feature, FeatureClass, FeatureContractError, FeatureKind, RuleSet
from .checkers import applies_to, check_feature, check_tags
from .config import DEFAULT_CONFIG, RuleConfig
from .sinks import DefectSink, ListSink

logger = logging.getLogger(__name__)

# Order in which the checkers of a feature run
DISPATCH_ORDER = (FeatureClass.HIGHWAY, FeatureClass.PLACE, FeatureClass.TAGGING)


class RuleRegistry:
    """Holds the rule set of every feature class."""

    def __init__(self):
        self._rule_sets: Dict[FeatureClass, RuleSet] = {}

    def register(self, rule_set: RuleSet) -> None:
        """Register a rule set, replacing the one of the same feature class."""
        self._rule_sets[rule_set.feature_class] = rule_set

    def get_rule_set(self, feature_class: FeatureClass) -> Optional[RuleSet]:
        """Get the rule set of a feature class."""
        return self._rule_sets.get(feature_class)

    def get_all_rule_sets(self) -> List[RuleSet]:
        """Get all registered rule sets in dispatch order."""
        return [self._rule_sets[fc] for fc in DISPATCH_ORDER if fc in self._rule_sets]

    def get_categories(self) -> List[str]:
        """Get all output categories in rule set order."""
        return [c for rs in self.get_all_rule_sets() for c in rs.categories]

    def get_documentation(self) -> List[dict]:
        """Generate documentation for all rule sets."""
        return [rs.to_dict() for rs in self.get_all_rule_sets()]


@dataclass
class RunSummary:
    """Statistics of a validation run."""
    feature_count: int = 0
    defect_count: int = 0
    features_by_kind: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    defects_by_category: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    flagged_features: Set[Tuple[FeatureKind, int]] = field(default_factory=set, repr=False)

    @property
    def clean_features(self) -> int:
        return self.feature_count - len(self.flagged_features)

    def add_feature(self, feature: Feature) -> None:
        self.feature_count += 1
        self.features_by_kind[feature.kind.value] += 1

    def add_defect(self, defect: Defect) -> None:
        self.defect_count += 1
        self.defects_by_category[defect.category] += 1
        # ids are only unique within a kind
        self.flagged_features.add((defect.feature_kind, defect.feature_id))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'feature_count': self.feature_count,
            'defect_count': self.defect_count,
            'clean_features': self.clean_features,
            'features_by_kind': dict(self.features_by_kind),
            'defects_by_category': dict(self.defects_by_category),
        }


class _CountingSink(DefectSink):
    """Forwards defects to the real sink and counts them for the summary."""

    def __init__(self, sink: DefectSink, summary: RunSummary):
        self.sink = sink
        self.summary = summary

    def write(self, defect: Defect) -> None:
        self.sink.write(defect)
        self.summary.add_defect(defect)


class ValidationEngine:
    """
    Dispatches features to the checkers of their feature classes.

    Usage:
        registry = create_default_registry()
        engine = ValidationEngine(registry)

        sink = ListSink()
        for feature in features:
            engine.dispatch(feature, sink)

    Features are processed one at a time; every defect reaches the sink
    before the next check runs. The engine keeps no state between features.
    """

    def __init__(self, registry: RuleRegistry, config: RuleConfig = DEFAULT_CONFIG):
        self.registry = registry
        self.config = config

    def classify(self, feature: Feature) -> List[FeatureClass]:
        """Return the registered feature classes a feature belongs to, in dispatch order."""
        return [
            fc for fc in DISPATCH_ORDER
            if self.registry.get_rule_set(fc) is not None and applies_to(fc, feature)
        ]

    def dispatch(self, feature: Feature, sink: DefectSink) -> int:
        """
        Run all applicable checkers on a feature.

        Returns:
            Number of defects written to the sink
        """
        count = 0
        for feature_class in self.classify(feature):
            rule_set = self.registry.get_rule_set(feature_class)
            if feature_class is FeatureClass.TAGGING:
                defects = check_tags(rule_set, feature, self.config)
            elif feature_class in (FeatureClass.HIGHWAY, FeatureClass.PLACE):
                defects = check_feature(rule_set, feature, self.config)
            else:
                raise ValueError(f"No checker for feature class {feature_class!r}")
            for defect in defects:
                sink.write(defect)
                count += 1
        return count

    def _dispatch_kind(self, feature: Feature, kind: FeatureKind, sink: DefectSink) -> int:
        if feature.kind is not kind:
            raise FeatureContractError(
                f"Expected a {kind.value} feature, got {feature.kind.value}",
                feature_id=feature.id,
            )
        return self.dispatch(feature, sink)

    def point(self, feature: Feature, sink: DefectSink) -> int:
        return self._dispatch_kind(feature, FeatureKind.POINT, sink)

    def line(self, feature: Feature, sink: DefectSink) -> int:
        return self._dispatch_kind(feature, FeatureKind.LINE, sink)

    def area(self, feature: Feature, sink: DefectSink) -> int:
        return self._dispatch_kind(feature, FeatureKind.AREA, sink)

    def run(self, features: Iterable[Feature], sink: DefectSink) -> RunSummary:
        """
        Check a stream of features in arrival order.

        A FeatureContractError raised while reading or checking a feature
        aborts the run.

        Returns:
            RunSummary with feature and defect counts
        """
        summary = RunSummary()
        counting = _CountingSink(sink, summary)
        logger.debug("Starting run with %d rule sets", len(self.registry.get_all_rule_sets()))

        for feature in features:
            summary.add_feature(feature)
            self.dispatch(feature, counting)

        logger.info(
            "Checked %d features, %d defects in %d categories",
            summary.feature_count,
            summary.defect_count,
            len(summary.defects_by_category),
        )
        return summary

    def check(self, features: Iterable[Feature]) -> ListSink:
        """Check features into a fresh in-memory sink."""
        sink = ListSink()
        self.run(features, sink)
        return sink
