"""
GeoTagCheck Validation Framework

A rule-based linter for tagged geodata. Reports malformed tag values
(speed and height limits, lane counts, ...), roads and places lacking
mandatory tags, and tagging hygiene problems like empty keys or
suspicious characters.

Usage:
    from tagcheck import create_default_registry, ValidationEngine, features_from_geojson

    registry = create_default_registry()
    engine = ValidationEngine(registry)

    with open('roads.geojson') as f:
        collection = json.load(f)

    sink = engine.check(features_from_geojson(collection))

    for defect in sink:
        print(defect.category, defect.feature_id, defect.focus_value)
"""

from .base import (
    Check,
    Defect,
    Feature,
    FeatureClass,
    FeatureContractError,
    FeatureKind,
    RuleSet,
    Tags,
)

from .config import (
    ConfigError,
    DEFAULT_CONFIG,
    RuleConfig,
)

from .engine import (
    RuleRegistry,
    RunSummary,
    ValidationEngine,
)

from .export import (
    PlaceRecord,
    is_capital,
    list_places,
    places_frame,
)

from .sinks import (
    DefectSink,
    ListSink,
    TableSink,
)

from .sources import (
    feature_from_geojson,
    features_from_frame,
    features_from_geojson,
)

from .rules import ALL_RULE_SETS


def create_default_registry(config: RuleConfig = DEFAULT_CONFIG) -> RuleRegistry:
    """
    Create a rule registry with all default rule sets.

    Args:
        config: Whitelists and bounds the rule sets are built with

    Returns:
        RuleRegistry with all built-in rule sets registered
    """
    registry = RuleRegistry()

    for factory in ALL_RULE_SETS:
        registry.register(factory(config))

    return registry


__all__ = [
    # Data model
    'Check',
    'Defect',
    'Feature',
    'FeatureClass',
    'FeatureContractError',
    'FeatureKind',
    'RuleSet',
    'Tags',
    # Configuration
    'ConfigError',
    'DEFAULT_CONFIG',
    'RuleConfig',
    # Engine
    'RuleRegistry',
    'RunSummary',
    'ValidationEngine',
    # Place export
    'PlaceRecord',
    'is_capital',
    'list_places',
    'places_frame',
    # Sinks and sources
    'DefectSink',
    'ListSink',
    'TableSink',
    'feature_from_geojson',
    'features_from_frame',
    'features_from_geojson',
    # Factory
    'create_default_registry',
]
