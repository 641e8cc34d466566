"""Shared pytest fixtures for the GeoTagCheck test suite."""

from typing import Callable, Dict, Iterable, Tuple, Union

import pytest

from tagcheck import (
    Feature,
    FeatureKind,
    RuleRegistry,
    Tags,
    ValidationEngine,
    create_default_registry,
)

TagInput = Union[Dict[str, str], Iterable[Tuple[str, str]]]


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def registry() -> RuleRegistry:
    """Registry with all default rule sets."""
    return create_default_registry()


@pytest.fixture()
def engine(registry: RuleRegistry) -> ValidationEngine:
    """Engine over the default registry."""
    return ValidationEngine(registry)


# ---------------------------------------------------------------------------
# Feature factories
# ---------------------------------------------------------------------------


def _make(kind: FeatureKind) -> Callable[..., Feature]:
    def factory(tags: TagInput, feature_id: int = 1, geometry: object = None) -> Feature:
        pairs = tags.items() if isinstance(tags, dict) else tags
        return Feature(id=feature_id, kind=kind, tags=Tags(pairs), geometry=geometry)
    return factory


@pytest.fixture()
def make_line() -> Callable[..., Feature]:
    """Factory for line features: ``make_line({"highway": "primary"})``."""
    return _make(FeatureKind.LINE)


@pytest.fixture()
def make_point() -> Callable[..., Feature]:
    """Factory for point features."""
    return _make(FeatureKind.POINT)


@pytest.fixture()
def make_area() -> Callable[..., Feature]:
    """Factory for area features."""
    return _make(FeatureKind.AREA)


@pytest.fixture()
def sample_collection() -> dict:
    """A small GeoJSON FeatureCollection with one defect per feature."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "id": 10,
                "geometry": {"type": "LineString", "coordinates": [[8.5, 47.3], [8.6, 47.4]]},
                "properties": {"highway": "secondary", "name": "Seestrasse", "maxspeed": "130 mph"},
            },
            {
                "type": "Feature",
                "id": 11,
                "geometry": {"type": "Point", "coordinates": [8.5, 47.3]},
                "properties": {"place": "village", "name": "Au", "fixme": "check name"},
            },
            {
                "type": "Feature",
                "id": 12,
                "geometry": {"type": "Polygon", "coordinates": [[[8, 47], [9, 47], [9, 48], [8, 47]]]},
                "properties": {"landuse": "meadow"},
            },
        ],
    }
