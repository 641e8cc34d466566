"""
Place export: lists every place with its basic fields, independent of defects.

A place is a point or area carrying a place=* tag, the same features the
place rule set looks at.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional

import pandas as pd

from .base import Feature, FeatureClass, Tags
from .checkers import applies_to
from .config import DEFAULT_CONFIG, RuleConfig
from .serializer import tags_summary

PLACE_COLUMNS = ['feature_id', 'feature_kind', 'place', 'name', 'population', 'is_capital', 'tags', 'geometry']

# capital=* values marking the capital of a country
NATIONAL_CAPITAL_VALUES = ('yes', '2')


def is_capital(tags: Tags) -> bool:
    """Check if a place is the capital of a country (capital=yes or capital=2)."""
    return tags.get('capital') in NATIONAL_CAPITAL_VALUES


@dataclass(frozen=True)
class PlaceRecord:
    """One row of the place export."""
    feature_id: int
    feature_kind: str
    place: str
    name: Optional[str]
    population: Optional[str]
    is_capital: bool
    tags: str
    geometry: Any = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {column: getattr(self, column) for column in PLACE_COLUMNS}


def place_record(feature: Feature, config: RuleConfig = DEFAULT_CONFIG) -> Optional[PlaceRecord]:
    """Build the export row of a feature, or None if it is not a place."""
    if not applies_to(FeatureClass.PLACE, feature):
        return None
    tags = feature.tags
    return PlaceRecord(
        feature_id=feature.id,
        feature_kind=feature.kind.value,
        place=tags.get('place'),
        name=tags.get('name'),
        population=tags.get('population'),
        is_capital=is_capital(tags),
        tags=tags_summary(
            tags,
            exclude='place',
            max_length=config.max_field_length,
            max_tag_length=config.max_tag_length,
            separator=config.separator,
        ),
        geometry=feature.geometry,
    )


def list_places(features: Iterable[Feature], config: RuleConfig = DEFAULT_CONFIG) -> Iterator[PlaceRecord]:
    """Yield the export rows of all places, in arrival order."""
    for feature in features:
        record = place_record(feature, config)
        if record is not None:
            yield record


def places_frame(records: Iterable[PlaceRecord]) -> pd.DataFrame:
    rows: List[dict] = [r.to_dict() for r in records]
    return pd.DataFrame(rows, columns=PLACE_COLUMNS)
