"""
Build features from GeoJSON-like mappings and from pandas DataFrames.
"""

import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

import pandas as pd

from .base import Feature, FeatureContractError, FeatureKind, Tags

GEOMETRY_KINDS = {
    'Point': FeatureKind.POINT,
    'MultiPoint': FeatureKind.POINT,
    'LineString': FeatureKind.LINE,
    'MultiLineString': FeatureKind.LINE,
    'Polygon': FeatureKind.AREA,
    'MultiPolygon': FeatureKind.AREA,
}

# Property holding the feature id if the GeoJSON feature has no top-level id
ID_PROPERTY = '@id'

# Ids written by OSM exports such as Overpass: "node/1", "way/2", "relation/3"
OSM_ID = re.compile(r'(?:node|way|relation)/(-?[0-9]+)')


def _parse_id(value: Any) -> int:
    if isinstance(value, bool):
        raise FeatureContractError(f"Invalid feature id: {value!r}", feature_id=value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        match = OSM_ID.fullmatch(value.strip())
        if match:
            value = match.group(1)
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise FeatureContractError(f"Invalid feature id: {value!r}", feature_id=value)


def _parse_kind(value: Any, feature_id: Any = None) -> FeatureKind:
    if isinstance(value, FeatureKind):
        return value
    try:
        return FeatureKind(str(value).strip().lower())
    except ValueError:
        raise FeatureContractError(f"Invalid feature kind: {value!r}", feature_id=feature_id)


def feature_from_geojson(data: Dict[str, Any]) -> Feature:
    """
    Create a feature from a GeoJSON Feature mapping.

    The kind is derived from the geometry type, unless the mapping has an
    explicit "kind". Properties become tags; numbers and booleans are
    converted to strings, null values violate the input contract.

    Raises:
        FeatureContractError: If id, kind or tags are unusable.
    """
    properties = data.get('properties') or {}
    if not isinstance(properties, dict):
        raise FeatureContractError(f"properties must be an object, got {type(properties).__name__}")

    raw_id = data.get('id', properties.get(ID_PROPERTY))
    if raw_id is None:
        raise FeatureContractError("Feature has no id")
    feature_id = _parse_id(raw_id)

    geometry = data.get('geometry')
    if data.get('kind') is not None:
        kind = _parse_kind(data['kind'], feature_id)
    else:
        geometry_type = geometry.get('type') if isinstance(geometry, dict) else None
        if geometry_type not in GEOMETRY_KINDS:
            raise FeatureContractError(
                f"Cannot derive kind from geometry type {geometry_type!r}",
                feature_id=feature_id,
            )
        kind = GEOMETRY_KINDS[geometry_type]

    tags: List[Tuple[str, str]] = []
    for key, value in properties.items():
        if key == ID_PROPERTY:
            continue
        if value is None:
            raise FeatureContractError(f"Value of tag '{key}' is null", feature_id=feature_id)
        if isinstance(value, bool):
            value = 'yes' if value else 'no'
        tags.append((str(key), value if isinstance(value, str) else str(value)))

    try:
        return Feature(id=feature_id, kind=kind, tags=Tags(tags), geometry=geometry)
    except FeatureContractError as e:
        raise FeatureContractError(e.message, feature_id=feature_id) from e


def features_from_geojson(collection: Dict[str, Any]) -> Iterator[Feature]:
    """Iterate over the features of a GeoJSON FeatureCollection."""
    if collection.get('type') == 'Feature':
        yield feature_from_geojson(collection)
        return
    for item in collection.get('features', []):
        yield feature_from_geojson(item)


def _cell_to_str(value: Any) -> str:
    # Excel hands over integral numbers as floats
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_empty(value: Any) -> bool:
    if isinstance(value, (list, tuple, dict)):
        return False
    return bool(pd.isna(value))


def features_from_frame(
    df: pd.DataFrame,
    id_column: str = 'id',
    kind_column: str = 'kind',
    geometry_column: Optional[str] = 'geometry',
) -> Iterator[Feature]:
    """
    Create one feature per row of a DataFrame.

    Every column except id, kind and geometry is a tag. Empty cells
    (NaN/None) are absent tags, not empty values.

    Raises:
        FeatureContractError: If the id or kind column is missing or a row
            has an unusable id or kind.
    """
    for required in (id_column, kind_column):
        if required not in df.columns:
            raise FeatureContractError(f"Column '{required}' is missing")

    special = {id_column, kind_column, geometry_column}
    tag_columns = [col for col in df.columns if col not in special]

    for idx, row in df.iterrows():
        if _is_empty(row[id_column]):
            raise FeatureContractError(f"Row {idx} has no feature id")
        feature_id = _parse_id(row[id_column])
        kind = _parse_kind(row[kind_column], feature_id)

        geometry = None
        if geometry_column in df.columns and not _is_empty(row[geometry_column]):
            geometry = row[geometry_column]

        tags = [
            (str(col), _cell_to_str(row[col]))
            for col in tag_columns
            if not _is_empty(row[col])
        ]
        yield Feature(id=feature_id, kind=kind, tags=Tags(tags), geometry=geometry)
