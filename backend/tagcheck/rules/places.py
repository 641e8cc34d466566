"""
Checks for places: points and areas carrying a place=* tag.
"""

from functools import partial
from typing import AbstractSet

from ..base import Check, FeatureClass, RuleSet, Tags
from ..config import RuleConfig


def place_value_ok(tags: Tags, known: AbstractSet[str]) -> bool:
    place = tags.get('place')
    if place is None:
        return True
    return place in known


def place_has_name(tags: Tags) -> bool:
    return 'place' not in tags or 'name' in tags


def create_place_rule_set(config: RuleConfig) -> RuleSet:
    checks = (
        Check(
            predicate=partial(place_value_ok, known=config.known_places),
            focus_key='place',
            category='place_unknown',
            name="Unknown place type",
            description="place value is not a well-known place type",
            example_valid="village",
            example_invalid="vilage, yes",
        ),
        Check(
            predicate=place_has_name,
            focus_key='place',
            category='place_name_missing',
            name="Place without name",
            description="Places need a name",
            example_valid="place=town + name=Springfield",
            example_invalid="place=town",
        ),
    )
    return RuleSet(feature_class=FeatureClass.PLACE, checks=checks)
