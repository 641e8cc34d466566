"""
Checks for roads: lines carrying a highway=* tag.
"""

from functools import partial
from typing import AbstractSet

from ..base import Check, FeatureClass, RuleSet, Tags
from ..config import RuleConfig
from ..grammar import lanes_ok, maxheight_ok, maxspeed_ok, name_plausible, oneway_ok


def name_missing(tags: Tags, highways: AbstractSet[str]) -> bool:
    """
    A road of the given classes must have a name or a ref.

    Any name or ref counts, even a broken one. Roads of other classes
    are not affected.
    """
    if 'name' in tags or 'ref' in tags:
        return True
    return tags.get('highway') not in highways


def highway_road(tags: Tags) -> bool:
    """highway=road is a placeholder for roads whose class is not known yet."""
    return tags.get('highway') != 'road'


def highway_known(tags: Tags, known: AbstractSet[str]) -> bool:
    highway = tags.get('highway')
    if highway is None:
        return True
    return highway in known


def create_highway_rule_set(config: RuleConfig) -> RuleSet:
    checks = (
        Check(
            predicate=lambda tags: lanes_ok(tags.get('lanes')),
            focus_key='lanes',
            category='lanes',
            name="Lane count",
            description="lanes must be an integer between 1 and 16",
            example_valid="2",
            example_invalid="0, 17, 2;3",
        ),
        Check(
            predicate=lambda tags: name_plausible(tags.get('name')),
            focus_key='name',
            category='name_fixme',
            name="Placeholder name",
            description="name must not be 'fixme', 'unknown' or contain a question mark",
            example_valid="Main Street",
            example_invalid="fixme, Main St?",
        ),
        Check(
            predicate=lambda tags: oneway_ok(tags.get('oneway')),
            focus_key='oneway',
            category='oneway',
            name="Oneway value",
            description="oneway must be yes, no or -1",
            example_valid="yes",
            example_invalid="true, 1",
        ),
        Check(
            predicate=lambda tags: maxheight_ok(tags.get('maxheight')),
            focus_key='maxheight',
            category='maxheight',
            name="Height limit",
            description="maxheight must be metres, feet/inches, none or physical",
            example_valid="3.5, 12'6\"",
            example_invalid="3,5 m, 12'x",
        ),
        Check(
            predicate=lambda tags: maxspeed_ok(tags.get('maxspeed'), config.speed_constants),
            focus_key='maxspeed',
            category='maxspeed',
            name="Speed limit",
            description="maxspeed must be km/h (1-150), mph (1-112), none, signals or a speed-zone constant",
            example_valid="50, 70 mph, DE:urban",
            example_invalid="130 mph, 50 km/h",
        ),
        Check(
            predicate=partial(name_missing, highways=config.major_highways),
            focus_key='highway',
            category='name_missing_major',
            name="Major road without name",
            description="Major roads need a name or a ref",
            example_valid="highway=primary + ref=B 1",
            example_invalid="highway=primary",
        ),
        Check(
            predicate=partial(name_missing, highways=config.minor_highways),
            focus_key='highway',
            category='name_missing_minor',
            name="Minor road without name",
            description="Residential roads, living streets and pedestrian zones need a name or a ref",
            example_valid="highway=residential + name=Main Street",
            example_invalid="highway=residential",
        ),
        Check(
            predicate=highway_road,
            focus_key=None,
            category='road',
            name="Unclassified road",
            description="highway=road must be replaced by a real road class",
            example_valid="highway=service",
            example_invalid="highway=road",
        ),
        Check(
            predicate=partial(highway_known, known=config.known_highways),
            focus_key='highway',
            category='type_unknown',
            name="Unknown road class",
            description="highway value is not a known road class",
            example_valid="highway=track",
            example_invalid="highway=residental",
        ),
    )
    return RuleSet(feature_class=FeatureClass.HIGHWAY, checks=checks)
