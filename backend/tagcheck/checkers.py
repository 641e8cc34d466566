"""
Feature checkers: apply a rule set to one feature and build the defects.
"""

from typing import Iterator

from .base import Defect, Feature, FeatureClass, FeatureKind, RuleSet
from .config import DEFAULT_CONFIG, RuleConfig
from .serializer import tags_summary


def applies_to(feature_class: FeatureClass, feature: Feature) -> bool:
    """
    Check if a feature belongs to a feature class.

    Features outside the class are skipped by its checker, they are never
    reported for lacking the tag that defines the class.
    """
    if feature_class is FeatureClass.HIGHWAY:
        return feature.kind is FeatureKind.LINE and 'highway' in feature.tags
    if feature_class is FeatureClass.PLACE:
        return feature.kind in (FeatureKind.POINT, FeatureKind.AREA) and 'place' in feature.tags
    if feature_class is FeatureClass.TAGGING:
        return True
    raise ValueError(f"Unknown feature class: {feature_class!r}")


def check_feature(
    rule_set: RuleSet,
    feature: Feature,
    config: RuleConfig = DEFAULT_CONFIG,
) -> Iterator[Defect]:
    """
    Evaluate every check of the rule set against the tags of the feature.

    Yields one defect per failing check, in rule set order. A failing
    check does not stop the remaining ones.
    """
    tags = feature.tags
    for check in rule_set.checks:
        if check.predicate(tags):
            continue
        value = tags.get(check.focus_key) if check.focus_key is not None else None
        yield Defect(
            feature_id=feature.id,
            feature_kind=feature.kind,
            category=check.category,
            focus_key=check.focus_key,
            focus_value=value,
            other_tags=tags_summary(
                tags,
                exclude=check.focus_key,
                max_length=config.max_field_length,
                max_tag_length=config.max_tag_length,
                separator=config.separator,
            ),
            geometry=feature.geometry,
        )


def check_tags(
    rule_set: RuleSet,
    feature: Feature,
    config: RuleConfig = DEFAULT_CONFIG,
) -> Iterator[Defect]:
    """
    Evaluate every tag-level check of the rule set against each tag.

    Yields one defect per failing (check, tag) pair, checks in rule set
    order and tags in feature order. The offending tag is the focus of
    the defect.
    """
    tags = feature.tags
    for check in rule_set.checks:
        for key, value in tags:
            if check.predicate(key, value):
                continue
            yield Defect(
                feature_id=feature.id,
                feature_kind=feature.kind,
                category=check.category,
                focus_key=key,
                focus_value=value,
                other_tags=tags_summary(
                    tags,
                    exclude=key,
                    max_length=config.max_field_length,
                    max_tag_length=config.max_tag_length,
                    separator=config.separator,
                ),
                geometry=feature.geometry,
            )
