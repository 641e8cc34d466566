"""
Tagging hygiene checks which apply to every feature.

Unlike the checks of the other feature classes, these predicates look at
one tag at a time: they receive a key and its value.
"""

from ..base import Check, FeatureClass, RuleSet
from ..config import RuleConfig
from ..grammar import characters_ok, is_wide_character_key


def key_has_no_space(key: str, value: str) -> bool:
    return not any(c.isspace() for c in key)


def key_not_empty(key: str, value: str) -> bool:
    return key != ''


def value_not_empty(key: str, value: str) -> bool:
    # an empty key is reported on its own
    return key == '' or value != ''


def create_tagging_rule_set(config: RuleConfig) -> RuleSet:
    def no_fixme(key: str, value: str) -> bool:
        return key not in config.fixme_keys

    def usual_characters(key: str, value: str) -> bool:
        wide = is_wide_character_key(key, config.wide_character_bases)
        return characters_ok(value, wide)

    def key_length_ok(key: str, value: str) -> bool:
        return config.min_key_length < len(key) <= config.max_key_length

    checks = (
        Check(
            predicate=no_fixme,
            focus_key=None,
            category='fixme',
            name="Fixme note",
            description="Object has a fixme, FIXME or todo tag",
            example_valid="(no fixme tag)",
            example_invalid="fixme=check position",
        ),
        Check(
            predicate=key_has_no_space,
            focus_key=None,
            category='key_with_space',
            name="Key with whitespace",
            description="Keys must not contain whitespace",
            example_valid="addr:street",
            example_invalid="addr: street",
        ),
        Check(
            predicate=key_not_empty,
            focus_key=None,
            category='empty_k',
            name="Empty key",
            description="Keys must not be empty",
            example_valid="name=Foo",
            example_invalid="=Foo",
        ),
        Check(
            predicate=value_not_empty,
            focus_key=None,
            category='empty_v',
            name="Empty value",
            description="Values must not be empty",
            example_valid="name=Foo",
            example_invalid="name=",
        ),
        Check(
            predicate=usual_characters,
            focus_key=None,
            category='unusual_character',
            name="Unusual character",
            description="Value contains a character which is unusual for its key",
            example_valid="surface=paved, name=Zürich",
            example_invalid="surface=pavéd",
        ),
        Check(
            predicate=key_length_ok,
            focus_key=None,
            category='misspelled_key',
            name="Suspicious key length",
            description="Keys shorter than 3 or longer than 50 characters are probably misspelled",
            example_valid="ref",
            example_invalid="hw",
        ),
    )
    return RuleSet(feature_class=FeatureClass.TAGGING, checks=checks, per_tag=True)
