"""
Rule set package.

Contains one rule set factory per feature class.
"""

from .highway import create_highway_rule_set
from .places import create_place_rule_set
from .tagging import create_tagging_rule_set

# All rule set factories in dispatch order
ALL_RULE_SETS = [
    create_highway_rule_set,
    create_place_rule_set,
    create_tagging_rule_set,
]

__all__ = [
    'create_highway_rule_set',
    'create_place_rule_set',
    'create_tagging_rule_set',
    'ALL_RULE_SETS',
]
