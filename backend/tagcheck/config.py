"""
Rule configuration: value whitelists and diagnostic field bounds.

The whitelists are closed enumerations without a fixed update policy, so
they live here instead of inside the validators. Override them through the
``options`` dict of an API request or by building a RuleConfig directly.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, FrozenSet, Optional


class ConfigError(ValueError):
    """Raised when a configuration value is out of its valid range."""

    def __init__(self, key: str, value: Any, message: str):
        self.key = key
        self.value = value
        self.message = message
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


# National and regional speed-zone constants accepted as maxspeed values
SPEED_CONSTANTS = frozenset({
    'AT:motorway', 'AT:rural', 'AT:urban',
    'CZ:urban',
    'DE:living_street', 'DE:rural', 'DE:urban', 'DE:walk',
    'IT:rural', 'IT:urban',
    'RO:motorway', 'RO:rural', 'RO:trunk', 'RO:urban',
    'RU:living_street', 'RU:motorway', 'RU:rural', 'RU:urban',
    'UA:rural', 'UA:urban',
    'walk',
})

# Roads which should carry a name or a ref
MAJOR_HIGHWAYS = frozenset({'motorway', 'trunk', 'primary', 'secondary', 'tertiary'})
MINOR_HIGHWAYS = frozenset({'residential', 'living_street', 'pedestrian'})

KNOWN_HIGHWAYS = frozenset({
    'motorway', 'motorway_link', 'trunk', 'trunk_link',
    'primary', 'primary_link', 'secondary', 'secondary_link',
    'tertiary', 'tertiary_link', 'residential', 'living_street',
    'pedestrian', 'unclassified', 'service', 'track', 'path',
    'footway', 'cycleway', 'bridleway', 'steps', 'raceway',
    'bus_guideway', 'construction', 'disused', 'abandoned',
    'proposed', 'platform',
})

KNOWN_PLACES = frozenset({
    'country', 'state', 'region', 'province', 'district', 'county',
    'municipality', 'city', 'borough', 'suburb', 'quarter',
    'neighbourhood', 'city_block', 'plot', 'town', 'village', 'hamlet',
    'isolated_dwelling', 'farm', 'allotments', 'locality', 'island',
    'islet', 'square',
})

FIXME_KEYS = frozenset({'fixme', 'FIXME', 'todo'})

# Key families whose values are free text and may use any letter
WIDE_CHARACTER_BASES = frozenset({
    'name', 'description', 'note', 'comment', 'fixme', 'inscription',
    'addr', 'operator', 'brand', 'destination',
})


@dataclass(frozen=True)
class RuleConfig:
    """
    Immutable rule configuration.

    Built once at startup and handed to the rule set factories and the
    diagnostic serializer.

    Attributes:
        max_field_length: Upper bound of the diagnostic tags field.
        max_tag_length: A rendered ``key=value|`` must be shorter than this
            to appear in the diagnostic tags field.
        separator: Character between tags in the diagnostic tags field.
        min_key_length: Keys of this length or shorter look truncated.
        max_key_length: Keys longer than this look like a typo.
    """
    max_field_length: int = 254
    max_tag_length: int = 50
    separator: str = '|'
    min_key_length: int = 2
    max_key_length: int = 50
    speed_constants: FrozenSet[str] = SPEED_CONSTANTS
    major_highways: FrozenSet[str] = MAJOR_HIGHWAYS
    minor_highways: FrozenSet[str] = MINOR_HIGHWAYS
    known_highways: FrozenSet[str] = KNOWN_HIGHWAYS
    known_places: FrozenSet[str] = KNOWN_PLACES
    fixme_keys: FrozenSet[str] = FIXME_KEYS
    wide_character_bases: FrozenSet[str] = WIDE_CHARACTER_BASES

    def __post_init__(self):
        for name in ('max_field_length', 'max_tag_length', 'min_key_length', 'max_key_length'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(name, value, "must be an integer")
        if not isinstance(self.separator, str):
            raise ConfigError('separator', self.separator, "must be a single character")
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(f.default, frozenset) and not isinstance(value, frozenset):
                raise ConfigError(f.name, value, "must be a set of strings")

        if self.max_field_length <= 0:
            raise ConfigError('max_field_length', self.max_field_length, "must be positive")
        if self.max_tag_length <= 0:
            raise ConfigError('max_tag_length', self.max_tag_length, "must be positive")
        if len(self.separator) != 1:
            raise ConfigError('separator', self.separator, "must be a single character")
        if self.min_key_length < 0 or self.max_key_length <= self.min_key_length:
            raise ConfigError(
                'max_key_length', self.max_key_length,
                f"must be larger than min_key_length ({self.min_key_length})",
            )

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]] = None) -> 'RuleConfig':
        """
        Build a config from a plain options dict.

        Unknown keys are ignored. List or set values replace the matching
        whitelist entirely.
        """
        config = cls()
        if not options:
            return config

        overrides = {}
        for f in fields(cls):
            if f.name not in options:
                continue
            value = options[f.name]
            if isinstance(getattr(config, f.name), frozenset):
                if isinstance(value, str) or not hasattr(value, '__iter__'):
                    raise ConfigError(f.name, value, "must be a list of strings")
                value = frozenset(str(v) for v in value)
            overrides[f.name] = value
        return replace(config, **overrides)


DEFAULT_CONFIG = RuleConfig()
