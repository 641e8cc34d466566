"""
Base types for the GeoTagCheck validation framework.

To add a new check:
1. Write a predicate that returns True when the tags are conformant
2. Wrap it in a Check with the key it is about and an output category
3. Append it to the rule set factory of its feature class (see rules/)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple


# Feature ids are signed 64-bit integers
MIN_FEATURE_ID = -2 ** 63
MAX_FEATURE_ID = 2 ** 63 - 1


class FeatureKind(Enum):
    """Geometry kinds delivered by the input stream."""
    POINT = "point"
    LINE = "line"
    AREA = "area"


class FeatureClass(Enum):
    """Feature classes, each with its own rule set."""
    HIGHWAY = "highway"
    PLACE = "place"
    TAGGING = "tagging"


class FeatureContractError(ValueError):
    """
    Raised when the input stream hands over a feature that violates the
    input contract (non-string tag, duplicate key, wrong kind).

    Malformed tag values are never reported this way, they are defects.
    """

    def __init__(self, message: str, feature_id: Any = None):
        self.message = message
        self.feature_id = feature_id
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'feature_id': self.feature_id,
            'message': self.message,
        }


class Tags:
    """Ordered, key-unique tag list of a feature."""

    __slots__ = ('_pairs', '_index')

    def __init__(self, pairs: Iterable[Tuple[str, str]] = ()):
        self._pairs: Tuple[Tuple[str, str], ...] = tuple(
            (key, value) for key, value in pairs
        )
        self._index: Dict[str, str] = {}
        for key, value in self._pairs:
            if not isinstance(key, str):
                raise FeatureContractError(f"Tag key must be a string, got {type(key).__name__}")
            if not isinstance(value, str):
                raise FeatureContractError(
                    f"Value of tag '{key}' must be a string, got {type(value).__name__}"
                )
            if key in self._index:
                raise FeatureContractError(f"Duplicate tag key: '{key}'")
            self._index[key] = value

    @classmethod
    def from_dict(cls, mapping: Dict[str, str]) -> 'Tags':
        return cls(mapping.items())

    def get(self, key: str) -> Optional[str]:
        """Return the value of a key or None if the key is absent."""
        return self._index.get(key)

    def keys(self) -> List[str]:
        return [key for key, _ in self._pairs]

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tags):
            return NotImplemented
        return self._pairs == other._pairs

    def __hash__(self) -> int:
        return hash(self._pairs)

    def __repr__(self) -> str:
        return f"Tags({list(self._pairs)!r})"


@dataclass(frozen=True)
class Feature:
    """
    A geographic feature handed over by the input stream.

    The geometry is an opaque handle. It is never inspected, only copied
    into the defects raised for this feature.
    """
    id: int
    kind: FeatureKind
    tags: Tags = field(default_factory=Tags)
    geometry: Any = None

    def __post_init__(self):
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise FeatureContractError(
                f"Feature id must be an integer, got {type(self.id).__name__}",
                feature_id=self.id,
            )
        if not MIN_FEATURE_ID <= self.id <= MAX_FEATURE_ID:
            raise FeatureContractError("Feature id is out of the signed 64-bit range", feature_id=self.id)
        if not isinstance(self.kind, FeatureKind):
            raise FeatureContractError(f"Invalid feature kind: {self.kind!r}", feature_id=self.id)
        if not isinstance(self.tags, Tags):
            try:
                tags = Tags(self.tags.items() if isinstance(self.tags, dict) else self.tags)
            except FeatureContractError as e:
                raise FeatureContractError(e.message, feature_id=self.id) from e
            object.__setattr__(self, 'tags', tags)


@dataclass(frozen=True)
class Check:
    """
    A named predicate over a feature's tags.

    For feature-level checks the predicate receives the Tags of the feature.
    For tag-level checks (tagging hygiene) it receives one (key, value) pair
    at a time and the offending key becomes the focus key of the defect.
    """
    predicate: Callable[..., bool]
    focus_key: Optional[str]
    category: str
    name: str = ""
    description: str = ""
    example_valid: Optional[str] = None
    example_invalid: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'category': self.category,
            'focus_key': self.focus_key,
            'name': self.name,
            'description': self.description,
            'example_valid': self.example_valid,
            'example_invalid': self.example_invalid,
        }


@dataclass(frozen=True)
class RuleSet:
    """
    Ordered, immutable list of checks for one feature class.

    per_tag marks rule sets whose predicates take (key, value) pairs.
    """
    feature_class: FeatureClass
    checks: Tuple[Check, ...]
    per_tag: bool = False

    @property
    def categories(self) -> List[str]:
        return [c.category for c in self.checks]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'feature_class': self.feature_class.value,
            'per_tag': self.per_tag,
            'checks': [c.to_dict() for c in self.checks],
        }


@dataclass(frozen=True)
class Defect:
    """A single failed check on a single feature."""
    feature_id: int
    feature_kind: FeatureKind
    category: str
    focus_key: Optional[str]
    focus_value: Optional[str]
    other_tags: str
    geometry: Any = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'feature_id': self.feature_id,
            'feature_kind': self.feature_kind.value,
            'category': self.category,
            'focus_key': self.focus_key,
            'focus_value': self.focus_value,
            'other_tags': self.other_tags,
            'geometry': self.geometry,
        }
