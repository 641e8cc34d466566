"""
Value grammars for tag values and key names.

Every validator receives the raw tag value, or None if the tag is absent,
and returns True when the value is conformant. An absent tag is always
conformant; missing mandatory tags are reported by separate checks.
"""

import re
import string
import unicodedata
from typing import AbstractSet, Iterable, Optional

from .config import SPEED_CONSTANTS


_INTEGER = re.compile(r'[0-9]+')
_MPH = re.compile(r'([0-9]+) mph')
_METRIC = re.compile(r'[0-9]+(?:\.[0-9]*)?|\.[0-9]+')
_FEET = re.compile(r"([0-9]+)'(.*)", re.DOTALL)
_INCHES = re.compile(r'([0-9]+(?:\.[0-9]*)?)"')

MAX_LANES = 16
MAX_SPEED_KMH = 150
MAX_SPEED_MPH = 112

GOOD_CHARACTERS = frozenset(string.ascii_letters + string.digits + " _-:;.,/+()&'#%@!=*<>\"")
# Typographic punctuation that is fine in free text but not in keywords
WIDE_PUNCTUATION = frozenset('–—‘’“”«»„·?')


def _in_range(digits: str, low: int, high: int) -> bool:
    """Compare a digit string with a range without converting oversized numbers."""
    significant = digits.lstrip('0')
    if len(significant) > len(str(high)):
        return False
    return low <= int(significant or '0') <= high


def lanes_ok(value: Optional[str]) -> bool:
    """A lane count is an integer between 1 and 16."""
    if value is None:
        return True
    if not _INTEGER.fullmatch(value):
        return False
    return _in_range(value, 1, MAX_LANES)


def maxspeed_ok(value: Optional[str], constants: AbstractSet[str] = SPEED_CONSTANTS) -> bool:
    """
    Check a maxspeed value.

    Accepted forms:
    - km/h as a bare integer: 50 (up to 150)
    - mph: "70 mph" (up to 112)
    - "none" and "signals"
    - a national speed-zone constant such as "DE:urban"
    """
    if value is None:
        return True
    if _INTEGER.fullmatch(value):
        return _in_range(value, 1, MAX_SPEED_KMH)
    match = _MPH.fullmatch(value)
    if match:
        return _in_range(match.group(1), 1, MAX_SPEED_MPH)
    if value in ('none', 'signals'):
        return True
    return value in constants


def maxheight_ok(value: Optional[str]) -> bool:
    """
    Check a maxheight value.

    Accepted forms:
    - metres: 3.5
    - feet with optional inches: 12' or 12'6"
    - "none" and "physical"

    An integer followed by anything other than a foot mark is malformed.
    """
    if value is None:
        return True
    if value in ('none', 'physical'):
        return True
    if _METRIC.fullmatch(value):
        return float(value) > 0
    match = _FEET.fullmatch(value)
    # feet only have to be positive
    if not match or not match.group(1).strip('0'):
        return False
    inches = match.group(2)
    if not inches:
        return True
    match = _INCHES.fullmatch(inches)
    return bool(match) and float(match.group(1)) > 0


def oneway_ok(value: Optional[str]) -> bool:
    if value is None:
        return True
    return value in ('yes', 'no', '-1')


def name_plausible(value: Optional[str]) -> bool:
    """Names like "fixme", "unknown" or anything with a question mark are placeholders."""
    if value is None:
        return True
    if value in ('fixme', 'unknown'):
        return False
    return '?' not in value


def is_a_x_key_key(key: str, base: str) -> bool:
    """
    Check if a key belongs to the family of a base key, e.g. "name",
    "short_name", "name:ru" for the base "name".

    The base must be
    * located at the beginning or preceded by a colon or underscore
    * and located at the end or followed by a colon or underscore.

    Only the first occurrence of the base is looked at, so keys containing
    the base twice (named_name) may be misclassified. No common key of the
    bases in use looks like that.
    """
    if key == base:
        return True
    pos = key.find(base)
    if pos == -1:
        return False
    if pos > 0 and key[pos - 1] not in ':_':
        return False
    end = pos + len(base)
    if end < len(key) and key[end] not in ':_':
        return False
    return True


def is_wide_character_key(key: str, bases: Iterable[str]) -> bool:
    return any(is_a_x_key_key(key, base) for base in bases)


def is_good_character(character: str, wide: bool = False) -> bool:
    """
    Check if a character is accepted in a tag value.

    Keyword-like values are limited to ASCII letters, digits and some
    punctuation. Free-text values (wide) may use any letter, mark or number.
    """
    if character in GOOD_CHARACTERS:
        return True
    if not wide:
        return False
    if character in WIDE_PUNCTUATION:
        return True
    return unicodedata.category(character)[0] in 'LMN'


def characters_ok(value: Optional[str], wide: bool = False) -> bool:
    if value is None:
        return True
    return all(is_good_character(c, wide) for c in value)
